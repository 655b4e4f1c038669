from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime

from tradehub.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True)
    business_name = Column(String)
    role = Column(String, nullable=False, default="individual")
    is_approved = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Profile(id={self.id}, role={self.role}, business_name={self.business_name})>"
