from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint
from datetime import datetime
import uuid

from tradehub.core.database import Base


class ProductSharingAudit(Base):
    __tablename__ = "product_sharing_audit"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id = Column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), index=True
    )
    shared_by = Column(String, ForeignKey("profiles.id"))
    shared_with_role = Column(String, nullable=False)
    action = Column(String, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "action IN ('view', 'order', 'update')", name="ck_sharing_audit_action"
        ),
    )

    def __repr__(self):
        return f"<ProductSharingAudit(product_id={self.product_id}, action={self.action})>"
