from sqlalchemy import (
    Column,
    Integer,
    Float,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from tradehub.core.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, index=True)
    description = Column(Text)
    category = Column(String, nullable=False, index=True)
    sku = Column(String, index=True)

    stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=0)
    max_stock = Column(Integer)

    buy_price = Column(Float, nullable=False, default=0.0)
    sell_price = Column(Float, nullable=False, default=0.0)

    supplier = Column(String)
    expiry_date = Column(Date)
    batch_number = Column(String)
    last_ordered = Column(DateTime)

    # in-stock, low-stock, out-of-stock, deleted
    status = Column(String, nullable=False, default="in-stock", index=True)

    user_id = Column(String, nullable=False, index=True)

    is_wholesale_product = Column(Boolean, nullable=False, default=False)
    is_retail_product = Column(Boolean, nullable=False, default=False)
    is_public_product = Column(Boolean, nullable=False, default=True)
    wholesaler_id = Column(String, ForeignKey("profiles.id"))
    retailer_id = Column(String, ForeignKey("profiles.id"))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    wholesaler_profile = relationship("Profile", foreign_keys=[wholesaler_id])
    retailer_profile = relationship("Profile", foreign_keys=[retailer_id])

    __table_args__ = (
        Index("ix_products_wholesale_visibility", "is_wholesale_product", "wholesaler_id"),
        Index("ix_products_retail_visibility", "is_retail_product", "retailer_id"),
        Index("ix_products_public_visibility", "is_public_product"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, stock={self.stock}, status={self.status})>"
