from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Literal
from datetime import date, datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=100)
    sku: Optional[str] = Field(None, max_length=64)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    max_stock: Optional[int] = Field(None, ge=0)
    buy_price: float = Field(0.0, ge=0)
    sell_price: float = Field(0.0, ge=0)
    supplier: Optional[str] = None
    expiry_date: Optional[date] = None
    batch_number: Optional[str] = None
    is_wholesale_product: bool = False
    is_retail_product: bool = False
    is_public_product: bool = True

    @field_validator("name", "category")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Value cannot be blank")
        return v.strip()

    @model_validator(mode="after")
    def validate_stock_bounds(self):
        if self.max_stock is not None and self.max_stock < self.min_stock:
            raise ValueError("max_stock cannot be lower than min_stock")
        return self


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    sku: Optional[str] = None
    min_stock: Optional[int] = Field(None, ge=0)
    max_stock: Optional[int] = Field(None, ge=0)
    buy_price: Optional[float] = Field(None, ge=0)
    sell_price: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    expiry_date: Optional[date] = None
    batch_number: Optional[str] = None
    is_wholesale_product: Optional[bool] = None
    is_retail_product: Optional[bool] = None
    is_public_product: Optional[bool] = None


class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0)


class SharingLogRequest(BaseModel):
    shared_with_role: str = Field(..., min_length=1, max_length=50)
    action: Literal["view", "order", "update"]


class ProductResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category: str
    sku: Optional[str] = None
    stock: int
    min_stock: int
    max_stock: Optional[int] = None
    buy_price: float
    sell_price: float
    supplier: Optional[str] = None
    expiry_date: Optional[date] = None
    batch_number: Optional[str] = None
    last_ordered: Optional[datetime] = None
    status: str
    user_id: str
    is_wholesale_product: bool
    is_retail_product: bool
    is_public_product: bool
    wholesaler_id: Optional[str] = None
    retailer_id: Optional[str] = None
    wholesaler_name: Optional[str] = None
    retailer_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
