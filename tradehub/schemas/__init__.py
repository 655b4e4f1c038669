from tradehub.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    StockUpdate,
    SharingLogRequest,
)

__all__ = [
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "StockUpdate",
    "SharingLogRequest",
]
