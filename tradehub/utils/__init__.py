from tradehub.utils.stock import (
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    DELETED,
    PRODUCT_STATUSES,
    derive_stock_status,
)
from tradehub.utils.exceptions import (
    QueryFailure,
    ProductNotFoundException,
    AuthenticationRequiredException,
)

__all__ = [
    "IN_STOCK",
    "LOW_STOCK",
    "OUT_OF_STOCK",
    "DELETED",
    "PRODUCT_STATUSES",
    "derive_stock_status",

    "QueryFailure",
    "ProductNotFoundException",
    "AuthenticationRequiredException",
]
