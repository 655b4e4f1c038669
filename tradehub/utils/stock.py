from typing import Optional

IN_STOCK = "in-stock"
LOW_STOCK = "low-stock"
OUT_OF_STOCK = "out-of-stock"
DELETED = "deleted"

PRODUCT_STATUSES = (IN_STOCK, LOW_STOCK, OUT_OF_STOCK, DELETED)


def derive_stock_status(
    stock: int, min_stock: Optional[int], current: Optional[str] = None
) -> str:
    if current == DELETED:
        return DELETED

    if stock <= 0:
        return OUT_OF_STOCK

    if stock <= (min_stock or 0):
        return LOW_STOCK

    return IN_STOCK
