from tradehub.models.product import Product
from tradehub.models.profile import Profile
from tradehub.models.sharing_audit import ProductSharingAudit

__all__ = [
    "Product",
    "Profile",
    "ProductSharingAudit",
]
