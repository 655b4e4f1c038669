"""
Business logic services
"""

from tradehub.services.product_service import ProductService
from tradehub.services.visibility import (
    CallerIdentity,
    Role,
    visibility_filter,
    ownership_for,
)

__all__ = [
    "ProductService",
    "CallerIdentity",
    "Role",
    "visibility_filter",
    "ownership_for",
]
