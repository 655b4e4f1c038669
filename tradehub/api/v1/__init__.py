"""
API v1 routes
"""

from fastapi import APIRouter
from tradehub.api.v1 import products

api_router = APIRouter()

api_router.include_router(products.router)

__all__ = ["api_router"]
