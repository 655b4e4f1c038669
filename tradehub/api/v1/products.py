from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from tradehub.core.dependencies import get_caller, get_product_service, require_caller
from tradehub.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    SharingLogRequest,
    StockUpdate,
)
from tradehub.services.product_service import ProductService
from tradehub.services.visibility import CallerIdentity
from tradehub.utils.exceptions import ProductNotFoundException

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=List[ProductResponse])
def list_products(
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = None,
    caller: CallerIdentity = Depends(get_caller),
    service: ProductService = Depends(get_product_service),
):
    """Produits visibles pour l'appelant, filtrés si `search` ou `category`"""
    if search or category:
        return service.search(search or "", caller, category)
    return service.list_visible(caller)


@router.get("/categories", response_model=List[str])
def list_categories(
    caller: CallerIdentity = Depends(get_caller),
    service: ProductService = Depends(get_product_service),
):
    return service.list_categories(caller)


@router.get("/catalog/wholesale", response_model=List[ProductResponse])
def wholesale_catalog(service: ProductService = Depends(get_product_service)):
    return service.list_wholesale_catalog()


@router.get("/catalog/retail", response_model=List[ProductResponse])
def retail_catalog(service: ProductService = Depends(get_product_service)):
    return service.list_retail_catalog()


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    caller: CallerIdentity = Depends(get_caller),
    service: ProductService = Depends(get_product_service),
):
    product = service.find_by_id(product_id, caller)
    if not product:
        raise ProductNotFoundException()

    if caller.user_id and caller.user_id != product["user_id"]:
        service.log_product_sharing(
            product_id, product["user_id"], caller.role.value, "view"
        )

    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    request: ProductCreate,
    caller: CallerIdentity = Depends(require_caller),
    service: ProductService = Depends(get_product_service),
):
    return service.create(request.model_dump(), caller)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    request: ProductUpdate,
    caller: CallerIdentity = Depends(require_caller),
    service: ProductService = Depends(get_product_service),
):
    """Modifier un produit"""
    product = service.update(product_id, request.model_dump(exclude_none=True))
    if not product:
        raise ProductNotFoundException()

    service.log_product_sharing(product_id, caller.user_id, caller.role.value, "update")
    return product


@router.patch("/{product_id}/stock", response_model=ProductResponse)
def update_stock(
    product_id: str,
    request: StockUpdate,
    caller: CallerIdentity = Depends(require_caller),
    service: ProductService = Depends(get_product_service),
):
    product = service.update_stock(product_id, request.stock)
    if not product:
        raise ProductNotFoundException()
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    caller: CallerIdentity = Depends(require_caller),
    service: ProductService = Depends(get_product_service),
):
    if not service.soft_delete(product_id):
        raise ProductNotFoundException()
    return None


@router.post("/{product_id}/sharing-log", status_code=status.HTTP_202_ACCEPTED)
def log_sharing(
    product_id: str,
    request: SharingLogRequest,
    caller: CallerIdentity = Depends(require_caller),
    service: ProductService = Depends(get_product_service),
):
    service.log_product_sharing(
        product_id, caller.user_id, request.shared_with_role, request.action
    )
    return {"status": "accepted"}
