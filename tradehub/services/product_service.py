from typing import Optional, List, Dict, Any
from datetime import datetime
import logging

from tradehub.core.config import settings
from tradehub.core.executor import (
    NOT_FOUND,
    SHARING_ACTIONS,
    ExecutorError,
    QueryExecutor,
)
from tradehub.core.query import (
    AnyOf,
    Call,
    Eq,
    Gt,
    ILike,
    Insert,
    Join,
    Neq,
    Query,
    Update,
)
from tradehub.services.visibility import (
    CallerIdentity,
    IS_PUBLIC_PRODUCT,
    IS_WHOLESALE_PRODUCT,
    ownership_for,
    visibility_filter,
)
from tradehub.utils.exceptions import QueryFailure
from tradehub.utils.stock import DELETED, IN_STOCK, derive_stock_status

logger = logging.getLogger(__name__)

PRODUCTS = "products"
PROFILES = "profiles"

WHOLESALER_PROFILE = "wholesaler_profile"
RETAILER_PROFILE = "retailer_profile"

OWNER_JOINS = (
    Join(
        alias=WHOLESALER_PROFILE,
        collection=PROFILES,
        foreign_key="wholesaler_id",
        fields=("business_name",),
    ),
    Join(
        alias=RETAILER_PROFILE,
        collection=PROFILES,
        foreign_key="retailer_id",
        fields=("business_name",),
    ),
)

# Catalogues : seul le profil joint est renseigné, l'autre nom reste absent
APPROVED_WHOLESALER = (
    Join(
        alias=WHOLESALER_PROFILE,
        collection=PROFILES,
        foreign_key="wholesaler_id",
        fields=("business_name",),
        inner=True,
        filters=(Eq("is_approved", True),),
    ),
)
APPROVED_RETAILER = (
    Join(
        alias=RETAILER_PROFILE,
        collection=PROFILES,
        foreign_key="retailer_id",
        fields=("business_name",),
        inner=True,
        filters=(Eq("is_approved", True),),
    ),
)

OWNER_NAMES = {
    WHOLESALER_PROFILE: ("wholesaler_name", "UNKNOWN_WHOLESALER_NAME"),
    RETAILER_PROFILE: ("retailer_name", "UNKNOWN_RETAILER_NAME"),
}


class ProductService:
    """
    Lecture et écriture des produits selon le rôle de l'appelant.

    Les lectures appliquent toutes le même prédicat de visibilité
    (services.visibility) et joignent le nom commercial du grossiste et du
    détaillant. Les écritures ne vérifient pas le rôle.
    """

    def __init__(self, executor: QueryExecutor):
        self.executor = executor

    def _fetch(self, query: Query, action: str) -> List[Dict[str, Any]]:
        try:
            return self.executor.fetch(query)
        except ExecutorError as e:
            logger.error(f"Error {action}: {e.message}")
            raise QueryFailure(e.message, e.code) from e

    def _visible(self, caller: CallerIdentity, *filters) -> tuple:
        clauses = [Neq("status", DELETED)]
        predicate = visibility_filter(caller)
        if predicate is not None:
            clauses.append(predicate)
        clauses.extend(filters)
        return tuple(clauses)

    def _with_owner_names(
        self, row: Dict[str, Any], joins: tuple = OWNER_JOINS
    ) -> Dict[str, Any]:
        """Seuls les profils joints reçoivent un nom (ou le libellé par défaut)"""
        product = dict(row)
        for join in joins:
            profile = product.pop(join.alias, None) or {}
            key, placeholder = OWNER_NAMES[join.alias]
            product[key] = profile.get("business_name") or getattr(settings, placeholder)
        return product

    def list_visible(self, caller: CallerIdentity) -> List[Dict[str, Any]]:
        query = Query(
            collection=PRODUCTS,
            filters=self._visible(caller, Gt("stock", 0)),
            joins=OWNER_JOINS,
            order_by="name",
        )
        rows = self._fetch(query, "fetching products")
        return [self._with_owner_names(row) for row in rows]

    def find_by_id(
        self, product_id: str, caller: CallerIdentity
    ) -> Optional[Dict[str, Any]]:
        """Un produit invisible pour l'appelant est traité comme absent"""
        query = Query(
            collection=PRODUCTS,
            filters=self._visible(caller, Eq("id", product_id)),
            joins=OWNER_JOINS,
            single=True,
        )
        try:
            row = self.executor.fetch(query)[0]
        except ExecutorError as e:
            if e.code == NOT_FOUND:
                return None
            logger.error(f"Error fetching product {product_id}: {e.message}")
            raise QueryFailure(e.message, e.code) from e

        return self._with_owner_names(row)

    def search(
        self,
        term: str,
        caller: CallerIdentity,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        filters = [
            AnyOf((ILike("name", term), ILike("description", term))),
            Gt("stock", 0),
        ]
        if category and category != "all":
            filters.append(Eq("category", category))

        query = Query(
            collection=PRODUCTS,
            filters=self._visible(caller, *filters),
            joins=OWNER_JOINS,
            order_by="name",
        )
        rows = self._fetch(query, "searching products")
        return [self._with_owner_names(row) for row in rows]

    def list_categories(self, caller: CallerIdentity) -> List[str]:
        categories = []
        for product in self.list_visible(caller):
            category = product.get("category")
            if category and category not in categories:
                categories.append(category)
        return categories

    def list_wholesale_catalog(self) -> List[Dict[str, Any]]:
        """Produits grossistes en stock dont le grossiste est approuvé"""
        query = Query(
            collection=PRODUCTS,
            filters=(
                Eq(IS_WHOLESALE_PRODUCT, True),
                Neq("status", DELETED),
                Gt("stock", 0),
            ),
            joins=APPROVED_WHOLESALER,
            order_by="name",
        )
        rows = self._fetch(query, "fetching wholesale products")
        return [self._with_owner_names(row, APPROVED_WHOLESALER) for row in rows]

    def list_retail_catalog(self) -> List[Dict[str, Any]]:
        """Produits publics en stock dont le détaillant est approuvé"""
        query = Query(
            collection=PRODUCTS,
            filters=(
                Eq(IS_PUBLIC_PRODUCT, True),
                Neq("status", DELETED),
                Gt("stock", 0),
            ),
            joins=APPROVED_RETAILER,
            order_by="name",
        )
        rows = self._fetch(query, "fetching retail products")
        return [self._with_owner_names(row, APPROVED_RETAILER) for row in rows]

    def create(self, data: Dict[str, Any], caller: CallerIdentity) -> Dict[str, Any]:
        payload = {
            **data,
            "user_id": caller.user_id,
            "status": IN_STOCK,
            **ownership_for(caller),
        }

        try:
            product = self.executor.insert(Insert(PRODUCTS, payload))
        except ExecutorError as e:
            logger.error(f"Error creating product: {e.message}")
            raise QueryFailure(e.message, e.code) from e

        logger.info(
            f"Product created: {product['id']} - {product['name']} "
            f"by {caller.role.value} {caller.user_id}"
        )
        return product

    def _write(self, product_id: str, values: Dict[str, Any], action: str):
        mutation = Update(
            PRODUCTS,
            values={**values, "updated_at": datetime.utcnow()},
            filters=(Eq("id", product_id),),
            returning=True,
        )
        try:
            rows = self.executor.update(mutation)
        except ExecutorError as e:
            logger.error(f"Error {action}: {e.message}")
            raise QueryFailure(e.message, e.code) from e

        return rows[0] if rows else None

    def update_stock(self, product_id: str, new_stock: int) -> Optional[Dict[str, Any]]:
        """
        Met à jour le stock et recalcule le statut (rupture / stock faible).
        Un produit supprimé reste supprimé.
        """
        if new_stock < 0:
            raise ValueError("Stock cannot be negative")

        query = Query(
            collection=PRODUCTS, filters=(Eq("id", product_id),), single=True
        )
        try:
            current = self.executor.fetch(query)[0]
        except ExecutorError as e:
            if e.code == NOT_FOUND:
                return None
            logger.error(f"Error updating stock: {e.message}")
            raise QueryFailure(e.message, e.code) from e

        status = derive_stock_status(
            new_stock, current.get("min_stock"), current.get("status")
        )
        product = self._write(
            product_id, {"stock": new_stock, "status": status}, "updating stock"
        )

        logger.info(f"Stock updated for {product_id}: {current.get('stock')} -> {new_stock}")
        return product

    def update(
        self, product_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        return self._write(product_id, fields, "updating product")

    def soft_delete(self, product_id: str) -> bool:
        product = self._write(product_id, {"status": DELETED}, "deleting product")
        if product:
            logger.info(f"Product soft-deleted: {product_id}")
        return product is not None

    def log_product_sharing(
        self,
        product_id: str,
        shared_by: str,
        shared_with_role: str,
        action: str,
    ) -> None:
        """Journal d'audit non critique : un échec est loggé, jamais propagé"""
        if action not in SHARING_ACTIONS:
            raise ValueError(f"Invalid sharing action: {action}")

        try:
            self.executor.call(
                Call(
                    "log_product_sharing",
                    {
                        "product_id": product_id,
                        "shared_by": shared_by,
                        "shared_with_role": shared_with_role,
                        "action": action,
                    },
                )
            )
        except ExecutorError as e:
            logger.warning(f"Error logging product sharing for {product_id}: {e.message}")
