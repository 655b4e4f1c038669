"""
Règles de visibilité des produits par rôle.

Chaque rôle voit un ensemble de « listings » :

    wholesale   -> ses propres produits (wholesaler_id) + catalogue grossiste
    retail      -> catalogue grossiste + ses propres produits (retailer_id)
                   + catalogue détaillant
    individual  -> produits publics
    admin       -> aucune restriction
    autre       -> produits publics

visibility_filter() est le seul constructeur de prédicat; toutes les lectures
du ProductService passent par lui.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from tradehub.core.query import AnyOf, Eq, Filter

WHOLESALER_ID = "wholesaler_id"
RETAILER_ID = "retailer_id"
IS_WHOLESALE_PRODUCT = "is_wholesale_product"
IS_RETAIL_PRODUCT = "is_retail_product"
IS_PUBLIC_PRODUCT = "is_public_product"


class Role(str, Enum):
    WHOLESALE = "wholesale"
    RETAIL = "retail"
    INDIVIDUAL = "individual"
    ADMIN = "admin"
    ANONYMOUS = "anonymous"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Correspondance exacte; tout autre libellé retombe sur ANONYMOUS"""
        if not value:
            return cls.ANONYMOUS
        try:
            return cls(value)
        except ValueError:
            return cls.ANONYMOUS


@dataclass(frozen=True)
class CallerIdentity:
    role: Role
    user_id: Optional[str] = None


@dataclass(frozen=True)
class PrivateListing:
    """Produit appartenant à un vendeur précis"""

    owner_column: str
    owner_id: str

    def to_filter(self) -> Filter:
        return Eq(self.owner_column, self.owner_id)

    def as_columns(self) -> Dict[str, Any]:
        return {self.owner_column: self.owner_id}


@dataclass(frozen=True)
class WholesaleShared:
    def to_filter(self) -> Filter:
        return Eq(IS_WHOLESALE_PRODUCT, True)

    def as_columns(self) -> Dict[str, Any]:
        return {IS_WHOLESALE_PRODUCT: True}


@dataclass(frozen=True)
class RetailShared:
    def to_filter(self) -> Filter:
        return Eq(IS_RETAIL_PRODUCT, True)

    def as_columns(self) -> Dict[str, Any]:
        return {IS_RETAIL_PRODUCT: True}


@dataclass(frozen=True)
class Public:
    def to_filter(self) -> Filter:
        return Eq(IS_PUBLIC_PRODUCT, True)


Visibility = Union[PrivateListing, WholesaleShared, RetailShared, Public]


def _own_listing(column: str, caller: CallerIdentity) -> Tuple[Visibility, ...]:
    # Without a user id an owner clause would match every unowned row
    if not caller.user_id:
        return ()
    return (PrivateListing(column, caller.user_id),)


def visible_listings(caller: CallerIdentity) -> Optional[Tuple[Visibility, ...]]:
    """Listings visibles pour l'appelant; None signifie sans restriction"""
    if caller.role is Role.ADMIN:
        return None
    if caller.role is Role.WHOLESALE:
        return _own_listing(WHOLESALER_ID, caller) + (WholesaleShared(),)
    if caller.role is Role.RETAIL:
        return (
            (WholesaleShared(),)
            + _own_listing(RETAILER_ID, caller)
            + (RetailShared(),)
        )
    return (Public(),)


def visibility_filter(caller: CallerIdentity) -> Optional[Filter]:
    listings = visible_listings(caller)
    if listings is None:
        return None

    clauses = tuple(listing.to_filter() for listing in listings)
    if len(clauses) == 1:
        return clauses[0]
    return AnyOf(clauses)


def ownership_for(caller: CallerIdentity) -> Dict[str, Any]:
    """Colonnes de propriété posées à la création selon le rôle du créateur"""
    if caller.role is Role.WHOLESALE:
        listings = (WholesaleShared(),) + _own_listing(WHOLESALER_ID, caller)
    elif caller.role is Role.RETAIL:
        listings = (RetailShared(),) + _own_listing(RETAILER_ID, caller)
    else:
        return {}

    columns: Dict[str, Any] = {}
    for listing in listings:
        columns.update(listing.as_columns())
    return columns
