"""
Description déclarative des requêtes envoyées à l'exécuteur distant.

Ce sont de simples valeurs immuables : les services les construisent, l'exécuteur
les compile. Aucun accès à la base n'a lieu ici, ce qui permet de tester la
construction des prédicats sans backend.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any


@dataclass(frozen=True)
class Neq:
    column: str
    value: Any


@dataclass(frozen=True)
class Gt:
    column: str
    value: Any


@dataclass(frozen=True)
class ILike:
    """Sous-chaîne insensible à la casse; `term` est pris littéralement."""

    column: str
    term: str


@dataclass(frozen=True)
class AnyOf:
    """OU logique entre plusieurs clauses."""

    clauses: Tuple["Filter", ...]


Filter = Union[Eq, Neq, Gt, ILike, AnyOf]


@dataclass(frozen=True)
class Join:
    """
    Embarque la ligne référencée par `foreign_key` sous la clé `alias`.

    Avec `inner=True`, les lignes parentes sans correspondance (ou dont la
    correspondance ne satisfait pas `filters`) sont exclues du résultat.
    """

    alias: str
    collection: str
    foreign_key: str
    fields: Tuple[str, ...]
    inner: bool = False
    filters: Tuple[Filter, ...] = ()


@dataclass(frozen=True)
class Query:
    collection: str
    filters: Tuple[Filter, ...] = ()
    joins: Tuple[Join, ...] = ()
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    single: bool = False


@dataclass(frozen=True)
class Insert:
    collection: str
    values: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Update:
    collection: str
    values: Dict[str, Any] = field(default_factory=dict)
    filters: Tuple[Filter, ...] = ()
    returning: bool = False


@dataclass(frozen=True)
class Call:
    procedure: str
    params: Dict[str, Any] = field(default_factory=dict)
