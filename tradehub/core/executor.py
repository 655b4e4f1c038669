"""
Exécuteur distant : reçoit une description déclarative (tradehub.core.query)
et renvoie des lignes sous forme de dictionnaires, ou lève ExecutorError.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional
import logging

from sqlalchemy import and_, inspect, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from tradehub.core.query import (
    AnyOf,
    Call,
    Eq,
    Filter,
    Gt,
    ILike,
    Insert,
    Join,
    Neq,
    Query,
    Update,
)
from tradehub.middleware.transaction_handler import transactional
from tradehub.models import Product, Profile, ProductSharingAudit

logger = logging.getLogger(__name__)

NOT_FOUND = "not_found"
MULTIPLE_ROWS = "multiple_rows"
UNDEFINED = "undefined"
CHECK_VIOLATION = "check_violation"

SHARING_ACTIONS = ("view", "order", "update")


class ExecutorError(Exception):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class QueryExecutor(ABC):
    @abstractmethod
    def fetch(self, query: Query) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def insert(self, mutation: Insert) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update(self, mutation: Update) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def call(self, call: Call) -> None:
        ...


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_dict(instance) -> Dict[str, Any]:
    return {
        attr.key: getattr(instance, attr.key)
        for attr in inspect(instance).mapper.column_attrs
    }


class SqlAlchemyExecutor(QueryExecutor):
    """Exécuteur adossé à une session SQLAlchemy"""

    collections = {
        "products": Product,
        "profiles": Profile,
        "product_sharing_audit": ProductSharingAudit,
    }

    def __init__(self, db: Session):
        self.db = db
        self.procedures: Dict[str, Callable[..., None]] = {
            "log_product_sharing": self._log_product_sharing,
        }

    @contextmanager
    def _translate_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during {action}: {e}")
            raise ExecutorError(str(getattr(e, "orig", None) or e)) from e

    def _model(self, collection: str):
        model = self.collections.get(collection)
        if model is None:
            raise ExecutorError(
                f'relation "{collection}" does not exist', code=UNDEFINED
            )
        return model

    def _column(self, model, name: str, entity=None):
        if name not in model.__table__.columns:
            raise ExecutorError(
                f"column {model.__tablename__}.{name} does not exist", code=UNDEFINED
            )
        return getattr(entity if entity is not None else model, name)

    def _check_columns(self, model, values: Dict[str, Any]):
        for name in values:
            self._column(model, name)

    def _compile(self, model, clause: Filter, entity=None):
        if isinstance(clause, AnyOf):
            return or_(*[self._compile(model, c, entity) for c in clause.clauses])

        column = self._column(model, clause.column, entity)

        if isinstance(clause, Eq):
            if clause.value is None:
                return column.is_(None)
            return column == clause.value
        if isinstance(clause, Neq):
            return column.is_distinct_from(clause.value)
        if isinstance(clause, Gt):
            return column > clause.value
        if isinstance(clause, ILike):
            return column.ilike(f"%{_escape_like(clause.term)}%", escape="\\")

        raise ExecutorError(f"unsupported filter: {clause!r}")

    def _embed(self, join: Join, row) -> Optional[Dict[str, Any]]:
        if row is None:
            return None
        return {name: getattr(row, name) for name in join.fields}

    def fetch(self, query: Query) -> List[Dict[str, Any]]:
        model = self._model(query.collection)

        with self._translate_errors(f"fetch from {query.collection}"):
            targets = []
            q = self.db.query(model)

            for join in query.joins:
                target_model = self._model(join.collection)
                for name in join.fields:
                    self._column(target_model, name)

                target = aliased(target_model, name=join.alias)
                condition = and_(
                    self._column(model, join.foreign_key) == target.id,
                    *[self._compile(target_model, c, target) for c in join.filters],
                )
                q = q.add_entity(target)
                if join.inner:
                    q = q.join(target, condition)
                else:
                    q = q.outerjoin(target, condition)
                targets.append(join)

            if query.filters:
                q = q.filter(*[self._compile(model, c) for c in query.filters])

            if query.order_by:
                column = self._column(model, query.order_by)
                q = q.order_by(column.desc() if query.descending else column.asc())

            if query.single:
                q = q.limit(2)
            elif query.limit is not None:
                q = q.limit(query.limit)

            results = q.all()

        rows = []
        for result in results:
            if targets:
                instance, *embedded = result
            else:
                instance, embedded = result, []

            row = _as_dict(instance)
            for join, target_row in zip(targets, embedded):
                row[join.alias] = self._embed(join, target_row)
            rows.append(row)

        if query.single:
            if not rows:
                raise ExecutorError(
                    "JSON object requested, multiple (or no) rows returned",
                    code=NOT_FOUND,
                )
            if len(rows) > 1:
                raise ExecutorError(
                    "JSON object requested, multiple (or no) rows returned",
                    code=MULTIPLE_ROWS,
                )

        return rows

    def insert(self, mutation: Insert) -> Dict[str, Any]:
        model = self._model(mutation.collection)
        self._check_columns(model, mutation.values)

        with self._translate_errors(f"insert into {mutation.collection}"):
            return self._insert(model, mutation.values)

    @transactional
    def _insert(self, model, values: Dict[str, Any]) -> Dict[str, Any]:
        instance = model(**values)
        self.db.add(instance)
        self.db.flush()
        self.db.refresh(instance)
        return _as_dict(instance)

    def update(self, mutation: Update) -> List[Dict[str, Any]]:
        model = self._model(mutation.collection)
        self._check_columns(model, mutation.values)
        criteria = [self._compile(model, c) for c in mutation.filters]

        with self._translate_errors(f"update of {mutation.collection}"):
            rows = self._update(model, mutation.values, criteria)

        return rows if mutation.returning else []

    @transactional
    def _update(self, model, values: Dict[str, Any], criteria) -> List[Dict[str, Any]]:
        instances = self.db.query(model).filter(*criteria).all()
        for instance in instances:
            for key, value in values.items():
                setattr(instance, key, value)
        self.db.flush()
        return [_as_dict(instance) for instance in instances]

    def call(self, call: Call) -> None:
        procedure = self.procedures.get(call.procedure)
        if procedure is None:
            raise ExecutorError(
                f"function {call.procedure} does not exist", code=UNDEFINED
            )

        with self._translate_errors(f"call to {call.procedure}"):
            procedure(**call.params)

    @transactional
    def _log_product_sharing(
        self, product_id: str, shared_by: str, shared_with_role: str, action: str
    ) -> None:
        if action not in SHARING_ACTIONS:
            raise ExecutorError(
                f"invalid sharing action: {action}", code=CHECK_VIOLATION
            )

        self.db.add(
            ProductSharingAudit(
                product_id=product_id,
                shared_by=shared_by,
                shared_with_role=shared_with_role,
                action=action,
            )
        )
        self.db.flush()
