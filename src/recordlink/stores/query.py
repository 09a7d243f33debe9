"""Store streaming ORM rows from a SQLAlchemy session."""

from __future__ import annotations

from typing import Any, Hashable, Iterator, Optional, Tuple, Union

from sqlalchemy import inspect, select, text
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from ..config.policies import StorePolicy
from ..utils import get_logger

_LOGGER = get_logger(module=__name__)

WhereClause = Union[str, ColumnElement[bool], None]


class QueryStore:
    """Iterate the rows of a mapped model, keyed by primary key.

    ``where`` may be a SQL expression or a raw SQL fragment (wrapped in
    :func:`sqlalchemy.text`). Rows are ordered by primary key and fetched
    ``batch_size`` at a time.
    """

    def __init__(
        self,
        session: Session,
        model: type,
        where: WhereClause = None,
        batch_size: int = 1000,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.session = session
        self.model = model
        self.where = text(where) if isinstance(where, str) else where
        self.batch_size = batch_size
        mapper = inspect(model)
        self._pk_columns = list(mapper.primary_key)
        self._pk_attrs = [mapper.get_property_by_column(column).key for column in self._pk_columns]

    @classmethod
    def from_policy(cls, session: Session, model: type, policy: StorePolicy, where: WhereClause = None) -> "QueryStore":
        return cls(session, model, where=where, batch_size=policy.batch_size)

    def _record_id(self, record: Any) -> Hashable:
        values = tuple(getattr(record, attr) for attr in self._pk_attrs)
        return values[0] if len(values) == 1 else values

    def statement(self):
        stmt = select(self.model)
        if self.where is not None:
            stmt = stmt.where(self.where)
        return stmt.order_by(*self._pk_columns).execution_options(yield_per=self.batch_size)

    def iter_records(self) -> Iterator[Tuple[Hashable, Any]]:
        _LOGGER.debug("Streaming query store", model=self.model.__name__, batch_size=self.batch_size)
        for record in self.session.scalars(self.statement()):
            yield self._record_id(record), record

    def find(self, record_id: Hashable) -> Optional[Any]:
        return self.session.get(self.model, record_id)


__all__ = ["QueryStore", "WhereClause"]
