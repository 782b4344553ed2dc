# psychometric/infrastructure/repositories_base.py
from __future__ import annotations

import builtins
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy import update
from sqlalchemy.orm import Session

T = TypeVar("T")  # ORM model type


class BaseRepository(Generic[T]):
    """
    Lightweight generic repository with common CRUD + query helpers.
    - Entity repos add logging decorators and domain-specific queries.
    - ``update_where`` is the building block for
      status-conditional writes; it runs inside the caller's transaction.
    """

    model: type[T]  # must be set by subclasses

    def __init__(self, session: Session):
        if not hasattr(self, "model") or self.model is None:
            raise ValueError(f"{self.__class__.__name__}.model must be set to an ORM class.")
        self.s = session

    # ---------- Read ----------
    def get(self, id_: Any) -> T | None:
        return self.s.get(self.model, id_)

    def list(
        self,
        *filters: Any,
        order_by: Iterable[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> builtins.list[T]:
        q = self.s.query(self.model)
        for f in filters:
            q = q.filter(f)
        if order_by:
            for ob in order_by:
                q = q.order_by(ob)
        if offset:
            q = q.offset(offset)
        if limit:
            q = q.limit(limit)
        return list(q.all())

    def first(self, *filters: Any, order_by: Iterable[Any] | None = None) -> T | None:
        rows = self.list(*filters, order_by=order_by, limit=1)
        return rows[0] if rows else None

    # ---------- Write ----------
    def create(self, **fields: Any) -> T:
        obj = self.model(**fields)
        self.s.add(obj)
        self.s.flush()  # get PKs without committing
        return obj

    def update(self, obj: T, **fields: Any) -> T:
        for k, v in fields.items():
            setattr(obj, k, v)
        self.s.flush()
        return obj

    def update_where(self, *filters: Any, **values: Any) -> int:
        """Single conditional UPDATE; returns the number of rows it changed."""
        stmt = update(self.model).where(*filters).values(**values)
        result = self.s.execute(stmt.execution_options(synchronize_session=False))
        return int(result.rowcount or 0)

    def delete(self, obj: T) -> None:
        self.s.delete(obj)
        self.s.flush()
