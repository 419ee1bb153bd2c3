"""
Generic async repository over one ORM model.

Services depend on this uniform contract (find / count / create / update /
delete) and never build SQL themselves.  Filter conditions arrive as the
neutral ``Predicate`` / ``AnyOf`` data produced by the query builder and are
compiled to SQLAlchemy expressions here.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import SortOrder
from app.core.exceptions import InvalidQuery, NotFound, StorageUnavailable
from app.db.base import Base
from app.services.query_builder import EQ, ICONTAINS, AnyOf, Condition, Predicate, Sort

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def _escape_like(value: str) -> str:
    # Escape SQL LIKE metacharacters to prevent wildcard injection
    return value.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")


class SQLAlchemyRepository(Generic[ModelT]):
    model: ClassVar[type[Base]]
    entity_name: ClassVar[str] = "Record"

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── Error mapping ───────────────────────────────────────────────
    @asynccontextmanager
    async def _storage(self) -> AsyncIterator[None]:
        """Surface connectivity failures as ``StorageUnavailable``; never retry."""
        try:
            yield
        except (OperationalError, InterfaceError) as exc:
            logger.error("Storage unavailable (%s): %s", self.entity_name, exc, exc_info=True)
            raise StorageUnavailable() from exc
        except IntegrityError:
            await self._session.rollback()
            raise

    # ── Condition compilation ───────────────────────────────────────
    def _column(self, field: str) -> Any:
        column = getattr(self.model, field, None)
        if column is None:
            raise InvalidQuery(f"Unknown field '{field}' for {self.entity_name}")
        return column

    def _compile(self, condition: Condition) -> ColumnElement[bool]:
        if isinstance(condition, AnyOf):
            return or_(*(self._compile(p) for p in condition.predicates))
        column = self._column(condition.field)
        if condition.op == EQ:
            return column == condition.value
        if condition.op == ICONTAINS:
            return column.ilike(f"%{_escape_like(str(condition.value))}%", escape="\\")
        raise InvalidQuery(f"Unsupported operator '{condition.op}'")

    def _where(self, conditions: Iterable[Condition]) -> list[ColumnElement[bool]]:
        return [self._compile(c) for c in conditions]

    def _order_by(self, sort: Sort | None) -> list[Any]:
        # Ties fall back to insertion order so pages never overlap
        tiebreak = [self.model.seq.asc()]  # type: ignore[attr-defined]
        if sort is None:
            return tiebreak
        column = self._column(sort.field)
        primary = column.asc() if sort.order == SortOrder.ASC else column.desc()
        return [primary, *tiebreak]

    async def _get(self, record_id: str) -> ModelT | None:
        stmt = (
            select(self.model)
            .where(self.model.id == record_id)  # type: ignore[attr-defined]
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()  # type: ignore[return-value]

    # ── Reads ───────────────────────────────────────────────────────
    async def find_by_id(self, record_id: str) -> ModelT:
        async with self._storage():
            obj = await self._get(record_id)
        if obj is None:
            raise NotFound(record_id, self.entity_name)
        return obj

    async def find_unique(self, **natural_key: Any) -> ModelT | None:
        """Look up by a unique column; absence is a normal outcome."""
        async with self._storage():
            result = await self._session.execute(select(self.model).filter_by(**natural_key))
            return result.scalar_one_or_none()  # type: ignore[return-value]

    async def find_many(
        self,
        conditions: Iterable[Condition] = (),
        sort: Sort | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[ModelT]:
        stmt = select(self.model).where(*self._where(conditions)).order_by(*self._order_by(sort))
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._storage():
            result = await self._session.execute(stmt)
            return list(result.scalars().all())  # type: ignore[arg-type]

    async def count(self, conditions: Iterable[Condition] = ()) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self._where(conditions))
        async with self._storage():
            result = await self._session.execute(stmt)
            return int(result.scalar_one())

    # ── Writes ──────────────────────────────────────────────────────
    async def create(self, fields: Mapping[str, Any]) -> ModelT:
        obj = self.model(**fields)
        async with self._storage():
            self._session.add(obj)
            await self._session.commit()
        return await self.find_by_id(obj.id)  # type: ignore[attr-defined]

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> ModelT:
        async with self._storage():
            obj = await self._get(record_id)
            if obj is None:
                raise NotFound(record_id, self.entity_name)
            for name, value in fields.items():
                setattr(obj, name, value)
            await self._session.commit()
        # Re-read so joined relations reflect the new foreign keys
        return await self.find_by_id(record_id)

    async def delete(self, record_id: str) -> ModelT:
        """Delete and return the record as it was before deletion."""
        obj = await self.find_by_id(record_id)
        async with self._storage():
            await self._session.delete(obj)
            await self._session.commit()
        return obj
