"""Generic async repository with soft-delete, pagination, and tenant isolation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, Iterable, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from onboard.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository. All queries are filtered by client_id.

    Soft-deletes: rows with `deleted_at IS NOT NULL` are excluded from all
    standard reads. Hard-delete is intentionally never exposed.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession, client_id: str):
        self._session = session
        self._client_id = client_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        """Return a SELECT filtered by client_id and excluding soft-deleted rows."""
        q = select(self.model).where(self.model.client_id == self._client_id)
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    def _scope(self) -> list[ColumnElement[bool]]:
        """The tenant / soft-delete predicates as a list, for aggregate queries."""
        clauses = [self.model.client_id == self._client_id]
        if hasattr(self.model, "deleted_at"):
            clauses.append(self.model.deleted_at.is_(None))
        return clauses

    def _apply_filters(self, q, filters: dict[str, Any] | None):
        """Equality filters; list/tuple/set values become IN (...)."""
        for col_name, value in (filters or {}).items():
            if value is None or not hasattr(self.model, col_name):
                continue
            col = getattr(self.model, col_name)
            if isinstance(value, (list, tuple, set, frozenset)):
                q = q.where(col.in_(list(value)))
            else:
                q = q.where(col == value)
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
        where: Iterable[ColumnElement[bool]] = (),
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination, column filters and extra clauses."""
        q = self._apply_filters(self._base_query(), filters)
        for clause in where:
            q = q.where(clause)

        # Count
        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        # Order + paginate
        col = getattr(self.model, order_by, None)
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        q = q.offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(client_id=self._client_id, **kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def save(self, instance: ModelT) -> ModelT:
        """Flush in-place changes to a loaded instance and reload server-side values."""
        self._session.add(instance)
        await self._session.flush()
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        kwargs.pop("client_id", None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = datetime.now(timezone.utc)

        await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.client_id == self._client_id)
            .values(**kwargs)
        )
        await self._session.flush()
        instance = await self.get_by_id(entity_id)
        if instance is not None:
            await self._session.refresh(instance)
        return instance

    async def soft_delete(self, entity_id: str) -> bool:
        result = await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.client_id == self._client_id)
            .where(self.model.deleted_at.is_(None))
            .values(deleted_at=datetime.now(timezone.utc))
        )
        await self._session.flush()
        return result.rowcount > 0
