"""Vendor and follow-up history repositories."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import case, func, or_, select
from sqlalchemy.sql import ColumnElement

from onboard.domain.vendor import FollowUpHistory, Vendor
from onboard.repositories.base import BaseRepository


class VendorRepository(BaseRepository[Vendor]):
    model = Vendor

    @staticmethod
    def owned_by(agent_id: str) -> ColumnElement[bool]:
        return or_(Vendor.created_by_id == agent_id, Vendor.assigned_agent_id == agent_id)

    @staticmethod
    def effective_follow_up_date():
        """The date of the next owed visit: the 2nd follow-up date once one is scheduled."""
        return case(
            (
                Vendor.visit_status == "followup-2nd-scheduled",
                func.coalesce(Vendor.second_follow_up_date, Vendor.follow_up_date),
            ),
            else_=Vendor.follow_up_date,
        )

    async def list_for_agent(
        self,
        agent_id: str,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[Vendor], int]:
        return await self.list(
            offset=offset,
            limit=limit,
            order_by=order_by,
            order=order,
            filters=filters,
            where=[self.owned_by(agent_id)],
        )

    async def follow_ups(
        self,
        agent_id: str,
        statuses: Iterable[str],
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        start_exclusive: bool = False,
    ) -> list[Vendor]:
        """Agent's vendors in *statuses* whose follow-up date falls in [start, end]."""
        due = self.effective_follow_up_date()
        q = (
            self._base_query()
            .where(self.owned_by(agent_id))
            .where(Vendor.visit_status.in_(list(statuses)))
        )
        if start is not None:
            q = q.where(due > start if start_exclusive else due >= start)
        if end is not None:
            q = q.where(due <= end)
        if start is not None or end is not None:
            q = q.order_by(due.asc())
        else:
            q = q.order_by(Vendor.created_at.desc())
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def pending_edit_requests(self) -> list[Vendor]:
        q = (
            self._base_query()
            .where(Vendor.edit_requested.is_(True))
            .where(Vendor.edit_approved.is_(False))
            .order_by(Vendor.edit_request_date.desc())
        )
        result = await self._session.execute(q)
        return list(result.scalars().all())


class FollowUpHistoryRepository(BaseRepository[FollowUpHistory]):
    """Rows are written through append() and read through list_for_vendor()."""

    model = FollowUpHistory

    async def append(self, vendor_id: str, **fields: Any) -> FollowUpHistory:
        count_q = (
            select(func.count())
            .select_from(FollowUpHistory)
            .where(FollowUpHistory.client_id == self._client_id)
            .where(FollowUpHistory.vendor_id == vendor_id)
        )
        position = (await self._session.execute(count_q)).scalar_one() + 1
        return await self.create(vendor_id=vendor_id, sequence=position, **fields)

    async def list_for_vendor(self, vendor_id: str) -> list[FollowUpHistory]:
        q = (
            self._base_query()
            .where(FollowUpHistory.vendor_id == vendor_id)
            .order_by(FollowUpHistory.sequence.asc())
        )
        result = await self._session.execute(q)
        return list(result.scalars().all())
