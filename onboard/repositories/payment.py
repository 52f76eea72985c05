"""Payment ledger and payment-rate repositories."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import case, func, select, update
from sqlalchemy.sql import ColumnElement

from onboard.domain.payment import Payment, PaymentRate
from onboard.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    model = Payment

    @staticmethod
    def ledger_filters(
        *,
        payment_status: str | None = None,
        agent_id: str | None = None,
        category: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ColumnElement[bool]]:
        """WHERE clauses shared by the ledger list and its aggregates.

        The creation-date range only applies when both ends are given.
        """
        clauses: list[ColumnElement[bool]] = []
        if payment_status:
            clauses.append(Payment.payment_status == payment_status)
        if agent_id:
            clauses.append(Payment.agent_id == agent_id)
        if category:
            clauses.append(Payment.category == category)
        if start is not None and end is not None:
            clauses.append(Payment.created_at >= start)
            clauses.append(Payment.created_at <= end)
        return clauses

    async def mark_paid(
        self,
        *,
        paid_by: str,
        paid_at: datetime,
        payment_ids: Iterable[str] | None = None,
        agent_id: str | None = None,
    ) -> int:
        """Single bulk UPDATE of pending rows to paid; returns the modified count."""
        stmt = (
            update(Payment)
            .where(*self._scope())
            .where(Payment.payment_status == "pending")
            .values(payment_status="paid", paid_date=paid_at, paid_by=paid_by, updated_at=paid_at)
            .execution_options(synchronize_session="evaluate")
        )
        if payment_ids:
            stmt = stmt.where(Payment.id.in_(list(payment_ids)))
        elif agent_id:
            stmt = stmt.where(Payment.agent_id == agent_id)
        else:
            raise ValueError("payment_ids or agent_id is required")

        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount

    async def status_summary(self, where: Iterable[ColumnElement[bool]] = ()) -> dict[str, Any]:
        """Totals and counts per settlement status."""
        q = (
            select(
                Payment.payment_status,
                func.coalesce(func.sum(Payment.amount), 0),
                func.count(),
            )
            .where(*self._scope(), *where)
            .group_by(Payment.payment_status)
        )
        stats: dict[str, Any] = {
            "pending": Decimal("0"),
            "paid": Decimal("0"),
            "pending_count": 0,
            "paid_count": 0,
        }
        for status, total, count in (await self._session.execute(q)).all():
            if status in ("pending", "paid"):
                stats[status] = Decimal(str(total))
                stats[f"{status}_count"] = count
        return stats

    async def totals_by_agent(self, where: Iterable[ColumnElement[bool]] = ()) -> list[dict[str, Any]]:
        total = func.coalesce(func.sum(Payment.amount), 0)
        q = (
            select(
                Payment.agent_id,
                func.max(Payment.agent_name).label("agent_name"),
                total.label("total_amount"),
                func.count().label("entry_count"),
                func.coalesce(
                    func.sum(case((Payment.payment_status == "pending", Payment.amount), else_=0)), 0
                ).label("pending_amount"),
                func.coalesce(
                    func.sum(case((Payment.payment_status == "paid", Payment.amount), else_=0)), 0
                ).label("paid_amount"),
            )
            .where(*self._scope(), *where)
            .group_by(Payment.agent_id)
            .order_by(total.desc())
        )
        rows = (await self._session.execute(q)).mappings().all()
        return [dict(row) for row in rows]

    async def total_between(self, agent_id: str, start: datetime, end: datetime) -> tuple[Decimal, int]:
        q = select(func.coalesce(func.sum(Payment.amount), 0), func.count()).where(
            *self._scope(),
            Payment.agent_id == agent_id,
            Payment.created_at >= start,
            Payment.created_at < end,
        )
        total, count = (await self._session.execute(q)).one()
        return Decimal(str(total)), count

    async def all_for_agent(self, agent_id: str) -> list[Payment]:
        q = (
            self._base_query()
            .where(Payment.agent_id == agent_id)
            .order_by(Payment.created_at.desc())
        )
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def all_for_vendor(self, vendor_id: str) -> list[Payment]:
        q = (
            self._base_query()
            .where(Payment.vendor_id == vendor_id)
            .order_by(Payment.created_at.asc())
        )
        result = await self._session.execute(q)
        return list(result.scalars().all())


class PaymentRateRepository(BaseRepository[PaymentRate]):
    model = PaymentRate

    async def all_rates(self) -> list[PaymentRate]:
        result = await self._session.execute(
            self._base_query().order_by(PaymentRate.category.asc())
        )
        return list(result.scalars().all())
