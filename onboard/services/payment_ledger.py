"""Payment ledger service: ledger appends, vendor totals, settlement and reports.

``apply_outcome`` is the one place a visit-status change turns into money:

  1. same status as before            -> nothing happens
  2. category set and amount > 0      -> one pending ledger entry, vendor
                                         total_payment_due / total_payment_paid
                                         both grow by the amount
  3. terminal status                  -> vendor.payment_completed = True
  4. vendor.visit_status = new status

The vendor's ``total_payment_paid`` is the amount attributed to the agent so
far (what the calculator subtracts), not the amount settled. Settlement is
tracked per ledger entry (``payment_status``) and never touches vendor totals.

Rule: routers call services, services call repositories. Every write goes
through the request session, so the vendor update and the ledger append
commit or roll back together.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.exceptions import NotFoundError, ValidationError
from onboard.core.identity import Actor
from onboard.core.pagination import PaginationParams
from onboard.domain.payment import Payment
from onboard.domain.vendor import Vendor
from onboard.repositories.payment import PaymentRepository
from onboard.schemas.payment import PaymentUpdate
from onboard.services.payment_calculator import RateTable, compute_payment
from onboard.services.rate_table import RateTableService, describe_rates
from onboard.services.visit_status import TERMINAL_STATUSES, VisitStatus

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    vendor: Vendor
    payment: Payment | None = None
    changed: bool = False

    @property
    def payment_created(self) -> bool:
        return self.payment is not None


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _start_of_month(moment: datetime) -> datetime:
    return _start_of_day(moment).replace(day=1)


def _start_of_next_month(moment: datetime) -> datetime:
    first = _start_of_month(moment)
    return (first + timedelta(days=32)).replace(day=1)


class PaymentLedgerService:
    def __init__(self, session: AsyncSession, client_id: str):
        self._repo = PaymentRepository(session, client_id)
        self._rates = RateTableService(session, client_id)

    # ------------------------------------------------------------------
    # Status change -> ledger entry + vendor totals
    # ------------------------------------------------------------------

    async def apply_outcome(
        self,
        vendor: Vendor,
        new_status: VisitStatus,
        rates: RateTable,
        *,
        remarks: str | None = None,
    ) -> TransitionResult:
        """Charge for moving *vendor* to *new_status* and move it there.

        The caller flushes the vendor; this only mutates it in place and
        appends the ledger row.
        """
        new_status = VisitStatus(new_status)
        if new_status.value == vendor.visit_status:
            return TransitionResult(vendor=vendor)

        payment = None
        if vendor.payment_category:
            already_paid = Decimal(vendor.total_payment_paid or 0)
            calculation = compute_payment(vendor.payment_category, new_status, already_paid, rates)
            if calculation.is_chargeable:
                payment = await self._repo.create(
                    agent_id=vendor.owner_agent_id,
                    agent_name=vendor.owner_agent_name or "Unknown",
                    vendor_id=vendor.id,
                    vendor_name=vendor.restaurant_name,
                    category=vendor.payment_category,
                    payment_type=calculation.payment_type.value,
                    amount=calculation.amount,
                    visit_status=new_status.value,
                    payment_status="pending",
                    remarks=remarks or "",
                )
                vendor.total_payment_due = Decimal(vendor.total_payment_due or 0) + calculation.amount
                vendor.total_payment_paid = already_paid + calculation.amount
                logger.info(
                    "Ledger entry %s: vendor=%s agent=%s type=%s amount=%s",
                    payment.id, vendor.id, payment.agent_id, payment.payment_type, payment.amount,
                )
        else:
            logger.debug("Vendor %s has no payment category; %s is not charged", vendor.id, new_status.value)

        if new_status in TERMINAL_STATUSES:
            vendor.payment_completed = True

        logger.info("Vendor %s visit status %s -> %s", vendor.id, vendor.visit_status, new_status.value)
        vendor.visit_status = new_status.value
        return TransitionResult(vendor=vendor, payment=payment, changed=True)

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def mark_paid(
        self,
        actor: Actor,
        *,
        payment_ids: list[str] | None = None,
        agent_id: str | None = None,
        now: datetime | None = None,
    ) -> int:
        """Settle the given entries, or every pending entry of *agent_id*."""
        if not payment_ids and not agent_id:
            raise ValidationError("Provide paymentIds or agentId", field="paymentIds")
        modified = await self._repo.mark_paid(
            paid_by=actor.id,
            paid_at=now or datetime.now(timezone.utc),
            payment_ids=payment_ids,
            agent_id=None if payment_ids else agent_id,
        )
        logger.info("%d payment(s) marked as paid by %s", modified, actor.id)
        return modified

    # ------------------------------------------------------------------
    # Administrative corrections
    # ------------------------------------------------------------------

    async def get_payment(self, payment_id: str) -> Payment:
        payment = await self._repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def update_payment(
        self, payment_id: str, data: PaymentUpdate, actor: Actor, now: datetime | None = None
    ) -> Payment:
        payment = await self.get_payment(payment_id)
        changes = data.model_dump(exclude_none=True, exclude_unset=True)

        for field in ("category", "payment_type", "amount"):
            if field in changes:
                setattr(payment, field, changes[field])

        status = changes.get("payment_status")
        if status == "paid" and payment.paid_date is None:
            payment.paid_date = now or datetime.now(timezone.utc)
            payment.paid_by = actor.id
        elif status == "pending":
            payment.paid_date = None
            payment.paid_by = None
        if status:
            payment.payment_status = status

        logger.info("Payment %s corrected by %s: %s", payment_id, actor.id, changes)
        return await self._repo.save(payment)

    async def delete_payment(self, payment_id: str) -> None:
        deleted = await self._repo.soft_delete(payment_id)
        if not deleted:
            raise NotFoundError("Payment", payment_id)
        logger.info("Payment %s deleted", payment_id)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def list_payments(
        self,
        pagination: PaginationParams,
        *,
        payment_status: str | None = None,
        agent_id: str | None = None,
        category: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[list[Payment], int, dict]:
        """Return (items, total, stats) where stats cover the whole filtered set."""
        clauses = self._repo.ledger_filters(
            payment_status=payment_status, agent_id=agent_id, category=category, start=start, end=end
        )
        items, total = await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            where=clauses,
        )
        stats = await self._repo.status_summary(clauses)
        return items, total, stats

    async def payments_by_agent(
        self,
        *,
        payment_status: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[dict]:
        clauses = self._repo.ledger_filters(payment_status=payment_status, start=start, end=end)
        return await self._repo.totals_by_agent(clauses)

    async def agent_payments(
        self, agent_id: str, pagination: PaginationParams, payment_status: str | None = None
    ) -> tuple[list[Payment], int]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"agent_id": agent_id, "payment_status": payment_status},
        )

    async def agent_earnings(self, agent_id: str, now: datetime | None = None) -> dict:
        now = now or datetime.now(timezone.utc)
        today = _start_of_day(now)
        today_total, today_count = await self._repo.total_between(
            agent_id, today, today + timedelta(days=1)
        )

        month_clauses = self._repo.ledger_filters(
            agent_id=agent_id,
            start=_start_of_month(now),
            end=_start_of_next_month(now) - timedelta(microseconds=1),
        )
        month = await self._repo.status_summary(month_clauses)
        all_time = await self._repo.status_summary(self._repo.ledger_filters(agent_id=agent_id))

        def bucket(stats: dict) -> dict:
            return {
                "pending": stats["pending"],
                "paid": stats["paid"],
                "total": stats["pending"] + stats["paid"],
            }

        return {
            "today": today_total,
            "today_count": today_count,
            "this_month": bucket(month),
            "all_time": bucket(all_time),
        }

    async def agent_payment_details(self, agent_id: str) -> dict:
        payments = await self._repo.all_for_agent(agent_id)
        if not payments:
            raise NotFoundError("Payments for agent", agent_id)

        total = pending = paid = Decimal("0")
        type_counts: Counter[str] = Counter()
        outcome_counts: Counter[str] = Counter()
        vendors: set[str] = set()

        for p in payments:
            amount = Decimal(p.amount)
            total += amount
            if p.payment_status == "pending":
                pending += amount
            else:
                paid += amount
            type_counts[p.payment_type] += 1
            vendors.add(p.vendor_id)

            if "onboarded" in p.visit_status:
                outcome_counts["onboarded"] += 1
            elif "rejected" in p.visit_status:
                outcome_counts["rejected"] += 1
            elif "followup" in p.visit_status:
                outcome_counts["followup"] += 1
            else:
                outcome_counts["visited"] += 1

        rates = await self._rates.get_rows()
        return {
            "agent_id": agent_id,
            "agent_name": payments[0].agent_name,
            "payments": payments,
            "stats": {
                "total": total,
                "pending": pending,
                "paid": paid,
                "payment_counts": {
                    t: type_counts.get(t, 0)
                    for t in ("visit", "followup", "visit-followup", "onboarding", "balance")
                },
                "vendor_counts": {
                    k: outcome_counts.get(k, 0) for k in ("visited", "onboarded", "rejected", "followup")
                },
                "total_vendors": len(vendors),
            },
            "payment_config": describe_rates(rates),
        }
