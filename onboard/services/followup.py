"""Follow-up tracker: agent outcome reports and the agent's follow-up lists.

An outcome report runs, in one unit of work:

  outcome -> next status (state machine) -> last-report fields on the vendor
          -> ledger entry + vendor totals -> history row
          -> notification (best effort, outside the failure path)
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.config import settings
from onboard.core.exceptions import ForbiddenError, NotFoundError
from onboard.core.identity import Actor
from onboard.domain.vendor import Vendor
from onboard.repositories.vendor import FollowUpHistoryRepository, VendorRepository
from onboard.schemas.followup import FollowUpWindow
from onboard.services.notification import StatusNotifier
from onboard.services.payment_ledger import PaymentLedgerService, TransitionResult
from onboard.services.rate_table import RateTableService
from onboard.services.visit_status import (
    FOLLOWUP_FUNNEL_STATUSES,
    SCHEDULED_STATUSES,
    Outcome,
    next_status,
    parse_outcome,
)

logger = logging.getLogger(__name__)


class FollowUpService:
    def __init__(self, session: AsyncSession, client_id: str, notifier: StatusNotifier | None = None):
        self._vendors = VendorRepository(session, client_id)
        self._history = FollowUpHistoryRepository(session, client_id)
        self._ledger = PaymentLedgerService(session, client_id)
        self._rates = RateTableService(session, client_id)
        self._notifier = notifier

    async def report_outcome(
        self,
        vendor_id: str,
        actor: Actor,
        outcome: str | None,
        remarks: str | None = None,
        next_follow_up_date: datetime | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        parsed = parse_outcome(outcome)

        vendor = await self._vendors.get_by_id(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        if not vendor.is_owned_by(actor.id):
            raise ForbiddenError("You can only update follow-ups for your own vendors")

        new_status = next_status(vendor.visit_status, parsed, next_follow_up_date)

        vendor.last_visited_on = now or datetime.now(timezone.utc)
        vendor.last_outcome = parsed.value
        vendor.last_remarks = remarks
        vendor.next_follow_up_date = next_follow_up_date
        if parsed is Outcome.SECOND_FOLLOWUP:
            vendor.second_follow_up_date = next_follow_up_date

        rates = await self._rates.get_rate_table()
        result = await self._ledger.apply_outcome(vendor, new_status, rates, remarks=remarks)
        await self._history.append(
            vendor.id,
            outcome=parsed.value,
            visit_status=new_status.value,
            remarks=remarks,
            updated_by=actor.id,
            updated_by_role=actor.role.value,
        )
        await self._vendors.save(vendor)

        if self._notifier is not None:
            try:
                await self._notifier.create_status_update(
                    vendor.id,
                    actor.id,
                    actor.display_name,
                    actor.role.value,
                    new_status.value,
                    next_follow_up_date,
                )
            except Exception:
                logger.exception("Status notification failed for vendor %s", vendor.id)

        return result

    async def due_follow_ups(
        self, agent_id: str, window: FollowUpWindow | None = None, now: datetime | None = None
    ) -> list[Vendor]:
        now = now or datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end_of_today = today + timedelta(days=1) - timedelta(microseconds=1)
        statuses = [s.value for s in SCHEDULED_STATUSES]

        if window is None:
            return await self._vendors.follow_ups(agent_id, [s.value for s in FOLLOWUP_FUNNEL_STATUSES])
        if window is FollowUpWindow.DUE:
            return await self._vendors.follow_ups(agent_id, statuses, end=end_of_today)
        if window is FollowUpWindow.UPCOMING:
            return await self._vendors.follow_ups(
                agent_id, statuses, start=end_of_today, start_exclusive=True
            )

        days = settings.followup_week_days if window is FollowUpWindow.WEEK else settings.followup_month_days
        return await self._vendors.follow_ups(
            agent_id, statuses, start=today, end=end_of_today + timedelta(days=days)
        )
