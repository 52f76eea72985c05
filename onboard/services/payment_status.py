"""Admin entry point for a vendor's payment category, visit status and follow-up dates."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.exceptions import NotFoundError
from onboard.core.identity import Actor
from onboard.repositories.vendor import FollowUpHistoryRepository, VendorRepository
from onboard.schemas.payment import VendorPaymentStatusUpdate
from onboard.services.notification import StatusNotifier, notify_follow_up_change
from onboard.services.payment_ledger import PaymentLedgerService, TransitionResult
from onboard.services.rate_table import RateTableService
from onboard.services.visit_status import assert_transition

logger = logging.getLogger(__name__)


class VendorPaymentService:
    def __init__(self, session: AsyncSession, client_id: str, notifier: StatusNotifier | None = None):
        self._vendors = VendorRepository(session, client_id)
        self._history = FollowUpHistoryRepository(session, client_id)
        self._ledger = PaymentLedgerService(session, client_id)
        self._rates = RateTableService(session, client_id)
        self._notifier = notifier

    async def update_vendor_payment_status(
        self, vendor_id: str, data: VendorPaymentStatusUpdate, actor: Actor
    ) -> TransitionResult:
        vendor = await self._vendors.get_by_id(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)

        new_status = data.visit_status
        status_changed = new_status is not None and new_status.value != vendor.visit_status
        if status_changed:
            assert_transition(vendor.visit_status, new_status)

        old_follow_up = vendor.follow_up_date
        if data.payment_category is not None:
            vendor.payment_category = data.payment_category
        if data.follow_up_date is not None:
            vendor.follow_up_date = data.follow_up_date
        if data.second_follow_up_date is not None:
            vendor.second_follow_up_date = data.second_follow_up_date

        result = TransitionResult(vendor=vendor)
        if status_changed:
            rates = await self._rates.get_rate_table()
            result = await self._ledger.apply_outcome(vendor, new_status, rates, remarks=data.remarks)
            await self._history.append(
                vendor.id,
                outcome=new_status.value,
                visit_status=new_status.value,
                remarks=data.remarks,
                updated_by=actor.id,
                updated_by_role=actor.role.value,
            )

        await self._vendors.save(vendor)
        logger.info(
            "Payment status of vendor %s updated by %s (status=%s, category=%s)",
            vendor.id, actor.id, vendor.visit_status, vendor.payment_category,
        )
        if data.follow_up_date is not None:
            await notify_follow_up_change(
                self._notifier, vendor.id, actor, old_follow_up, data.follow_up_date
            )
        return result
