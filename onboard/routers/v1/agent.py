"""Agent self-service router: follow-ups, own vendors, earnings and ledger entries.

Every endpoint is scoped to the calling agent or employee.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.config import settings
from onboard.core.identity import Actor, require_field_user
from onboard.core.pagination import PaginationParams
from onboard.core.response import DataResponse, ListResponse, paginated
from onboard.db.base import get_db
from onboard.schemas.followup import (
    FollowUpOutcomeIn,
    FollowUpVendorOut,
    FollowUpWindow,
    OutcomeResult,
    OutcomeVendorOut,
)
from onboard.schemas.payment import AgentEarnings, PaymentOut
from onboard.schemas.vendor import EditRequest, VendorAgentUpdate, VendorOut
from onboard.services.followup import FollowUpService
from onboard.services.notification import NotificationService
from onboard.services.payment_ledger import PaymentLedgerService
from onboard.services.vendor import VendorService

router = APIRouter(prefix="/agent", tags=["Agent"])


def _followups(session: AsyncSession) -> FollowUpService:
    notifier = NotificationService(session, settings.default_client_id)
    return FollowUpService(session, settings.default_client_id, notifier=notifier)


def _vendors(session: AsyncSession) -> VendorService:
    client_id = settings.default_client_id
    return VendorService(session, client_id, notifier=NotificationService(session, client_id))


# ------------------------------------------------------------------
# Follow-ups
# ------------------------------------------------------------------

@router.get("/followups", response_model=DataResponse[list[FollowUpVendorOut]])
async def list_follow_ups(
    window: Optional[FollowUpWindow] = Query(default=None, description="due|upcoming|week|month"),
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_field_user),
):
    """Vendors owed a follow-up visit. Without ``window``: every vendor in the follow-up funnel."""
    vendors = await _followups(session).due_follow_ups(actor.id, window)
    return {"data": [FollowUpVendorOut.model_validate(v) for v in vendors]}


@router.patch("/followups/{vendor_id}", response_model=DataResponse[OutcomeResult])
async def report_follow_up_outcome(
    vendor_id: str,
    body: FollowUpOutcomeIn,
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_field_user),
):
    result = await _followups(session).report_outcome(
        vendor_id,
        actor,
        body.outcome,
        remarks=body.remarks,
        next_follow_up_date=body.next_follow_up_date,
    )
    payment = result.payment
    return {
        "data": OutcomeResult(
            payment_created=payment is not None,
            payment_amount=float(payment.amount) if payment else 0,
            payment_type=payment.payment_type if payment else "none",
            vendor=OutcomeVendorOut.model_validate(result.vendor),
        )
    }


# ------------------------------------------------------------------
# Own vendors and edit requests
# ------------------------------------------------------------------

@router.get("/vendors", response_model=ListResponse[VendorOut])
async def list_my_vendors(
    visit_status: Optional[str] = Query(default=None, alias="visitStatus"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_field_user),
):
    items, total = await _vendors(session).list_agent_vendors(actor, pagination, visit_status)
    return paginated(
        [VendorOut.model_validate(v) for v in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/vendors/{vendor_id}/request-edit", response_model=DataResponse[VendorOut])
async def request_edit(
    vendor_id: str,
    body: Optional[EditRequest] = None,
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_field_user),
):
    remark = body.remark if body else ""
    vendor = await _vendors(session).request_edit(vendor_id, actor, remark)
    return {"data": VendorOut.model_validate(vendor)}


@router.put("/vendors/{vendor_id}", response_model=DataResponse[VendorOut])
async def update_my_vendor(
    vendor_id: str,
    body: VendorAgentUpdate,
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_field_user),
):
    vendor = await _vendors(session).agent_update(vendor_id, actor, body)
    return {"data": VendorOut.model_validate(vendor)}


# ------------------------------------------------------------------
# Earnings
# ------------------------------------------------------------------

@router.get("/earnings", response_model=DataResponse[AgentEarnings])
async def my_earnings(
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_field_user),
):
    earnings = await PaymentLedgerService(session, settings.default_client_id).agent_earnings(actor.id)
    return {"data": AgentEarnings(**earnings)}


@router.get("/payments", response_model=ListResponse[PaymentOut])
async def my_payments(
    payment_status: Optional[str] = Query(default=None, alias="status", description="pending|paid"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_field_user),
):
    items, total = await PaymentLedgerService(session, settings.default_client_id).agent_payments(
        actor.id, pagination, payment_status
    )
    return paginated(
        [PaymentOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
    )
