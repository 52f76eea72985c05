"""Admin payment router: vendor payment status, rate table, ledger and settlement."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.config import settings
from onboard.core.identity import Actor, require_admin
from onboard.core.pagination import PaginationParams, pagination_with_limit
from onboard.core.response import DataResponse, StatsListResponse, paginated
from onboard.db.base import get_db
from onboard.schemas.payment import (
    AgentPaymentDetails,
    AgentPaymentSummary,
    MarkPaidRequest,
    MarkPaidResult,
    PaymentOut,
    PaymentStats,
    PaymentStatusResult,
    PaymentUpdate,
    RateTableOut,
    RateTableUpdate,
    VendorPaymentOut,
    VendorPaymentStatusUpdate,
)
from onboard.services.payment_ledger import PaymentLedgerService, TransitionResult
from onboard.services.notification import NotificationService
from onboard.services.payment_status import VendorPaymentService
from onboard.services.rate_table import RateTableService, describe_rates

router = APIRouter(prefix="/admin", tags=["Payments"])


def _ledger(session: AsyncSession) -> PaymentLedgerService:
    return PaymentLedgerService(session, settings.default_client_id)


_payments_pagination = pagination_with_limit(settings.payments_page_limit)


def status_result(result: TransitionResult) -> PaymentStatusResult:
    payment = result.payment
    return PaymentStatusResult(
        payment_created=payment is not None,
        payment_amount=float(payment.amount) if payment else 0,
        payment_type=payment.payment_type if payment else "none",
        vendor=VendorPaymentOut.model_validate(result.vendor),
        payment=PaymentOut.model_validate(payment) if payment else None,
    )


# ------------------------------------------------------------------
# Vendor payment status
# ------------------------------------------------------------------

@router.patch("/vendors/{vendor_id}/payment-status", response_model=DataResponse[PaymentStatusResult])
async def update_vendor_payment_status(
    vendor_id: str,
    body: VendorPaymentStatusUpdate,
    session: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    """Set category, visit status and follow-up dates; charges the agent on a status change."""
    client_id = settings.default_client_id
    svc = VendorPaymentService(session, client_id, notifier=NotificationService(session, client_id))
    result = await svc.update_vendor_payment_status(vendor_id, body, admin)
    return {"data": status_result(result)}


# ------------------------------------------------------------------
# Rate table
# ------------------------------------------------------------------

@router.get("/payment-config", response_model=DataResponse[RateTableOut])
async def get_payment_config(
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    rows = await RateTableService(session, settings.default_client_id).get_rows()
    return {"data": describe_rates(rows)}


@router.put("/payment-config", response_model=DataResponse[RateTableOut])
async def update_payment_config(
    body: RateTableUpdate,
    session: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    rows = await RateTableService(session, settings.default_client_id).update_rates(body.changes(), admin)
    return {"data": describe_rates(rows)}


# ------------------------------------------------------------------
# Ledger
# ------------------------------------------------------------------

@router.get("/payments", response_model=StatsListResponse[PaymentOut, PaymentStats])
async def list_payments(
    payment_status: Optional[str] = Query(default=None, alias="status", description="pending|paid"),
    agent_id: Optional[str] = Query(default=None, alias="agentId"),
    category: Optional[str] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    pagination: PaginationParams = Depends(_payments_pagination),
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    items, total, stats = await _ledger(session).list_payments(
        pagination,
        payment_status=payment_status,
        agent_id=agent_id,
        category=category,
        start=start_date,
        end=end_date,
    )
    return {
        **paginated([PaymentOut.model_validate(p) for p in items], total, pagination.page, pagination.limit),
        "stats": PaymentStats(**stats),
    }


@router.get("/payments/by-agent", response_model=DataResponse[list[AgentPaymentSummary]])
async def payments_by_agent(
    payment_status: Optional[str] = Query(default=None, alias="status"),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    rows = await _ledger(session).payments_by_agent(
        payment_status=payment_status, start=start_date, end=end_date
    )
    return {"data": [AgentPaymentSummary(**row) for row in rows]}


@router.get("/payments/agent/{agent_id}", response_model=DataResponse[AgentPaymentDetails])
async def agent_payment_details(
    agent_id: str,
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    details = await _ledger(session).agent_payment_details(agent_id)
    payments = [PaymentOut.model_validate(p) for p in details.pop("payments")]
    return {"data": AgentPaymentDetails(**details, payments=payments)}


@router.patch("/payments/mark-paid", response_model=DataResponse[MarkPaidResult])
async def mark_paid(
    body: MarkPaidRequest,
    session: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    modified = await _ledger(session).mark_paid(
        admin, payment_ids=body.payment_ids, agent_id=body.agent_id
    )
    return {"data": MarkPaidResult(modified_count=modified, message=f"{modified} payment(s) marked as paid")}


@router.put("/payments/{payment_id}", response_model=DataResponse[PaymentOut])
async def update_payment(
    payment_id: str,
    body: PaymentUpdate,
    session: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    payment = await _ledger(session).update_payment(payment_id, body, admin)
    return {"data": PaymentOut.model_validate(payment)}


@router.delete("/payments/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: str,
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    await _ledger(session).delete_payment(payment_id)
