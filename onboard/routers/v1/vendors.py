"""Vendor router — registration, admin CRUD and admin review of edit requests.

Pattern:
  1. Declare a router with prefix and tags
  2. Inject DB session + current actor via Depends
  3. Instantiate the service with (session, settings.default_client_id)
  4. Call service methods and wrap result in response envelope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.config import settings
from onboard.core.identity import Actor, get_current_actor, require_admin
from onboard.core.pagination import PaginationParams
from onboard.core.response import DataResponse, ListResponse, paginated
from onboard.db.base import get_db
from onboard.schemas.vendor import (
    FollowUpHistoryOut,
    VendorCreate,
    VendorDetailOut,
    VendorOut,
    VendorUpdate,
)
from onboard.services.notification import NotificationService
from onboard.services.vendor import VendorService

router = APIRouter(prefix="/vendors", tags=["Vendors"])


# ------------------------------------------------------------------
# Helper — instantiate service with session + default client
# ------------------------------------------------------------------

def _svc(session: AsyncSession) -> VendorService:
    client_id = settings.default_client_id
    return VendorService(session, client_id, notifier=NotificationService(session, client_id))


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[VendorOut])
async def list_vendors(
    filter_status: Optional[str] = Query(default=None, alias="status", description="pending|publish|reject"),
    visit_status: Optional[str] = Query(default=None, alias="visitStatus"),
    payment_category: Optional[str] = Query(default=None, alias="paymentCategory"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    """List all vendors (paginated)."""
    items, total = await _svc(session).list_vendors(
        pagination, status=filter_status, visit_status=visit_status, payment_category=payment_category
    )
    return paginated(
        [VendorOut.model_validate(v) for v in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[VendorOut], status_code=status.HTTP_201_CREATED)
async def create_vendor(
    body: VendorCreate,
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Register a new vendor; the caller becomes its owner."""
    vendor = await _svc(session).create_vendor(body, actor)
    return {"data": VendorOut.model_validate(vendor)}


@router.get("/edit-requests", response_model=DataResponse[list[VendorOut]])
async def list_edit_requests(
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    vendors = await _svc(session).list_edit_requests()
    return {"data": [VendorOut.model_validate(v) for v in vendors]}


@router.get("/{vendor_id}", response_model=DataResponse[VendorDetailOut])
async def get_vendor(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    svc = _svc(session)
    vendor = await svc.get_vendor_for(vendor_id, actor)
    history = await svc.get_history(vendor.id)
    detail = VendorDetailOut.model_validate(vendor).model_copy(
        update={"follow_up_history": [FollowUpHistoryOut.model_validate(h) for h in history]}
    )
    return {"data": detail}


@router.put("/{vendor_id}", response_model=DataResponse[VendorOut])
async def update_vendor(
    vendor_id: str,
    body: VendorUpdate,
    session: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin),
):
    vendor = await _svc(session).update_vendor(vendor_id, body, admin)
    return {"data": VendorOut.model_validate(vendor)}


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vendor(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    await _svc(session).delete_vendor(vendor_id)


@router.put("/{vendor_id}/approve-edit", response_model=DataResponse[VendorOut])
async def approve_edit(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    vendor = await _svc(session).approve_edit(vendor_id)
    return {"data": VendorOut.model_validate(vendor)}


@router.put("/{vendor_id}/reject-edit", response_model=DataResponse[VendorOut])
async def reject_edit(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    vendor = await _svc(session).reject_edit(vendor_id)
    return {"data": VendorOut.model_validate(vendor)}
