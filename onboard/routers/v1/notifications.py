"""Admin notification router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.config import settings
from onboard.core.identity import Actor, require_admin
from onboard.core.pagination import PaginationParams
from onboard.core.response import DataResponse, ListResponse, paginated
from onboard.db.base import get_db
from onboard.schemas.notification import ClearReadResult, MarkReadResult, NotificationOut, UnreadCount
from onboard.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _svc(session: AsyncSession) -> NotificationService:
    return NotificationService(session, settings.default_client_id)


@router.get("", response_model=ListResponse[NotificationOut])
async def list_notifications(
    unread: bool = Query(default=False, description="Only unread notifications"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    items, total = await _svc(session).list_notifications(pagination, unread_only=unread)
    return paginated(
        [NotificationOut.model_validate(n) for n in items],
        total, pagination.page, pagination.limit,
    )


@router.get("/unread-count", response_model=DataResponse[UnreadCount])
async def unread_count(
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    return {"data": UnreadCount(count=await _svc(session).unread_count())}


@router.patch("/read-all", response_model=DataResponse[MarkReadResult])
async def mark_all_read(
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    count = await _svc(session).mark_all_read()
    return {"data": MarkReadResult(modified_count=count)}


@router.delete("/clear-read", response_model=DataResponse[ClearReadResult])
async def clear_read(
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    count = await _svc(session).clear_read()
    return {"data": ClearReadResult(deleted_count=count)}


@router.patch("/{notification_id}/read", response_model=DataResponse[NotificationOut])
async def mark_read(
    notification_id: str,
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    notification = await _svc(session).mark_read(notification_id)
    return {"data": NotificationOut.model_validate(notification)}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    session: AsyncSession = Depends(get_db),
    _admin: Actor = Depends(require_admin),
):
    await _svc(session).delete_notification(notification_id)
