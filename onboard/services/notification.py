"""Admin notifications about agent activity.

Writing a notification is best effort: it runs inside a SAVEPOINT, so a
failure rolls back only the notification row and the caller's transaction
carries on.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.exceptions import NotFoundError
from onboard.core.identity import Actor
from onboard.core.pagination import PaginationParams
from onboard.domain.notification import Notification
from onboard.repositories.notification import NotificationRepository
from onboard.repositories.vendor import VendorRepository
from onboard.schemas.common import to_utc

logger = logging.getLogger(__name__)


class StatusNotifier(Protocol):
    async def create_status_update(
        self,
        vendor_id: str,
        actor_id: str,
        actor_name: str,
        role: str,
        new_status: str,
        next_follow_up_date: datetime | None = None,
    ) -> Notification | None: ...

    async def create_follow_up_update(
        self,
        vendor_id: str,
        actor_id: str,
        actor_name: str,
        role: str,
        old_date: datetime | None,
        new_date: datetime | None,
    ) -> Notification | None: ...


def _day(value: datetime | None, missing: str) -> str:
    return value.strftime("%b %d, %Y") if value else missing


def describe_status_update(
    vendor_name: str, actor_name: str, role: str, new_status: str, next_follow_up_date: datetime | None
) -> tuple[str, str]:
    """Return (title, message) for a visit-status change."""
    who = f"{actor_name} ({role})"
    if "onboarded" in new_status:
        return "Vendor Onboarded", f'{who} successfully onboarded "{vendor_name}"'
    if "rejected" in new_status:
        return "Vendor Rejected", f'{who} marked "{vendor_name}" as rejected'
    if "2nd-scheduled" in new_status:
        when = _day(next_follow_up_date, "No date set")
        return "2nd Follow-up Scheduled", f'{who} scheduled 2nd follow-up for "{vendor_name}" on {when}'
    return "Vendor Status Updated", f'{who} updated status for "{vendor_name}" to {new_status}'


def describe_follow_up_update(
    vendor_name: str, actor_name: str, role: str, old_date: datetime | None, new_date: datetime | None
) -> tuple[str, str]:
    """Return (title, message) for a changed follow-up date."""
    return (
        "Follow-up Date Updated",
        f'{actor_name} ({role}) updated follow-up date for "{vendor_name}" '
        f'from {_day(old_date, "Not set")} to {_day(new_date, "Removed")}',
    )


async def notify_follow_up_change(
    notifier: StatusNotifier | None,
    vendor_id: str,
    actor: Actor,
    old_date: datetime | None,
    new_date: datetime | None,
) -> None:
    """Tell admins about a moved follow-up date. Never raises."""
    if notifier is None or to_utc(old_date) == to_utc(new_date):
        return
    try:
        await notifier.create_follow_up_update(
            vendor_id, actor.id, actor.display_name, actor.role.value, old_date, new_date
        )
    except Exception:
        logger.exception("Follow-up notification failed for vendor %s", vendor_id)


class NotificationService:
    def __init__(self, session: AsyncSession, client_id: str):
        self._session = session
        self._repo = NotificationRepository(session, client_id)
        self._vendors = VendorRepository(session, client_id)

    async def _record(
        self, vendor_id: str, describe: Callable[[str], tuple[str, str]], **fields: Any
    ) -> Notification | None:
        try:
            async with self._session.begin_nested():
                vendor = await self._vendors.get_by_id(vendor_id)
                if vendor is None:
                    logger.warning("Vendor %s not found; notification skipped", vendor_id)
                    return None
                title, message = describe(vendor.restaurant_name)
                return await self._repo.create(
                    vendor_id=vendor_id,
                    vendor_name=vendor.restaurant_name,
                    title=title,
                    message=message,
                    **fields,
                )
        except SQLAlchemyError:
            logger.exception("Failed to create %s notification for vendor %s", fields.get("type"), vendor_id)
            return None

    async def create_status_update(
        self,
        vendor_id: str,
        actor_id: str,
        actor_name: str,
        role: str,
        new_status: str,
        next_follow_up_date: datetime | None = None,
    ) -> Notification | None:
        return await self._record(
            vendor_id,
            lambda name: describe_status_update(name, actor_name, role, new_status, next_follow_up_date),
            type="status_update",
            user_id=actor_id,
            user_name=actor_name,
            user_role=role,
            follow_up_date=next_follow_up_date,
        )

    async def create_follow_up_update(
        self,
        vendor_id: str,
        actor_id: str,
        actor_name: str,
        role: str,
        old_date: datetime | None,
        new_date: datetime | None,
    ) -> Notification | None:
        return await self._record(
            vendor_id,
            lambda name: describe_follow_up_update(name, actor_name, role, old_date, new_date),
            type="follow_up_update",
            user_id=actor_id,
            user_name=actor_name,
            user_role=role,
            follow_up_date=new_date,
            previous_follow_up_date=old_date,
        )

    async def list_notifications(
        self, pagination: PaginationParams, unread_only: bool = False
    ) -> tuple[list[Notification], int]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"is_read": False} if unread_only else None,
        )

    async def unread_count(self) -> int:
        return await self._repo.count_unread()

    async def mark_read(self, notification_id: str) -> Notification:
        notification = await self._repo.get_by_id(notification_id)
        if not notification:
            raise NotFoundError("Notification", notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            notification = await self._repo.save(notification)
        return notification

    async def mark_all_read(self) -> int:
        count = await self._repo.mark_all_read(datetime.now(timezone.utc))
        logger.info("%d notification(s) marked as read", count)
        return count

    async def delete_notification(self, notification_id: str) -> None:
        if not await self._repo.soft_delete(notification_id):
            raise NotFoundError("Notification", notification_id)

    async def clear_read(self) -> int:
        count = await self._repo.clear_read(datetime.now(timezone.utc))
        logger.info("%d read notification(s) cleared", count)
        return count
