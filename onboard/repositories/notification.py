from datetime import datetime

from sqlalchemy import func, select, update

from onboard.domain.notification import Notification
from onboard.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    async def count_unread(self) -> int:
        q = (
            select(func.count())
            .select_from(Notification)
            .where(*self._scope())
            .where(Notification.is_read.is_(False))
        )
        return (await self._session.execute(q)).scalar_one()

    async def mark_all_read(self, read_at: datetime) -> int:
        result = await self._session.execute(
            update(Notification)
            .where(*self._scope())
            .where(Notification.is_read.is_(False))
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session="evaluate")
        )
        await self._session.flush()
        return result.rowcount

    async def clear_read(self, deleted_at: datetime) -> int:
        """Soft-delete every read notification."""
        result = await self._session.execute(
            update(Notification)
            .where(*self._scope())
            .where(Notification.is_read.is_(True))
            .values(deleted_at=deleted_at)
            .execution_options(synchronize_session="evaluate")
        )
        await self._session.flush()
        return result.rowcount
