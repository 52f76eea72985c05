"""Notification Pydantic schemas."""


from datetime import datetime

from onboard.schemas.common import CamelModel, RecordOut


class NotificationOut(RecordOut):
    type: str
    vendor_id: str
    vendor_name: str
    user_id: str
    user_name: str
    user_role: str
    title: str
    message: str
    follow_up_date: datetime | None = None
    previous_follow_up_date: datetime | None = None
    is_read: bool
    read_at: datetime | None = None


class MarkReadResult(CamelModel):
    modified_count: int


class UnreadCount(CamelModel):
    count: int


class ClearReadResult(CamelModel):
    deleted_count: int
