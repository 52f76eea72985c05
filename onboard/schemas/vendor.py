"""Vendor Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from typing import Literal

from pydantic import Field

from onboard.schemas.common import CamelModel, RecordOut, UtcDateTime

ReviewStatus = Literal["pending", "publish", "reject"]

class VendorCreate(CamelModel):
    restaurant_name: str = Field(min_length=1, max_length=255)
    owner_name: str | None = None
    mobile_number: str | None = None
    full_address: str | None = None
    city: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    vendor_type: str = "restaurant"
    notes: str | None = None
    follow_up_date: UtcDateTime | None = None

class VendorUpdate(CamelModel):
    """Admin edit: every field, including review status and agent assignment."""
    restaurant_name: str | None = Field(default=None, min_length=1, max_length=255)
    owner_name: str | None = None
    mobile_number: str | None = None
    full_address: str | None = None
    city: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    vendor_type: str | None = None
    notes: str | None = None
    status: ReviewStatus | None = None
    assigned_agent_id: str | None = None
    assigned_agent_name: str | None = None
    follow_up_date: UtcDateTime | None = None

class VendorAgentUpdate(CamelModel):
    """Fields an agent may change once an admin approved the edit request."""
    restaurant_name: str | None = Field(default=None, min_length=1, max_length=255)
    owner_name: str | None = None
    mobile_number: str | None = None
    full_address: str | None = None
    city: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    notes: str | None = None
    follow_up_date: UtcDateTime | None = None

class EditRequest(CamelModel):
    remark: str = ""

class FollowUpHistoryOut(CamelModel):
    sequence: int
    recorded_at: datetime
    outcome: str
    visit_status: str
    remarks: str | None = None
    updated_by: str
    updated_by_role: str

class VendorOut(RecordOut):
    client_id: str
    restaurant_name: str
    owner_name: str | None = None
    mobile_number: str | None = None
    full_address: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    vendor_type: str
    notes: str | None = None
    status: str
    created_by_id: str
    created_by_name: str | None = None
    created_by_role: str | None = None
    assigned_agent_id: str | None = None
    assigned_agent_name: str | None = None
    edit_requested: bool
    edit_approved: bool
    edit_request_date: datetime | None = None
    edit_remark: str = ""
    payment_category: str | None = None
    visit_status: str
    follow_up_date: datetime | None = None
    second_follow_up_date: datetime | None = None
    last_visited_on: datetime | None = None
    last_outcome: str | None = None
    last_remarks: str | None = None
    next_follow_up_date: datetime | None = None
    total_payment_due: float
    total_payment_paid: float
    payment_completed: bool

class VendorDetailOut(VendorOut):
    follow_up_history: list[FollowUpHistoryOut] = Field(default_factory=list)
