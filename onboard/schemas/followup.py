"""Follow-up Pydantic schemas: agent outcome reports and follow-up listings."""


from datetime import datetime
from enum import Enum

from pydantic import model_validator

from onboard.schemas.common import CamelModel, UtcDateTime
from onboard.schemas.payment import VendorPaymentOut


class FollowUpWindow(str, Enum):
    DUE = "due"            # follow-up date is today or already past
    UPCOMING = "upcoming"  # after today
    WEEK = "week"          # today .. +7 days
    MONTH = "month"        # today .. +30 days


class FollowUpOutcomeIn(CamelModel):
    """Outcome report. Older clients send ``status``/``notes`` instead of ``outcome``/``remarks``."""

    outcome: str | None = None
    remarks: str | None = None
    next_follow_up_date: UtcDateTime | None = None
    status: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _legacy_fields(self) -> "FollowUpOutcomeIn":
        if not self.outcome and self.status:
            if "onboarded" in self.status:
                self.outcome = "onboarded"
            elif "rejected" in self.status:
                self.outcome = "rejected"
            elif self.status == "followup-2nd-scheduled":
                self.outcome = "2nd-followup"
        if not self.remarks and self.notes:
            self.remarks = self.notes
        return self


class FollowUpVendorOut(CamelModel):
    id: str
    restaurant_name: str
    owner_name: str | None = None
    mobile_number: str | None = None
    full_address: str | None = None
    payment_category: str | None = None
    visit_status: str
    follow_up_date: datetime | None = None
    second_follow_up_date: datetime | None = None
    created_at: datetime


class OutcomeVendorOut(VendorPaymentOut):
    last_visited_on: datetime | None = None
    last_outcome: str | None = None
    last_remarks: str | None = None
    next_follow_up_date: datetime | None = None


class OutcomeResult(CamelModel):
    payment_created: bool
    payment_amount: float = 0
    payment_type: str = "none"
    vendor: OutcomeVendorOut
