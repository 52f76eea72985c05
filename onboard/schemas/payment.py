"""Payment Pydantic schemas: rate table, payment-status updates, ledger and reports."""


from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field

from onboard.schemas.common import CamelModel, RecordOut, UtcDateTime
from onboard.services.visit_status import VisitStatus

Category = Literal["A", "B", "C", "D"]
LedgerPaymentType = Literal["visit", "followup", "visit-followup", "onboarding", "balance"]
SettlementStatus = Literal["pending", "paid"]

# ---------------------------------------------------------------------------
# Rate table
# ---------------------------------------------------------------------------

class RateSetIn(CamelModel):
    visit: Decimal | None = Field(default=None, ge=0)
    followup: Decimal | None = Field(default=None, ge=0)
    onboarding: Decimal | None = Field(default=None, ge=0)

class RateSetOut(CamelModel):
    visit: float
    followup: float
    onboarding: float

class RateTableUpdate(CamelModel):
    """Partial update; omitted categories and fields keep their current values."""
    category_a: RateSetIn | None = None
    category_b: RateSetIn | None = None
    category_c: RateSetIn | None = None
    category_d: RateSetIn | None = None

    def changes(self) -> dict[str, dict[str, Decimal]]:
        out: dict[str, dict[str, Decimal]] = {}
        for category in ("A", "B", "C", "D"):
            rates = getattr(self, f"category_{category.lower()}")
            if rates is not None:
                values = rates.model_dump(exclude_none=True)
                if values:
                    out[category] = values
        return out

class RateTableOut(CamelModel):
    categories: dict[str, RateSetOut]
    updated_by: str | None = None
    updated_at: datetime | None = None

# ---------------------------------------------------------------------------
# Payment-status update (admin) and its result
# ---------------------------------------------------------------------------

class VendorPaymentStatusUpdate(CamelModel):
    payment_category: Category | None = None
    visit_status: VisitStatus | None = None
    follow_up_date: UtcDateTime | None = None
    second_follow_up_date: UtcDateTime | None = None
    remarks: str | None = None

class VendorPaymentOut(CamelModel):
    id: str
    restaurant_name: str
    payment_category: str | None = None
    visit_status: str
    follow_up_date: datetime | None = None
    second_follow_up_date: datetime | None = None
    total_payment_due: float
    total_payment_paid: float
    payment_completed: bool

class PaymentOut(RecordOut):
    agent_id: str
    agent_name: str
    vendor_id: str
    vendor_name: str
    category: str
    payment_type: str
    amount: float
    visit_status: str
    payment_status: str
    paid_date: datetime | None = None
    paid_by: str | None = None
    remarks: str = ""

class PaymentStatusResult(CamelModel):
    payment_created: bool
    payment_amount: float = 0
    payment_type: str = "none"
    vendor: VendorPaymentOut
    payment: PaymentOut | None = None

# ---------------------------------------------------------------------------
# Ledger management (admin)
# ---------------------------------------------------------------------------

class PaymentUpdate(CamelModel):
    category: Category | None = None
    payment_type: LedgerPaymentType | None = None
    amount: Decimal | None = Field(default=None, ge=0)
    payment_status: SettlementStatus | None = None

class MarkPaidRequest(CamelModel):
    payment_ids: list[str] | None = None
    agent_id: str | None = None

class MarkPaidResult(CamelModel):
    modified_count: int
    message: str

class PaymentStats(CamelModel):
    pending: float = 0
    paid: float = 0
    pending_count: int = 0
    paid_count: int = 0

class AgentPaymentSummary(CamelModel):
    agent_id: str
    agent_name: str | None = None
    total_amount: float
    entry_count: int
    pending_amount: float
    paid_amount: float

class AgentPaymentStats(CamelModel):
    total: float = 0
    pending: float = 0
    paid: float = 0
    payment_counts: dict[str, int] = Field(default_factory=dict)
    vendor_counts: dict[str, int] = Field(default_factory=dict)
    total_vendors: int = 0

class AgentPaymentDetails(CamelModel):
    agent_id: str
    agent_name: str | None = None
    payments: list[PaymentOut]
    stats: AgentPaymentStats
    payment_config: RateTableOut

# ---------------------------------------------------------------------------
# Agent self-service
# ---------------------------------------------------------------------------

class EarningsBucket(CamelModel):
    pending: float = 0
    paid: float = 0
    total: float = 0

class AgentEarnings(CamelModel):
    today: float = 0
    today_count: int = 0
    this_month: EarningsBucket = Field(default_factory=EarningsBucket)
    all_time: EarningsBucket = Field(default_factory=EarningsBucket)
