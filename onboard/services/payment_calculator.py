"""Agent payment calculation.

``compute_payment`` is a pure function: the rate table and the amount already
attributed to the vendor are passed in explicitly, nothing is read from or
written to the database, and the result depends on the arguments only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from onboard.services.visit_status import VisitStatus

CATEGORIES: tuple[str, ...] = ("A", "B", "C", "D")

ZERO = Decimal("0")


class PaymentType(str, Enum):
    VISIT = "visit"
    FOLLOWUP = "followup"
    VISIT_FOLLOWUP = "visit-followup"
    ONBOARDING = "onboarding"
    BALANCE = "balance"
    NONE = "none"


@dataclass(frozen=True)
class RateSet:
    visit: Decimal
    followup: Decimal
    onboarding: Decimal


@dataclass(frozen=True)
class RateTable:
    """Immutable snapshot of the per-category rates."""

    categories: Mapping[str, RateSet] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", MappingProxyType(dict(self.categories)))

    def for_category(self, category: str | None) -> RateSet | None:
        if not category:
            return None
        return self.categories.get(category)


DEFAULT_RATES: Mapping[str, RateSet] = MappingProxyType({
    "A": RateSet(visit=Decimal("70"), followup=Decimal("70"), onboarding=Decimal("700")),
    "B": RateSet(visit=Decimal("50"), followup=Decimal("50"), onboarding=Decimal("500")),
    "C": RateSet(visit=Decimal("35"), followup=Decimal("35"), onboarding=Decimal("350")),
    "D": RateSet(visit=Decimal("20"), followup=Decimal("20"), onboarding=Decimal("200")),
})

DEFAULT_RATE_TABLE = RateTable(DEFAULT_RATES)


@dataclass(frozen=True)
class PaymentCalculation:
    amount: Decimal
    payment_type: PaymentType

    @property
    def is_chargeable(self) -> bool:
        return self.amount > ZERO


NO_CHARGE = PaymentCalculation(amount=ZERO, payment_type=PaymentType.NONE)


def compute_payment(
    category: str | None,
    new_status: str | VisitStatus,
    already_paid: Decimal | int,
    rates: RateTable,
) -> PaymentCalculation:
    """Amount owed to the agent for moving a vendor into *new_status*.

    Amounts are cumulative targets minus what was already attributed for the
    vendor, clamped at zero so a transition never produces a refund.
    """
    rate = rates.for_category(category)
    if rate is None:
        return NO_CHARGE

    try:
        status = VisitStatus(new_status)
    except ValueError:
        return NO_CHARGE

    paid = Decimal(already_paid or 0)

    if status is VisitStatus.VISITED_ONBOARDED:
        target, payment_type = rate.onboarding, PaymentType.ONBOARDING
    elif status is VisitStatus.VISITED_REJECTED:
        target, payment_type = rate.visit, PaymentType.VISIT
    elif status is VisitStatus.VISITED_FOLLOWUP_SCHEDULED:
        target, payment_type = rate.visit + rate.followup, PaymentType.VISIT_FOLLOWUP
    elif status in (VisitStatus.FOLLOWUP_ONBOARDED, VisitStatus.SECOND_FOLLOWUP_ONBOARDED):
        target, payment_type = rate.onboarding, PaymentType.BALANCE
    else:
        # followup-rejected, followup-2nd-scheduled, 2nd-followup-rejected, pending-visit
        return NO_CHARGE

    return PaymentCalculation(amount=max(ZERO, target - paid), payment_type=payment_type)
