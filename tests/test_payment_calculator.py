"""
Unit Tests for the Payment Calculator

Amounts are checked against the default category rates:
A = visit 70 / followup 70 / onboarding 700, D = 20 / 20 / 200.
"""

from decimal import Decimal

import pytest

from onboard.services.payment_calculator import (
    DEFAULT_RATE_TABLE,
    NO_CHARGE,
    PaymentType,
    RateSet,
    RateTable,
    compute_payment,
)
from onboard.services.visit_status import VisitStatus


class TestFromFirstVisit:
    """Transitions out of pending-visit, nothing attributed yet."""

    @pytest.mark.parametrize(
        "status, amount, payment_type",
        [
            (VisitStatus.VISITED_ONBOARDED, "700", PaymentType.ONBOARDING),
            (VisitStatus.VISITED_REJECTED, "70", PaymentType.VISIT),
            (VisitStatus.VISITED_FOLLOWUP_SCHEDULED, "140", PaymentType.VISIT_FOLLOWUP),
        ],
    )
    def test_category_a(self, status, amount, payment_type):
        result = compute_payment("A", status, Decimal("0"), DEFAULT_RATE_TABLE)
        assert result.amount == Decimal(amount)
        assert result.payment_type is payment_type
        assert result.is_chargeable

    def test_category_d_onboarded(self):
        result = compute_payment("D", "visited-onboarded", 0, DEFAULT_RATE_TABLE)
        assert result.amount == Decimal("200")


class TestBalance:
    """Onboarding after follow-ups pays the rest of the onboarding rate."""

    def test_followup_onboarded_pays_balance(self):
        result = compute_payment("A", VisitStatus.FOLLOWUP_ONBOARDED, Decimal("140"), DEFAULT_RATE_TABLE)
        assert result.amount == Decimal("560")
        assert result.payment_type is PaymentType.BALANCE

    def test_second_followup_onboarded_pays_balance(self):
        result = compute_payment("B", VisitStatus.SECOND_FOLLOWUP_ONBOARDED, Decimal("100"), DEFAULT_RATE_TABLE)
        assert result.amount == Decimal("400")
        assert result.payment_type is PaymentType.BALANCE


class TestNoCharge:
    @pytest.mark.parametrize(
        "status",
        [
            VisitStatus.PENDING_VISIT,
            VisitStatus.FOLLOWUP_REJECTED,
            VisitStatus.FOLLOWUP_2ND_SCHEDULED,
            VisitStatus.SECOND_FOLLOWUP_REJECTED,
        ],
    )
    def test_statuses_without_payment(self, status):
        assert compute_payment("A", status, Decimal("140"), DEFAULT_RATE_TABLE) == NO_CHARGE

    @pytest.mark.parametrize("category", [None, "", "Z"])
    def test_unknown_category(self, category):
        result = compute_payment(category, VisitStatus.VISITED_ONBOARDED, 0, DEFAULT_RATE_TABLE)
        assert result.amount == Decimal("0")
        assert result.payment_type is PaymentType.NONE
        assert not result.is_chargeable

    def test_unknown_status(self):
        assert compute_payment("A", "closed", 0, DEFAULT_RATE_TABLE) == NO_CHARGE

    def test_category_missing_from_table(self):
        rates = RateTable({"A": RateSet(Decimal("1"), Decimal("1"), Decimal("10"))})
        assert compute_payment("B", VisitStatus.VISITED_ONBOARDED, 0, rates) == NO_CHARGE


class TestClamping:
    """A transition never produces a negative amount."""

    def test_already_paid_above_onboarding_rate(self):
        result = compute_payment("A", VisitStatus.FOLLOWUP_ONBOARDED, Decimal("800"), DEFAULT_RATE_TABLE)
        assert result.amount == Decimal("0")
        assert not result.is_chargeable

    def test_already_paid_equal_to_visit_rate(self):
        result = compute_payment("A", VisitStatus.VISITED_REJECTED, Decimal("70"), DEFAULT_RATE_TABLE)
        assert result.amount == Decimal("0")


class TestRateTable:
    def test_custom_rates_are_used(self):
        rates = RateTable({"A": RateSet(Decimal("10"), Decimal("5"), Decimal("100"))})
        result = compute_payment("A", VisitStatus.VISITED_FOLLOWUP_SCHEDULED, 0, rates)
        assert result.amount == Decimal("15")

    def test_rate_table_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_RATE_TABLE.categories["A"] = RateSet(Decimal("0"), Decimal("0"), Decimal("0"))

    def test_deterministic(self):
        first = compute_payment("C", VisitStatus.VISITED_ONBOARDED, Decimal("35"), DEFAULT_RATE_TABLE)
        second = compute_payment("C", VisitStatus.VISITED_ONBOARDED, Decimal("35"), DEFAULT_RATE_TABLE)
        assert first == second
        assert first.amount == Decimal("315")
