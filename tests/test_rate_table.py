"""
Tests for the payment rate table: lazy defaults and partial updates.
"""

from decimal import Decimal

import pytest

from onboard.core.identity import Actor, Role
from onboard.repositories.payment import PaymentRateRepository
from onboard.schemas.payment import RateTableUpdate
from onboard.services.payment_calculator import DEFAULT_RATES, RateSet
from onboard.services.rate_table import RateTableService, describe_rates

ADMIN = Actor(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def rates(session, client_id):
    return RateTableService(session, client_id)


class TestDefaults:
    async def test_first_read_creates_all_categories(self, rates):
        table = await rates.get_rate_table()
        assert set(table.categories) == {"A", "B", "C", "D"}
        assert table.for_category("A") == DEFAULT_RATES["A"]
        assert table.for_category("D") == RateSet(Decimal("20"), Decimal("20"), Decimal("200"))

    async def test_second_read_does_not_duplicate(self, rates, session, client_id):
        await rates.get_rows()
        await rates.get_rows()
        assert len(await PaymentRateRepository(session, client_id).all_rates()) == 4

    async def test_missing_category_is_back_filled(self, rates, session, client_id):
        repo = PaymentRateRepository(session, client_id)
        await repo.create(category="A", visit=Decimal("1"), followup=Decimal("2"), onboarding=Decimal("3"))

        table = await rates.get_rate_table()
        assert table.for_category("A").onboarding == Decimal("3")
        assert table.for_category("B") == DEFAULT_RATES["B"]


class TestUpdate:
    async def test_partial_update_keeps_other_values(self, rates):
        body = RateTableUpdate.model_validate({"categoryA": {"onboarding": 900}})
        rows = await rates.update_rates(body.changes(), ADMIN)

        by_category = {row.category: row for row in rows}
        assert by_category["A"].onboarding == Decimal("900")
        assert by_category["A"].visit == Decimal("70")
        assert by_category["A"].updated_by == "admin-1"
        assert by_category["B"].updated_by == "system"

        described = describe_rates(rows)
        assert described["categories"]["A"]["onboarding"] == Decimal("900")

    async def test_updated_rates_feed_the_calculator(self, rates):
        await rates.update_rates({"C": {"visit": Decimal("40")}}, ADMIN)
        table = await rates.get_rate_table()
        assert table.for_category("C").visit == Decimal("40")

    def test_empty_update_has_no_changes(self):
        assert RateTableUpdate.model_validate({"categoryB": {}}).changes() == {}
