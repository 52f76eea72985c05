"""Payment rate table service: get-or-create defaults, partial admin updates.

The stored rows are converted into an immutable :class:`RateTable` before
any calculation, so the calculator never touches the database.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from onboard.core.identity import Actor
from onboard.domain.payment import PaymentRate
from onboard.repositories.payment import PaymentRateRepository
from onboard.services.payment_calculator import CATEGORIES, DEFAULT_RATES, RateSet, RateTable

logger = logging.getLogger(__name__)

_RATE_FIELDS = ("visit", "followup", "onboarding")


def rate_table_from_rows(rows: list[PaymentRate]) -> RateTable:
    return RateTable({
        row.category: RateSet(
            visit=Decimal(row.visit),
            followup=Decimal(row.followup),
            onboarding=Decimal(row.onboarding),
        )
        for row in rows
    })


def describe_rates(rows: list[PaymentRate]) -> dict:
    """Response payload for RateTableOut."""
    latest = max(rows, key=lambda r: r.updated_at) if rows else None
    return {
        "categories": {
            row.category: {f: getattr(row, f) for f in _RATE_FIELDS} for row in rows
        },
        "updated_by": latest.updated_by if latest else None,
        "updated_at": latest.updated_at if latest else None,
    }


class RateTableService:
    def __init__(self, session: AsyncSession, client_id: str):
        self._repo = PaymentRateRepository(session, client_id)

    async def get_rows(self) -> list[PaymentRate]:
        """All four category rows, creating any missing one with its defaults."""
        rows = {row.category: row for row in await self._repo.all_rates()}
        for category in CATEGORIES:
            if category in rows:
                continue
            default = DEFAULT_RATES[category]
            rows[category] = await self._repo.create(
                category=category,
                visit=default.visit,
                followup=default.followup,
                onboarding=default.onboarding,
            )
            logger.info("Created default payment rates for category %s", category)
        return [rows[c] for c in CATEGORIES]

    async def get_rate_table(self) -> RateTable:
        return rate_table_from_rows(await self.get_rows())

    async def update_rates(
        self, changes: dict[str, dict[str, Decimal]], actor: Actor
    ) -> list[PaymentRate]:
        """Merge per-category partial updates into the stored rates."""
        rows = await self.get_rows()
        for row in rows:
            values = changes.get(row.category)
            if not values:
                continue
            for field in _RATE_FIELDS:
                if field in values:
                    setattr(row, field, values[field])
            row.updated_by = actor.id
            await self._repo.save(row)
            logger.info("Payment rates for category %s updated by %s: %s", row.category, actor.id, values)
        return rows
