"""Shared Pydantic schema bases with camelCase aliases."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel


def to_utc(value: datetime | None) -> datetime | None:
    """Express *value* in UTC. Naive datetimes are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Incoming dates are stored and compared as UTC; SQLite keeps only the wall clock.
UtcDateTime = Annotated[datetime, AfterValidator(to_utc)]


class CamelModel(BaseModel):
    """All API schemas inherit from this to auto-generate camelCase aliases."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class RecordOut(CamelModel):
    """Identity and timestamps shared by every stored record in responses."""

    id: str
    created_at: datetime
    updated_at: datetime


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
