"""
Tests for the audit middleware's path inference and its write to audit_trail.
"""

import asyncio

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from onboard.domain.audit import AuditTrail
from onboard.middleware.audit import AuditMiddleware, describe_path

VENDOR_ID = "0b6f2c1e-8d4a-4a8e-9f51-3c2d7e9a1b00"


@pytest.mark.parametrize(
    "path, expected",
    [
        (f"/api/v1/vendors/{VENDOR_ID}", ("vendor", VENDOR_ID)),
        (f"/api/v1/admin/vendors/{VENDOR_ID}/payment-status", ("vendor", VENDOR_ID)),
        (f"/api/v1/agent/followups/{VENDOR_ID}", ("followup", VENDOR_ID)),
        ("/api/v1/admin/payments/mark-paid", ("payment", None)),
        ("/api/v1/vendors", ("vendor", None)),
        ("/", ("unknown", None)),
    ],
)
def test_describe_path(path, expected):
    assert describe_path(path) == expected


async def test_write_request_is_recorded(session_factory):
    app = FastAPI()
    app.add_middleware(AuditMiddleware, session_factory=session_factory)

    @app.post("/api/v1/vendors")
    async def create():
        return {"ok": True}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post(
            "/api/v1/vendors", headers={"X-Actor-Id": "agent-1", "X-Actor-Role": "agent"}
        )
        assert resp.status_code == 200
        await client.get("/api/v1/vendors")

    # The row is written by a background task
    for _ in range(50):
        async with session_factory() as session:
            rows = (await session.execute(select(AuditTrail))).scalars().all()
        if rows:
            break
        await asyncio.sleep(0.01)

    assert len(rows) == 1
    assert rows[0].actor_id == "agent-1"
    assert rows[0].action == "POST:200"
    assert rows[0].entity_type == "vendor"
