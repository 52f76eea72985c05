"""Audit logging middleware — records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from onboard.core.config import settings
from onboard.db.base import async_session_factory
from onboard.domain.audit import AuditTrail

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Path segments that name an action rather than an entity
_ACTION_SEGMENTS = {
    "payment-status", "approve-edit", "reject-edit", "request-edit",
    "mark-paid", "read", "read-all",
}


def describe_path(path: str) -> tuple[str, str | None]:
    """Infer (entity_type, entity_id) from a request path.

    /api/v1/vendors/<uuid>                      -> ("vendor", "<uuid>")
    /api/v1/admin/vendors/<uuid>/payment-status -> ("vendor", "<uuid>")
    /api/v1/admin/payments/mark-paid            -> ("payment", None)
    """
    parts = [p for p in path.strip("/").split("/") if p]
    while parts and parts[-1] in _ACTION_SEGMENTS:
        parts.pop()
    if not parts:
        return "unknown", None
    if len(parts[-1]) == 36 and len(parts) >= 2:
        return parts[-2].rstrip("s"), parts[-1]
    return parts[-1].rstrip("s"), None


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written asynchronously AFTER the response is sent so it
    never adds latency to the request. Failures in audit logging are caught and
    logged; they never reach the caller.
    """

    def __init__(
        self,
        app: ASGIApp,
        session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
    ):
        super().__init__(app)
        self._session_factory = session_factory
        self._pending: set[asyncio.Task] = set()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            # Fire-and-forget: don't await here so the response is not delayed
            task = asyncio.create_task(self._record(request, response.status_code, duration_ms))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return response

    async def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        """Persist an audit row. Errors are logged, never raised."""
        try:
            entity_type, entity_id = describe_path(request.url.path)
            async with self._session_factory() as session:
                session.add(
                    AuditTrail(
                        client_id=settings.default_client_id,
                        actor_id=request.headers.get("x-actor-id"),
                        actor_role=request.headers.get("x-actor-role"),
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=entity_type,
                        entity_id=entity_id,
                        status_code=status_code,
                        duration_ms=duration_ms,
                        description=f"{request.method} {request.url.path} -> {status_code} ({duration_ms}ms)",
                    )
                )
                await session.commit()
        except Exception:  # pragma: no cover
            logger.exception("Audit record failed for %s %s", request.method, request.url.path)
