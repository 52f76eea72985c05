"""Caller identity.

Tokens are verified upstream (API gateway / auth service); by the time a
request reaches this service the identity travels in trusted headers.
Everything past the router layer only ever sees an :class:`Actor`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, Header

from onboard.core.exceptions import ForbiddenError, UnauthorizedError


class Role(str, Enum):
    ADMIN = "admin"
    AGENT = "agent"
    EMPLOYEE = "employee"


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def display_name(self) -> str:
        return self.name or self.id


async def get_current_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
    x_actor_name: str | None = Header(default=None),
) -> Actor:
    """FastAPI dependency resolving the verified caller identity."""
    if not x_actor_id or not x_actor_role:
        raise UnauthorizedError()
    try:
        role = Role(x_actor_role.lower())
    except ValueError:
        raise UnauthorizedError(f"Unknown role '{x_actor_role}'") from None
    return Actor(id=x_actor_id, role=role, name=x_actor_name)


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise ForbiddenError("Admin access required")
    return actor


async def require_field_user(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Agents and employees: the roles that register and visit vendors."""
    if actor.role not in (Role.AGENT, Role.EMPLOYEE):
        raise ForbiddenError("Agent or employee access required")
    return actor
