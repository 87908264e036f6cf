"""Resolve an authenticated principal into an administrative actor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cohortdesk.models.admin import Admin, AdminRole
from cohortdesk.services.errors import ForbiddenError, StoreUnavailableError


@dataclass(frozen=True, slots=True)
class Actor:
    """Role and home department of the admin performing a request."""

    id: str
    email: str
    role: AdminRole
    department: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.role == AdminRole.GLOBAL_ADMIN

    @classmethod
    def from_admin(cls, admin: Admin) -> "Actor":
        return cls(
            id=admin.id,
            email=admin.email,
            role=AdminRole(admin.role),
            department=admin.department,
            name=admin.name,
        )


async def resolve_actor(session: AsyncSession, principal_id: str) -> Actor:
    """Load the admin row behind ``principal_id``.

    Looked up on every call: roles and departments may change between
    requests.
    """

    try:
        result = await session.execute(select(Admin).where(Admin.id == principal_id))
    except SQLAlchemyError as exc:
        raise StoreUnavailableError("Unable to resolve administrator") from exc

    admin = result.scalar_one_or_none()
    if admin is None:
        raise ForbiddenError(
            "Only admins can perform this action",
            reason="not-an-admin",
        )
    return Actor.from_admin(admin)


__all__ = ["Actor", "resolve_actor"]
