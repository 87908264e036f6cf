"""Assignment history and administrative audit log.

Both logs are append-only: this module only ever inserts and queries.
Assignment history rows are written inside the caller's transaction so a
membership change and its history entry commit together. Audit log rows
are best-effort and written in their own transaction after the action
they describe has committed; a failed write is logged and counted, never
raised.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cohortdesk.models.assignment_history import AssignmentHistory
from cohortdesk.models.audit_log import AuditLog
from cohortdesk.models.group import Group
from cohortdesk.services.errors import StoreUnavailableError
from cohortdesk.services.identity import Actor
from cohortdesk.telemetry import record_audit_failure

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("cohortdesk.audit")


class _MonotonicClock:
    """UTC wall clock that never repeats or goes backwards within a process."""

    _tick = timedelta(microseconds=1)

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        with self._lock:
            current = datetime.utcnow()
            if self._last is not None and current <= self._last:
                current = self._last + self._tick
            self._last = current
            return current


_clock = _MonotonicClock()


def next_timestamp() -> datetime:
    """Return the next commit-ordered timestamp for a log entry."""

    return _clock.now()


class AuditAction(str, Enum):
    STUDENT_DELETED = "STUDENT_DELETED"
    GROUP_CREATED = "GROUP_CREATED"
    GROUP_UPDATED = "GROUP_UPDATED"
    GROUP_DELETED = "GROUP_DELETED"


class StudentDeletedDetails(BaseModel):
    student_email: str
    student_name: Optional[str] = None
    department: str
    year: int
    deleted_by: str


class GroupChangedDetails(BaseModel):
    name: str
    department: str
    year: Optional[int] = None
    changes: list[str] = []


class GroupDeletedDetails(BaseModel):
    name: str
    department: str
    year: Optional[int] = None
    detached_student_ids: list[str] = []


AUDIT_DETAIL_MODELS: dict[AuditAction, type[BaseModel]] = {
    AuditAction.STUDENT_DELETED: StudentDeletedDetails,
    AuditAction.GROUP_CREATED: GroupChangedDetails,
    AuditAction.GROUP_UPDATED: GroupChangedDetails,
    AuditAction.GROUP_DELETED: GroupDeletedDetails,
}


@dataclass(frozen=True, slots=True)
class GroupSnapshot:
    """Name and department of a group frozen at the time of a change."""

    id: Optional[str]
    name: Optional[str]
    department: Optional[str]

    @classmethod
    def of(cls, group: Group | None) -> "GroupSnapshot":
        if group is None:
            return UNASSIGNED_SNAPSHOT
        return cls(id=group.id, name=group.name, department=group.department)


UNASSIGNED_SNAPSHOT = GroupSnapshot(id=None, name=None, department=None)


def append_history(
    session: AsyncSession,
    *,
    student_id: str,
    from_group: GroupSnapshot,
    to_group: GroupSnapshot,
    actor: Actor,
    reason: Optional[str] = None,
) -> AssignmentHistory:
    """Stage a history entry in the caller's transaction (no commit)."""

    entry = AssignmentHistory(
        student_id=student_id,
        from_group_id=from_group.id,
        from_group_name=from_group.name,
        from_group_department=from_group.department,
        to_group_id=to_group.id,
        to_group_name=to_group.name,
        to_group_department=to_group.department,
        assigned_by=actor.id,
        assigned_by_email=actor.email,
        assigned_at=next_timestamp(),
        reason=reason,
    )
    session.add(entry)
    return entry


async def record_audit_event(
    session: AsyncSession,
    *,
    action: AuditAction,
    actor: Actor,
    target_id: str,
    details: BaseModel,
) -> AuditLog | None:
    """Persist an audit entry without ever failing the caller's action.

    Returns the stored entry, or ``None`` when the write failed. Only a
    details payload of the wrong shape for ``action`` raises.
    """

    expected = AUDIT_DETAIL_MODELS[action]
    if not isinstance(details, expected):
        raise TypeError(
            f"{action.value} expects {expected.__name__}, got {type(details).__name__}"
        )

    payload = details.model_dump(mode="json")
    entry = AuditLog(
        action=action.value,
        performed_by=actor.id,
        target_id=target_id,
        created_at=next_timestamp(),
        details=payload,
    )

    try:
        session.add(entry)
        await session.commit()
    except Exception:
        logger.exception(
            "Failed to write audit entry %s for %s", action.value, target_id
        )
        record_audit_failure(action.value)
        try:
            await session.rollback()
        except SQLAlchemyError:
            logger.debug("Rollback after audit failure also failed", exc_info=True)
        return None

    audit_logger.info(
        "%s target=%s by=%s role=%s details=%s",
        action.value,
        target_id,
        actor.id,
        actor.role.value,
        payload,
    )
    return entry


async def history_for(session: AsyncSession, student_id: str) -> list[AssignmentHistory]:
    """Return the assignment history of a student, newest first."""

    try:
        result = await session.execute(
            select(AssignmentHistory)
            .where(AssignmentHistory.student_id == student_id)
            .order_by(
                AssignmentHistory.assigned_at.desc(),
                AssignmentHistory.id.desc(),
            )
        )
    except SQLAlchemyError as exc:
        raise StoreUnavailableError("Unable to load assignment history") from exc
    return list(result.scalars().all())


async def audit_entries(
    session: AsyncSession,
    *,
    target_id: Optional[str] = None,
    action: Optional[AuditAction] = None,
    limit: int = 50,
) -> list[AuditLog]:
    """Return recent audit entries, newest first."""

    query = select(AuditLog)
    if target_id is not None:
        query = query.where(AuditLog.target_id == target_id)
    if action is not None:
        query = query.where(AuditLog.action == action.value)
    query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)

    try:
        result = await session.execute(query)
    except SQLAlchemyError as exc:
        raise StoreUnavailableError("Unable to load audit log") from exc
    return list(result.scalars().all())


__all__ = [
    "AUDIT_DETAIL_MODELS",
    "AuditAction",
    "GroupChangedDetails",
    "GroupDeletedDetails",
    "GroupSnapshot",
    "StudentDeletedDetails",
    "UNASSIGNED_SNAPSHOT",
    "append_history",
    "audit_entries",
    "history_for",
    "next_timestamp",
    "record_audit_event",
]
