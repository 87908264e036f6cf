"""Student directory queries and the student deletion workflow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cohortdesk.models.assignment_history import AssignmentHistory
from cohortdesk.models.student import Student
from cohortdesk.services import store
from cohortdesk.services.audit import (
    AuditAction,
    StudentDeletedDetails,
    history_for,
    record_audit_event,
)
from cohortdesk.services.departments import normalize_department
from cohortdesk.services.errors import NotFoundError
from cohortdesk.services.groups import UNASSIGNED_GROUP_ID
from cohortdesk.services.identity import Actor
from cohortdesk.services.policy import Action, ensure_allowed

logger = logging.getLogger(__name__)

# Materials tracking is not implemented; the detail view reports a constant.
MATERIALS_VIEWED_PLACEHOLDER = 0


@dataclass(frozen=True, slots=True)
class StudentDetail:
    student: Student
    history: list[AssignmentHistory]
    materials_viewed_count: int
    last_activity: Optional[datetime]


async def get_student(session: AsyncSession, student_id: str) -> Student:
    result = await store.execute(
        session,
        select(Student)
        .where(Student.id == student_id)
        .execution_options(populate_existing=True),
        action="load student",
    )
    student = result.scalar_one_or_none()
    if student is None:
        raise NotFoundError("Student not found")
    return student


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def list_students(
    session: AsyncSession,
    *,
    group_id: Optional[str] = None,
    department: Optional[str] = None,
    year: Optional[int] = None,
    search: Optional[str] = None,
) -> list[Student]:
    """Return students, newest first, narrowed by the given filters."""

    query = select(Student)
    if group_id == UNASSIGNED_GROUP_ID:
        query = query.where(Student.group_id.is_(None))
    elif group_id is not None:
        query = query.where(Student.group_id == group_id)
    if department is not None:
        query = query.where(Student.department == normalize_department(department))
    if year is not None:
        query = query.where(Student.year == year)
    if search:
        pattern = f"%{_escape_like(search.strip().lower())}%"
        query = query.where(
            or_(
                func.lower(Student.email).like(pattern, escape="\\"),
                func.lower(Student.name).like(pattern, escape="\\"),
                func.lower(Student.roll_number).like(pattern, escape="\\"),
            )
        )
    query = query.order_by(Student.created_at.desc(), Student.id).execution_options(
        populate_existing=True
    )

    result = await store.execute(session, query, action="list students")
    return list(result.scalars().all())


async def student_detail(session: AsyncSession, student_id: str) -> StudentDetail:
    student = await get_student(session, student_id)
    history = await history_for(session, student_id)
    return StudentDetail(
        student=student,
        history=history,
        materials_viewed_count=MATERIALS_VIEWED_PLACEHOLDER,
        last_activity=history[0].assigned_at if history else None,
    )


async def delete_student(session: AsyncSession, student_id: str, actor: Actor) -> Student:
    """Remove a student after the department check, then audit the removal.

    The audit entry is best-effort: if it cannot be written the student
    stays deleted and the failure is only logged. Assignment history is
    kept.
    """

    student = await get_student(session, student_id)
    ensure_allowed(actor, Action.DELETE_STUDENT, student)

    details = StudentDeletedDetails(
        student_email=student.email,
        student_name=student.name,
        department=student.department,
        year=student.year,
        deleted_by=actor.role.value,
    )

    await store.execute(
        session,
        delete(Student)
        .where(Student.id == student.id)
        .execution_options(synchronize_session="fetch"),
        action="delete student",
    )
    await store.commit(session, action="delete student")
    logger.info("Student %s deleted by %s", student.id, actor.id)

    await record_audit_event(
        session,
        action=AuditAction.STUDENT_DELETED,
        actor=actor,
        target_id=student.id,
        details=details,
    )
    return student


__all__ = [
    "MATERIALS_VIEWED_PLACEHOLDER",
    "StudentDetail",
    "delete_student",
    "get_student",
    "list_students",
    "student_detail",
]
