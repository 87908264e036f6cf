"""Assignment engine: move students between groups and record the history.

Every student is its own unit of work. A bulk request commits student by
student, so a failure on one row never undoes moves already committed for
the others; each id gets its own outcome instead of a single boolean.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cohortdesk.models.group import Group
from cohortdesk.models.student import Student
from cohortdesk.services.audit import GroupSnapshot, append_history
from cohortdesk.services.errors import InvalidRequestError, NotFoundError
from cohortdesk.services.groups import GroupRegistry, is_unassigned
from cohortdesk.services.identity import Actor
from cohortdesk.services.policy import Action, ensure_allowed
from cohortdesk.telemetry import record_assignment_outcome

logger = logging.getLogger(__name__)


class AssignmentOutcome(str, Enum):
    MOVED = "moved"
    NO_OP = "no-op"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StudentAssignmentResult:
    student_id: str
    outcome: AssignmentOutcome
    reason: Optional[str] = None

    @classmethod
    def moved(cls, student_id: str) -> "StudentAssignmentResult":
        return cls(student_id, AssignmentOutcome.MOVED)

    @classmethod
    def no_op(cls, student_id: str) -> "StudentAssignmentResult":
        return cls(student_id, AssignmentOutcome.NO_OP)

    @classmethod
    def failed(cls, student_id: str, reason: str) -> "StudentAssignmentResult":
        return cls(student_id, AssignmentOutcome.FAILED, reason)


@dataclass(frozen=True, slots=True)
class AssignmentSummary:
    moved: int
    no_op: int
    failed: int

    @classmethod
    def of(cls, results: Iterable[StudentAssignmentResult]) -> "AssignmentSummary":
        counts = {outcome: 0 for outcome in AssignmentOutcome}
        for result in results:
            counts[result.outcome] += 1
        return cls(
            moved=counts[AssignmentOutcome.MOVED],
            no_op=counts[AssignmentOutcome.NO_OP],
            failed=counts[AssignmentOutcome.FAILED],
        )


def normalize_target(target_group_id: object) -> Optional[str]:
    """Map the unassigned sentinel to ``None`` and reject malformed targets."""

    if target_group_id is not None and not isinstance(target_group_id, str):
        raise InvalidRequestError(
            "Target group must be a group id, 'unassigned' or null",
            reason="malformed-target",
        )
    if target_group_id is not None and not target_group_id.strip():
        raise InvalidRequestError(
            "Target group id cannot be blank",
            reason="malformed-target",
        )
    if target_group_id is None:
        return None
    target = target_group_id.strip()
    if is_unassigned(target):
        return None
    return target


def _dedupe(student_ids: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for student_id in student_ids:
        if not isinstance(student_id, str) or not student_id.strip():
            raise InvalidRequestError(
                "Student ids must be non-empty strings",
                reason="malformed-student-id",
            )
        seen.setdefault(student_id, None)
    return list(seen)


class AssignmentEngine:
    """Performs single and bulk student-to-group moves."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.groups = GroupRegistry(session)

    async def assign(
        self,
        student_ids: Iterable[str],
        target_group_id: Optional[str],
        actor: Actor,
        *,
        reason: Optional[str] = None,
    ) -> list[StudentAssignmentResult]:
        """Move every student in ``student_ids`` to ``target_group_id``.

        Raises only for structurally invalid requests (empty selection,
        malformed or unknown target) and for authorization failures, all
        detected before anything is written. Per-student problems come back
        as ``failed`` results.
        """

        ensure_allowed(actor, Action.ASSIGN)

        if isinstance(student_ids, str):
            student_ids = [student_ids]
        ids = _dedupe(student_ids)
        if not ids:
            raise InvalidRequestError(
                "Select at least one student",
                reason="empty-selection",
            )

        target = normalize_target(target_group_id)
        if target is not None and not await self.groups.exists(target):
            raise NotFoundError("Target group not found")

        reason = reason.strip() if reason and reason.strip() else None
        results = []
        for student_id in ids:
            result = await self._assign_one(student_id, target, actor, reason)
            record_assignment_outcome(result.outcome.value)
            results.append(result)

        summary = AssignmentSummary.of(results)
        logger.info(
            "Assignment to %s by %s: moved=%d no_op=%d failed=%d",
            target or "unassigned",
            actor.id,
            summary.moved,
            summary.no_op,
            summary.failed,
        )
        return results

    async def _load_group(self, group_id: Optional[str]) -> Optional[Group]:
        if group_id is None:
            return None
        result = await self.session.execute(
            select(Group)
            .where(Group.id == group_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _assign_one(
        self,
        student_id: str,
        target: Optional[str],
        actor: Actor,
        reason: Optional[str],
    ) -> StudentAssignmentResult:
        try:
            result = await self.session.execute(
                select(Student)
                .where(Student.id == student_id)
                .execution_options(populate_existing=True)
            )
            student = result.scalar_one_or_none()
            if student is None:
                return StudentAssignmentResult.failed(student_id, "not-found")

            if student.group_id == target:
                return StudentAssignmentResult.no_op(student_id)

            to_group = await self._load_group(target)
            if target is not None and to_group is None:
                # Target vanished after the request was validated.
                return StudentAssignmentResult.failed(student_id, "conflict")
            from_group = await self._load_group(student.group_id)

            student.group_id = target
            append_history(
                self.session,
                student_id=student.id,
                from_group=GroupSnapshot.of(from_group),
                to_group=GroupSnapshot.of(to_group),
                actor=actor,
                reason=reason,
            )
            await self.session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to assign student %s", student_id)
            await self.session.rollback()
            return StudentAssignmentResult.failed(student_id, "store-unavailable")

        return StudentAssignmentResult.moved(student_id)


__all__ = [
    "AssignmentEngine",
    "AssignmentOutcome",
    "AssignmentSummary",
    "StudentAssignmentResult",
    "normalize_target",
]
