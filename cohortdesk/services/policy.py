"""Authorization policy for cohort administration.

Global admins may do anything. Scoped admins manage groups and assignments
everywhere, but may only delete students of their home department.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from cohortdesk.models.admin import AdminRole
from cohortdesk.services.departments import same_department
from cohortdesk.services.errors import ForbiddenError
from cohortdesk.services.identity import Actor


class Action(str, Enum):
    READ = "read"
    ASSIGN = "assign"
    MANAGE_GROUPS = "manage-groups"
    DELETE_STUDENT = "delete-student"
    READ_AUDIT = "read-audit"


CROSS_DEPARTMENT_FORBIDDEN = "cross-department-forbidden"

_SCOPED_UNRESTRICTED = frozenset({Action.READ, Action.ASSIGN, Action.MANAGE_GROUPS})


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def can_act(actor: Actor, action: Action, target: Any = None) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``target``.

    ``target`` is the student being acted on for student-level actions;
    anything exposing a ``department`` attribute works.
    """

    if actor.role == AdminRole.GLOBAL_ADMIN:
        return ALLOW

    if actor.role != AdminRole.SCOPED_ADMIN:
        return Decision(False, "unknown-role")

    if action in _SCOPED_UNRESTRICTED:
        return ALLOW

    if action == Action.DELETE_STUDENT:
        target_department = getattr(target, "department", None)
        if same_department(actor.department, target_department):
            return ALLOW
        return Decision(False, CROSS_DEPARTMENT_FORBIDDEN)

    return Decision(False, "insufficient-role")


def ensure_allowed(actor: Actor, action: Action, target: Any = None) -> None:
    """Raise :class:`ForbiddenError` unless the policy allows the action."""

    decision = can_act(actor, action, target)
    if not decision.allowed:
        raise ForbiddenError(
            f"{actor.role.value} may not {action.value}",
            reason=decision.reason,
        )


__all__ = [
    "Action",
    "CROSS_DEPARTMENT_FORBIDDEN",
    "Decision",
    "can_act",
    "ensure_allowed",
]
