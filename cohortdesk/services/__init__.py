"""Cohort management services: assignment engine, group registry and audit."""

from .assignment import (
    AssignmentEngine,
    AssignmentOutcome,
    AssignmentSummary,
    StudentAssignmentResult,
)
from .errors import (
    ConflictError,
    CoreError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    StoreUnavailableError,
)
from .groups import UNASSIGNED_GROUP_ID, GroupRecord, GroupRegistry
from .identity import Actor, resolve_actor
from .policy import Action, Decision, can_act, ensure_allowed

__all__ = [
    "Action",
    "Actor",
    "AssignmentEngine",
    "AssignmentOutcome",
    "AssignmentSummary",
    "ConflictError",
    "CoreError",
    "Decision",
    "ForbiddenError",
    "GroupRecord",
    "GroupRegistry",
    "InvalidRequestError",
    "NotFoundError",
    "StoreUnavailableError",
    "StudentAssignmentResult",
    "UNASSIGNED_GROUP_ID",
    "can_act",
    "ensure_allowed",
    "resolve_actor",
]
