"""Pydantic schemas used as views in the MVC architecture."""

from .audit import AuditLogResponse
from .auth import ActorResponse, LoginRequest, TokenResponse
from .common import ErrorResponse, SuccessResponse
from .departments import DepartmentResponse, DepartmentTableResponse
from .groups import (
    GroupCreateRequest,
    GroupDeletionResponse,
    GroupResponse,
    GroupUpdateRequest,
)
from .students import (
    AssignmentHistoryItem,
    AssignmentResultItem,
    AssignmentSummaryResponse,
    AssignStudentsRequest,
    AssignStudentsResponse,
    HierarchyStatsResponse,
    StudentDetailResponse,
    StudentGroupRef,
    StudentResponse,
)

__all__ = [
    "ActorResponse",
    "AssignStudentsRequest",
    "AssignStudentsResponse",
    "AssignmentHistoryItem",
    "AssignmentResultItem",
    "AssignmentSummaryResponse",
    "AuditLogResponse",
    "DepartmentResponse",
    "DepartmentTableResponse",
    "ErrorResponse",
    "GroupCreateRequest",
    "GroupDeletionResponse",
    "GroupResponse",
    "GroupUpdateRequest",
    "HierarchyStatsResponse",
    "LoginRequest",
    "StudentDetailResponse",
    "StudentGroupRef",
    "StudentResponse",
    "SuccessResponse",
    "TokenResponse",
]
