"""Read-only endpoints over the department table and the audit log."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from cohortdesk.controllers.dependencies import CurrentActorDep, SessionDep
from cohortdesk.services.audit import AuditAction, audit_entries
from cohortdesk.services.departments import (
    ACADEMIC_YEARS,
    DEPARTMENTS,
    DEPARTMENTS_VERSION,
)
from cohortdesk.services.policy import Action, ensure_allowed
from cohortdesk.views import (
    AuditLogResponse,
    DepartmentResponse,
    DepartmentTableResponse,
)

router = APIRouter(tags=["reference"])


@router.get("/departments", response_model=DepartmentTableResponse)
async def list_departments() -> DepartmentTableResponse:
    """Return the versioned department reference table."""

    return DepartmentTableResponse(
        version=DEPARTMENTS_VERSION,
        departments=[
            DepartmentResponse.model_validate(department) for department in DEPARTMENTS
        ],
        years=ACADEMIC_YEARS,
    )


@router.get("/audit-logs", response_model=list[AuditLogResponse])
async def list_audit_logs(
    current_actor: CurrentActorDep,
    session: SessionDep,
    target_id: Optional[str] = Query(None, alias="targetId"),
    action: Optional[AuditAction] = None,
    limit: int = Query(50, ge=1, le=500),
) -> list[AuditLogResponse]:
    ensure_allowed(current_actor, Action.READ_AUDIT)
    entries = await audit_entries(
        session,
        target_id=target_id,
        action=action,
        limit=limit,
    )
    return [AuditLogResponse.model_validate(entry) for entry in entries]
