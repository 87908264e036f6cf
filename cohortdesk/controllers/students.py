"""Endpoints for listing, assigning and deleting students."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from cohortdesk.controllers.dependencies import CurrentActorDep, SessionDep
from cohortdesk.services.assignment import AssignmentEngine, AssignmentSummary
from cohortdesk.services.audit import history_for
from cohortdesk.services.groups import GroupRegistry
from cohortdesk.services.policy import Action, ensure_allowed
from cohortdesk.services.students import delete_student, list_students, student_detail
from cohortdesk.views import (
    AssignmentHistoryItem,
    AssignmentResultItem,
    AssignmentSummaryResponse,
    AssignStudentsRequest,
    AssignStudentsResponse,
    HierarchyStatsResponse,
    StudentDetailResponse,
    StudentResponse,
    SuccessResponse,
)

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/", response_model=list[StudentResponse])
async def get_students(
    current_actor: CurrentActorDep,
    session: SessionDep,
    group_id: Optional[str] = Query(None, alias="groupId"),
    department: Optional[str] = None,
    year: Optional[int] = None,
    search: Optional[str] = None,
) -> list[StudentResponse]:
    ensure_allowed(current_actor, Action.READ)
    students = await list_students(
        session,
        group_id=group_id,
        department=department,
        year=year,
        search=search,
    )
    return [StudentResponse.model_validate(student) for student in students]


@router.get("/stats", response_model=HierarchyStatsResponse)
async def get_hierarchy_stats(
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> HierarchyStatsResponse:
    """Counts of years, departments, groups and students."""

    ensure_allowed(current_actor, Action.READ)
    stats = await GroupRegistry(session).hierarchy_stats()
    return HierarchyStatsResponse.model_validate(stats)


@router.post("/assign", response_model=AssignStudentsResponse)
async def assign_students(
    payload: AssignStudentsRequest,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> AssignStudentsResponse:
    """Move one or more students; the response reports every id separately."""

    results = await AssignmentEngine(session).assign(
        payload.studentIds,
        payload.groupId,
        current_actor,
        reason=payload.reason,
    )
    return AssignStudentsResponse(
        results=[AssignmentResultItem.model_validate(result) for result in results],
        summary=AssignmentSummaryResponse.model_validate(AssignmentSummary.of(results)),
    )


@router.get("/{student_id}", response_model=StudentDetailResponse)
async def get_student_detail(
    student_id: str,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> StudentDetailResponse:
    ensure_allowed(current_actor, Action.READ)
    detail = await student_detail(session, student_id)
    return StudentDetailResponse(
        student=StudentResponse.model_validate(detail.student),
        assignmentHistory=[
            AssignmentHistoryItem.model_validate(entry) for entry in detail.history
        ],
        materialsViewedCount=detail.materials_viewed_count,
        lastActivity=detail.last_activity,
    )


@router.get("/{student_id}/history", response_model=list[AssignmentHistoryItem])
async def get_student_history(
    student_id: str,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> list[AssignmentHistoryItem]:
    """Assignment history, newest first; empty for students without changes."""

    ensure_allowed(current_actor, Action.READ)
    entries = await history_for(session, student_id)
    return [AssignmentHistoryItem.model_validate(entry) for entry in entries]


@router.delete("/{student_id}", response_model=SuccessResponse)
async def remove_student(
    student_id: str,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> SuccessResponse:
    await delete_student(session, student_id, current_actor)
    return SuccessResponse(message="Student deleted successfully")
