"""Endpoints for group creation, editing and deletion."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from cohortdesk.controllers.dependencies import CurrentActorDep, SessionDep
from cohortdesk.services.groups import GroupRegistry
from cohortdesk.services.policy import Action, ensure_allowed
from cohortdesk.services.students import list_students
from cohortdesk.views import (
    GroupCreateRequest,
    GroupDeletionResponse,
    GroupResponse,
    GroupUpdateRequest,
    StudentResponse,
)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("/", response_model=list[GroupResponse])
async def list_groups(
    current_actor: CurrentActorDep,
    session: SessionDep,
    include_unassigned: bool = Query(False, alias="includeUnassigned"),
) -> list[GroupResponse]:
    """Return every group with live member counts."""

    ensure_allowed(current_actor, Action.READ)
    records = await GroupRegistry(session).list_groups(
        include_unassigned=include_unassigned
    )
    return [GroupResponse.model_validate(record) for record in records]


@router.post(
    "/",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_group(
    payload: GroupCreateRequest,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> GroupResponse:
    record = await GroupRegistry(session).create_group(
        current_actor,
        name=payload.name,
        department=payload.department,
        year=payload.year,
        description=payload.description,
        color=payload.color,
        is_default=payload.isDefault,
    )
    return GroupResponse.model_validate(record)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> GroupResponse:
    """Return a single group; ``unassigned`` yields the pseudo-group."""

    ensure_allowed(current_actor, Action.READ)
    record = await GroupRegistry(session).get_group(group_id)
    return GroupResponse.model_validate(record)


@router.patch("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    payload: GroupUpdateRequest,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> GroupResponse:
    """Update group metadata; omitted fields are left unchanged."""

    record = await GroupRegistry(session).update_group(
        group_id,
        current_actor,
        payload.model_dump(exclude_unset=True),
    )
    return GroupResponse.model_validate(record)


@router.delete("/{group_id}", response_model=GroupDeletionResponse)
async def delete_group(
    group_id: str,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> GroupDeletionResponse:
    """Delete a non-default group, moving its members to unassigned."""

    deletion = await GroupRegistry(session).delete_group(group_id, current_actor)
    return GroupDeletionResponse(
        id=deletion.group.id,
        name=deletion.group.name,
        detachedStudentIds=deletion.detached_student_ids,
    )


@router.get("/{group_id}/members", response_model=list[StudentResponse])
async def list_group_members(
    group_id: str,
    current_actor: CurrentActorDep,
    session: SessionDep,
) -> list[StudentResponse]:
    ensure_allowed(current_actor, Action.READ)
    # 404 for unknown groups rather than an empty list
    await GroupRegistry(session).get_group(group_id)
    students = await list_students(session, group_id=group_id)
    return [StudentResponse.model_validate(student) for student in students]
