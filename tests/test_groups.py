"""Group registry: validation, default-group protection and deletion."""

from __future__ import annotations

import pytest
from sqlalchemy import insert, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Delete, Update

from cohortdesk.models import AuditLog, Group, Student
from cohortdesk.services.audit import AuditAction, history_for
from cohortdesk.services.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    StoreUnavailableError,
)
from cohortdesk.services.groups import (
    GROUP_DELETED_REASON,
    UNASSIGNED_GROUP_ID,
    GroupRegistry,
)
from cohortdesk.services.students import get_student, list_students


async def audit_actions(session) -> list[str]:
    result = await session.execute(select(AuditLog.action).order_by(AuditLog.id))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_group_normalizes_department(session, global_admin):
    record = await GroupRegistry(session).create_group(
        global_admin, name="  Section B ", department="ece", year=3
    )

    assert record.name == "Section B"
    assert record.department == "Electronics and Communication Engineering"
    assert record.year == 3
    assert record.color == "#f59e0b"
    assert record.member_count == 0
    assert await audit_actions(session) == [AuditAction.GROUP_CREATED.value]


@pytest.mark.asyncio
async def test_group_may_span_all_departments_and_years(session, global_admin):
    record = await GroupRegistry(session).create_group(
        global_admin, name="Open Elective", department="All", year=None
    )

    assert record.department == "All"
    assert record.year is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fields, reason",
    [
        ({"name": "   ", "department": "CS"}, "empty-name"),
        ({"name": "X", "department": "Astrology"}, "unknown-department"),
        ({"name": "X", "department": "CS", "year": 5}, "invalid-year"),
    ],
)
async def test_create_group_rejects_invalid_input(session, global_admin, fields, reason):
    with pytest.raises(InvalidRequestError) as excinfo:
        await GroupRegistry(session).create_group(global_admin, **fields)

    assert excinfo.value.reason == reason


@pytest.mark.asyncio
async def test_duplicate_name_in_same_cohort_conflicts(session, make_group, global_admin):
    await make_group("Section A", year=2)

    with pytest.raises(ConflictError) as excinfo:
        await GroupRegistry(session).create_group(
            global_admin, name="section a", department="CS", year=2
        )

    assert excinfo.value.reason == "duplicate-group-name"


@pytest.mark.asyncio
async def test_same_name_allowed_in_other_year(session, make_group, global_admin):
    await make_group("Section A", year=2)

    record = await GroupRegistry(session).create_group(
        global_admin, name="Section A", department="CS", year=3
    )

    assert record.year == 3


@pytest.mark.asyncio
async def test_update_is_partial(session, make_group, global_admin):
    group = await make_group("Section A", year=2)

    record = await GroupRegistry(session).update_group(
        group.id, global_admin, {"description": "Morning batch"}
    )

    assert record.description == "Morning batch"
    assert record.name == "Section A"
    assert record.year == 2
    assert await audit_actions(session) == [AuditAction.GROUP_UPDATED.value]


@pytest.mark.asyncio
async def test_update_explicit_null_year_means_all_years(session, make_group, global_admin):
    group = await make_group(year=2)

    record = await GroupRegistry(session).update_group(group.id, global_admin, {"year": None})

    assert record.year is None


@pytest.mark.asyncio
async def test_update_without_changes_writes_no_audit(session, make_group, global_admin):
    group = await make_group("Section A")

    await GroupRegistry(session).update_group(group.id, global_admin, {"name": "Section A"})

    assert await audit_actions(session) == []


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(session, make_group, global_admin):
    group = await make_group()

    with pytest.raises(InvalidRequestError) as excinfo:
        await GroupRegistry(session).update_group(group.id, global_admin, {"is_default": True})

    assert excinfo.value.reason == "unknown-field"


@pytest.mark.asyncio
async def test_default_group_cannot_be_renamed(session, make_group, global_admin):
    group = await make_group("Year 2 Default", is_default=True)
    registry = GroupRegistry(session)

    with pytest.raises(InvalidRequestError) as excinfo:
        await registry.update_group(group.id, global_admin, {"name": "Renamed"})

    assert excinfo.value.reason == "cannot-modify-default"
    # cosmetic fields stay editable
    record = await registry.update_group(group.id, global_admin, {"color": "#000000"})
    assert record.color == "#000000"


@pytest.mark.asyncio
async def test_unassigned_group_is_virtual(session, global_admin):
    registry = GroupRegistry(session)

    for operation in (
        registry.update_group(UNASSIGNED_GROUP_ID, global_admin, {"name": "x"}),
        registry.delete_group(UNASSIGNED_GROUP_ID, global_admin),
    ):
        with pytest.raises(InvalidRequestError) as excinfo:
            await operation
        assert excinfo.value.reason == "unassigned-is-virtual"


@pytest.mark.asyncio
async def test_delete_group_detaches_members(
    session, make_group, make_student, global_admin
):
    group = await make_group("G1", year=2)
    group_id = group.id
    first = await make_student(group=group)
    second = await make_student(group=group)
    outsider = await make_student()
    registry = GroupRegistry(session)

    deletion = await registry.delete_group(group_id, global_admin)

    assert sorted(deletion.detached_student_ids) == sorted([first.id, second.id])
    unassigned = {student.id for student in await list_students(session, group_id=UNASSIGNED_GROUP_ID)}
    assert unassigned == {first.id, second.id, outsider.id}
    assert group_id not in {record.id for record in await registry.list_groups()}

    history = await history_for(session, first.id)
    assert history[0].from_group_name == "G1"
    assert history[0].to_group_id is None
    assert history[0].reason == GROUP_DELETED_REASON

    entries = (await session.execute(select(AuditLog))).scalars().all()
    assert [entry.action for entry in entries] == [AuditAction.GROUP_DELETED.value]
    assert sorted(entries[0].details["detached_student_ids"]) == sorted([first.id, second.id])


@pytest.mark.asyncio
async def test_default_group_cannot_be_deleted(
    session, make_group, make_student, global_admin
):
    group = await make_group("Default", is_default=True)
    student = await make_student(group=group)

    with pytest.raises(InvalidRequestError) as excinfo:
        await GroupRegistry(session).delete_group(group.id, global_admin)

    assert excinfo.value.reason == "cannot-delete-default"
    assert (await get_student(session, student.id)).group_id == group.id
    assert await session.get(Group, group.id) is not None
    assert await history_for(session, student.id) == []


@pytest.mark.asyncio
async def test_delete_missing_group(session, global_admin):
    with pytest.raises(NotFoundError):
        await GroupRegistry(session).delete_group("missing", global_admin)


@pytest.mark.asyncio
async def test_list_groups_counts_members_at_read_time(
    session, make_group, make_student, global_admin
):
    busy = await make_group("Busy")
    await make_group("Empty")
    await make_student(group=busy)
    await make_student(group=busy)
    await make_student()

    records = await GroupRegistry(session).list_groups(include_unassigned=True)

    counts = {record.name: record.member_count for record in records}
    assert counts == {"Unassigned Students": 1, "Busy": 2, "Empty": 0}
    assert records[0].is_virtual
    assert records[0].id == UNASSIGNED_GROUP_ID


@pytest.mark.asyncio
async def test_get_unassigned_pseudo_group(session, make_student):
    await make_student()

    record = await GroupRegistry(session).get_group(UNASSIGNED_GROUP_ID)

    assert record.name == "Unassigned Students"
    assert record.color == "#FFA500"
    assert record.department == "All"
    assert record.member_count == 1


@pytest.mark.asyncio
async def test_hierarchy_stats(session, make_group, make_student):
    await make_group()
    await make_student(year=1)
    await make_student(year=2, department="Mechanical Engineering")
    await make_student(year=2)

    stats = await GroupRegistry(session).hierarchy_stats()

    assert (stats.years, stats.departments, stats.groups, stats.students) == (2, 2, 1, 3)


@pytest.mark.asyncio
async def test_delete_group_records_members_assigned_during_delete(
    session, make_group, make_student, global_admin, monkeypatch
):
    group = await make_group("G1")
    group_id = group.id
    early = await make_student(group=group)
    real_execute = AsyncSession.execute
    late_ids: list[str] = []

    async def execute_with_late_join(self, statement, *args, **kwargs):
        if isinstance(statement, Update) and statement.table.name == "students" and not late_ids:
            late_ids.append("late-student")
            await real_execute(
                self,
                insert(Student).values(
                    id="late-student",
                    email="late@college.edu",
                    department="Computer Science",
                    year=2,
                    group_id=group_id,
                ),
            )
        return await real_execute(self, statement, *args, **kwargs)

    monkeypatch.setattr(AsyncSession, "execute", execute_with_late_join)

    deletion = await GroupRegistry(session).delete_group(group_id, global_admin)

    monkeypatch.undo()
    assert sorted(deletion.detached_student_ids) == sorted([early.id, "late-student"])
    late_history = await history_for(session, "late-student")
    assert [(entry.from_group_id, entry.to_group_id) for entry in late_history] == [
        (group_id, None)
    ]
    assert (await get_student(session, "late-student")).group_id is None


@pytest.mark.asyncio
async def test_failed_group_delete_changes_nothing(
    session, make_group, make_student, global_admin, monkeypatch
):
    group = await make_group("G1")
    group_id = group.id
    member_id = (await make_student(group=group)).id
    real_execute = AsyncSession.execute

    async def failing_group_delete(self, statement, *args, **kwargs):
        if isinstance(statement, Delete) and statement.table.name == "groups":
            raise OperationalError("DELETE FROM groups", {}, Exception("disk I/O error"))
        return await real_execute(self, statement, *args, **kwargs)

    monkeypatch.setattr(AsyncSession, "execute", failing_group_delete)

    with pytest.raises(StoreUnavailableError):
        await GroupRegistry(session).delete_group(group_id, global_admin)

    monkeypatch.undo()
    assert (await get_student(session, member_id)).group_id == group_id
    assert await history_for(session, member_id) == []
    assert (await GroupRegistry(session).get_group(group_id)).member_count == 1
    assert await audit_actions(session) == []
