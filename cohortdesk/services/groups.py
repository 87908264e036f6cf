"""Group registry: CRUD over cohort groups and the unassigned pseudo-group."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import delete, distinct, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cohortdesk.models.group import Group
from cohortdesk.models.student import Student
from cohortdesk.services import store
from cohortdesk.services.audit import (
    UNASSIGNED_SNAPSHOT,
    AuditAction,
    GroupChangedDetails,
    GroupDeletedDetails,
    GroupSnapshot,
    append_history,
    record_audit_event,
)
from cohortdesk.services.departments import (
    ALL_DEPARTMENTS,
    department_color,
    is_valid_year,
    normalize_department,
)
from cohortdesk.services.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    StoreUnavailableError,
)
from cohortdesk.services.identity import Actor
from cohortdesk.services.policy import Action, ensure_allowed

UNASSIGNED_GROUP_ID = "unassigned"
UNASSIGNED_GROUP_NAME = "Unassigned Students"
UNASSIGNED_GROUP_COLOR = "#FFA500"
GROUP_DELETED_REASON = "Group deleted"

_EDITABLE_FIELDS = frozenset({"name", "department", "year", "description", "color"})
_DEFAULT_LOCKED_FIELDS = frozenset({"name", "department", "year"})


@dataclass(frozen=True, slots=True)
class GroupRecord:
    """Read model of a group with its member count computed at read time."""

    id: str
    name: str
    department: str
    year: Optional[int]
    description: Optional[str]
    color: str
    is_default: bool
    member_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_virtual(self) -> bool:
        return self.id == UNASSIGNED_GROUP_ID


@dataclass(frozen=True, slots=True)
class GroupDeletion:
    group: GroupRecord
    detached_student_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class HierarchyStats:
    years: int
    departments: int
    groups: int
    students: int


def is_unassigned(group_id: Optional[str]) -> bool:
    return group_id is None or group_id == UNASSIGNED_GROUP_ID


def unassigned_group(member_count: int) -> GroupRecord:
    return GroupRecord(
        id=UNASSIGNED_GROUP_ID,
        name=UNASSIGNED_GROUP_NAME,
        department=ALL_DEPARTMENTS,
        year=None,
        description="Students without a group",
        color=UNASSIGNED_GROUP_COLOR,
        is_default=False,
        member_count=member_count,
    )


def _clean_name(name: Any) -> str:
    cleaned = name.strip() if isinstance(name, str) else ""
    if not cleaned:
        raise InvalidRequestError("Name cannot be empty", reason="empty-name")
    return cleaned


def _clean_year(year: Any) -> Optional[int]:
    if not is_valid_year(year, allow_none=True):
        raise InvalidRequestError(
            f"Year must be between 1 and 4 or empty, got {year!r}",
            reason="invalid-year",
        )
    return year


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


def _reject_virtual(group_id: str) -> None:
    if group_id == UNASSIGNED_GROUP_ID:
        raise InvalidRequestError(
            "The unassigned group is virtual and cannot be modified",
            reason="unassigned-is-virtual",
        )


class GroupRegistry:
    """Create, edit, delete and list groups.

    Member counts are always derived from ``Student.group_id``; nothing is
    cached between calls.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, group_id: str) -> Group:
        result = await store.execute(
            self.session,
            select(Group).where(Group.id == group_id),
            action="load group",
        )
        group = result.scalar_one_or_none()
        if group is None:
            raise NotFoundError("Group not found")
        return group

    async def _member_counts(self) -> dict[Optional[str], int]:
        result = await store.execute(
            self.session,
            select(Student.group_id, func.count(Student.id)).group_by(Student.group_id),
            action="count group members",
        )
        return {group_id: count for group_id, count in result.all()}

    async def _member_count(self, group_id: Optional[str]) -> int:
        condition = (
            Student.group_id.is_(None)
            if group_id is None
            else Student.group_id == group_id
        )
        result = await store.execute(
            self.session,
            select(func.count(Student.id)).where(condition),
            action="count group members",
        )
        return result.scalar_one()

    async def _ensure_unique_name(
        self,
        name: str,
        department: str,
        year: Optional[int],
        *,
        exclude_id: Optional[str] = None,
    ) -> None:
        query = select(func.count(Group.id)).where(
            func.lower(Group.name) == name.lower(),
            Group.department == department,
            Group.year.is_(None) if year is None else Group.year == year,
        )
        if exclude_id is not None:
            query = query.where(Group.id != exclude_id)
        result = await store.execute(self.session, query, action="check group name")
        if result.scalar_one() > 0:
            raise ConflictError(
                "Another group with this name already exists for that department and year",
                reason="duplicate-group-name",
            )

    @staticmethod
    def _to_record(group: Group, member_count: int) -> GroupRecord:
        return GroupRecord(
            id=group.id,
            name=group.name,
            department=group.department,
            year=group.year,
            description=group.description,
            color=group.color,
            is_default=bool(group.is_default),
            member_count=member_count,
            created_at=group.created_at,
            updated_at=group.updated_at,
        )

    async def exists(self, group_id: str) -> bool:
        """Check the store directly, bypassing the session identity map."""

        result = await store.execute(
            self.session,
            select(Group.id).where(Group.id == group_id),
            action="load group",
        )
        return result.scalar_one_or_none() is not None

    async def list_groups(self, *, include_unassigned: bool = False) -> list[GroupRecord]:
        result = await store.execute(
            self.session,
            select(Group).order_by(Group.department, Group.year, Group.name),
            action="list groups",
        )
        groups = result.scalars().all()
        counts = await self._member_counts()

        records = [self._to_record(group, counts.get(group.id, 0)) for group in groups]
        if include_unassigned:
            records.insert(0, unassigned_group(counts.get(None, 0)))
        return records

    async def get_group(self, group_id: str) -> GroupRecord:
        if group_id == UNASSIGNED_GROUP_ID:
            return unassigned_group(await self._member_count(None))

        group = await self._load(group_id)
        return self._to_record(group, await self._member_count(group.id))

    async def create_group(
        self,
        actor: Actor,
        *,
        name: str,
        department: str,
        year: Optional[int] = None,
        description: Optional[str] = None,
        color: Optional[str] = None,
        is_default: bool = False,
    ) -> GroupRecord:
        ensure_allowed(actor, Action.MANAGE_GROUPS)

        name = _clean_name(name)
        department = normalize_department(department, allow_all=True)
        year = _clean_year(year)
        await self._ensure_unique_name(name, department, year)

        group = Group(
            name=name,
            department=department,
            year=year,
            description=_clean_text(description),
            color=_clean_text(color) or department_color(department),
            is_default=is_default,
        )
        self.session.add(group)
        await store.commit(self.session, action="create group")
        record = self._to_record(group, 0)

        await record_audit_event(
            self.session,
            action=AuditAction.GROUP_CREATED,
            actor=actor,
            target_id=record.id,
            details=GroupChangedDetails(
                name=record.name,
                department=record.department,
                year=record.year,
                changes=sorted(_EDITABLE_FIELDS),
            ),
        )
        return record

    async def update_group(
        self,
        group_id: str,
        actor: Actor,
        changes: Mapping[str, Any],
    ) -> GroupRecord:
        """Apply a partial update; keys absent from ``changes`` are left alone."""

        ensure_allowed(actor, Action.MANAGE_GROUPS)
        _reject_virtual(group_id)

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise InvalidRequestError(
                f"Unknown group fields: {', '.join(sorted(unknown))}",
                reason="unknown-field",
            )

        group = await self._load(group_id)

        updates: dict[str, Any] = {}
        if "name" in changes:
            updates["name"] = _clean_name(changes["name"])
        if "department" in changes:
            updates["department"] = normalize_department(
                changes["department"], allow_all=True
            )
        if "year" in changes:
            updates["year"] = _clean_year(changes["year"])
        if "description" in changes:
            updates["description"] = _clean_text(changes["description"])
        if "color" in changes:
            updates["color"] = _clean_text(changes["color"]) or department_color(
                updates.get("department", group.department)
            )

        changed = sorted(
            key for key, value in updates.items() if getattr(group, key) != value
        )
        if group.is_default and _DEFAULT_LOCKED_FIELDS.intersection(changed):
            raise InvalidRequestError(
                "Default groups cannot be renamed or re-scoped",
                reason="cannot-modify-default",
            )

        if not changed:
            return self._to_record(group, await self._member_count(group.id))

        if _DEFAULT_LOCKED_FIELDS.intersection(changed):
            await self._ensure_unique_name(
                updates.get("name", group.name),
                updates.get("department", group.department),
                updates.get("year", group.year),
                exclude_id=group.id,
            )

        for key in changed:
            setattr(group, key, updates[key])
        await store.commit(self.session, action="update group")
        record = self._to_record(group, await self._member_count(group.id))

        await record_audit_event(
            self.session,
            action=AuditAction.GROUP_UPDATED,
            actor=actor,
            target_id=record.id,
            details=GroupChangedDetails(
                name=record.name,
                department=record.department,
                year=record.year,
                changes=changed,
            ),
        )
        return record

    async def delete_group(self, group_id: str, actor: Actor) -> GroupDeletion:
        """Detach every member and remove the group in a single transaction."""

        ensure_allowed(actor, Action.MANAGE_GROUPS)
        _reject_virtual(group_id)

        group = await self._load(group_id)
        if group.is_default:
            raise InvalidRequestError(
                "Default groups cannot be deleted",
                reason="cannot-delete-default",
            )

        snapshot = GroupSnapshot.of(group)
        record = self._to_record(group, 0)
        try:
            # history follows the rows the UPDATE actually detached
            result = await self.session.execute(
                update(Student)
                .where(Student.group_id == group.id)
                .values(group_id=None)
                .returning(Student.id)
            )
            member_ids = list(result.scalars().all())
            for student_id in member_ids:
                append_history(
                    self.session,
                    student_id=student_id,
                    from_group=snapshot,
                    to_group=UNASSIGNED_SNAPSHOT,
                    actor=actor,
                    reason=GROUP_DELETED_REASON,
                )
            await self.session.execute(
                delete(Group)
                .where(Group.id == group.id)
                .execution_options(synchronize_session="fetch")
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StoreUnavailableError(
                "Unable to delete group; no members were detached"
            ) from exc

        await record_audit_event(
            self.session,
            action=AuditAction.GROUP_DELETED,
            actor=actor,
            target_id=record.id,
            details=GroupDeletedDetails(
                name=record.name,
                department=record.department,
                year=record.year,
                detached_student_ids=member_ids,
            ),
        )
        return GroupDeletion(group=record, detached_student_ids=member_ids)

    async def hierarchy_stats(self) -> HierarchyStats:
        students = await store.execute(
            self.session,
            select(
                func.count(distinct(Student.year)),
                func.count(distinct(Student.department)),
                func.count(Student.id),
            ),
            action="compute hierarchy stats",
        )
        years, departments, student_count = students.one()
        groups = await store.execute(
            self.session,
            select(func.count(Group.id)),
            action="compute hierarchy stats",
        )
        return HierarchyStats(
            years=years,
            departments=departments,
            groups=groups.scalar_one(),
            students=student_count,
        )


__all__ = [
    "GROUP_DELETED_REASON",
    "GroupDeletion",
    "GroupRecord",
    "GroupRegistry",
    "HierarchyStats",
    "UNASSIGNED_GROUP_ID",
    "is_unassigned",
    "unassigned_group",
]
