"""Pydantic schemas for students, assignments and assignment history."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from cohortdesk.services.assignment import AssignmentOutcome


class StudentGroupRef(BaseModel):
    id: str
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class StudentResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    rollNumber: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("rollNumber", "roll_number"),
        serialization_alias="rollNumber",
    )
    department: str
    year: int
    groupId: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("groupId", "group_id"),
        serialization_alias="groupId",
    )
    group: Optional[StudentGroupRef] = None
    createdAt: datetime = Field(
        ...,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AssignStudentsRequest(BaseModel):
    """Move one or many students; ``groupId`` null or ``"unassigned"`` detaches."""

    studentIds: list[str] = Field(
        ...,
        validation_alias=AliasChoices("studentIds", "student_ids"),
    )
    groupId: Optional[str] = Field(
        ...,
        validation_alias=AliasChoices("groupId", "group_id"),
    )
    reason: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(populate_by_name=True)


class AssignmentResultItem(BaseModel):
    studentId: str = Field(
        ...,
        validation_alias=AliasChoices("studentId", "student_id"),
        serialization_alias="studentId",
    )
    outcome: AssignmentOutcome
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AssignmentSummaryResponse(BaseModel):
    moved: int
    noOp: int = Field(
        ...,
        validation_alias=AliasChoices("noOp", "no_op"),
        serialization_alias="noOp",
    )
    failed: int

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AssignStudentsResponse(BaseModel):
    results: list[AssignmentResultItem]
    summary: AssignmentSummaryResponse


class AssignmentHistoryItem(BaseModel):
    id: int
    studentId: str = Field(
        ...,
        validation_alias=AliasChoices("studentId", "student_id"),
        serialization_alias="studentId",
    )
    fromGroupId: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("fromGroupId", "from_group_id"),
        serialization_alias="fromGroupId",
    )
    fromGroupName: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("fromGroupName", "from_group_name"),
        serialization_alias="fromGroupName",
    )
    fromGroupDepartment: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("fromGroupDepartment", "from_group_department"),
        serialization_alias="fromGroupDepartment",
    )
    toGroupId: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("toGroupId", "to_group_id"),
        serialization_alias="toGroupId",
    )
    toGroupName: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("toGroupName", "to_group_name"),
        serialization_alias="toGroupName",
    )
    toGroupDepartment: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("toGroupDepartment", "to_group_department"),
        serialization_alias="toGroupDepartment",
    )
    assignedBy: str = Field(
        ...,
        validation_alias=AliasChoices("assignedBy", "assigned_by"),
        serialization_alias="assignedBy",
    )
    assignedByEmail: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("assignedByEmail", "assigned_by_email"),
        serialization_alias="assignedByEmail",
    )
    assignedAt: datetime = Field(
        ...,
        validation_alias=AliasChoices("assignedAt", "assigned_at"),
        serialization_alias="assignedAt",
    )
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class StudentDetailResponse(BaseModel):
    student: StudentResponse
    assignmentHistory: list[AssignmentHistoryItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("assignmentHistory", "history"),
        serialization_alias="assignmentHistory",
    )
    materialsViewedCount: int = Field(
        0,
        validation_alias=AliasChoices("materialsViewedCount", "materials_viewed_count"),
        serialization_alias="materialsViewedCount",
    )
    lastActivity: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("lastActivity", "last_activity"),
        serialization_alias="lastActivity",
    )

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class HierarchyStatsResponse(BaseModel):
    years: int
    departments: int
    groups: int
    students: int

    model_config = ConfigDict(from_attributes=True)
