"""Pydantic schemas for group management."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class GroupCreateRequest(BaseModel):
    """Payload to create a group."""

    name: str = Field(..., max_length=120)
    department: str = Field(..., max_length=120)
    year: Optional[int] = None
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, max_length=32)
    isDefault: bool = Field(
        False,
        validation_alias=AliasChoices("isDefault", "is_default"),
        serialization_alias="isDefault",
    )

    model_config = ConfigDict(populate_by_name=True)


class GroupUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are applied."""

    name: Optional[str] = Field(None, max_length=120)
    department: Optional[str] = Field(None, max_length=120)
    year: Optional[int] = None
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, max_length=32)


class GroupResponse(BaseModel):
    """A group (or the unassigned pseudo-group) with its live member count."""

    id: str
    name: str
    department: str
    year: Optional[int] = None
    description: Optional[str] = None
    color: str
    isDefault: bool = Field(
        ...,
        validation_alias=AliasChoices("isDefault", "is_default"),
        serialization_alias="isDefault",
    )
    memberCount: int = Field(
        ...,
        validation_alias=AliasChoices("memberCount", "member_count"),
        serialization_alias="memberCount",
    )
    createdAt: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    updatedAt: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class GroupDeletionResponse(BaseModel):
    id: str
    name: str
    detachedStudentIds: list[str] = Field(
        default_factory=list,
        serialization_alias="detachedStudentIds",
    )
