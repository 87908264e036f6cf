"""Pydantic schemas for audit log inspection."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuditLogResponse(BaseModel):
    id: int
    action: str
    performedBy: str = Field(
        ...,
        validation_alias=AliasChoices("performedBy", "performed_by"),
        serialization_alias="performedBy",
    )
    targetId: str = Field(
        ...,
        validation_alias=AliasChoices("targetId", "target_id"),
        serialization_alias="targetId",
    )
    createdAt: datetime = Field(
        ...,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)
