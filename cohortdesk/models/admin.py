"""SQLAlchemy model for administrators allowed to manage cohorts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import String

from cohortdesk.models.base import Base


class AdminRole(str, Enum):
    """Administrative tiers."""

    GLOBAL_ADMIN = "global-admin"
    SCOPED_ADMIN = "scoped-admin"


class Admin(Base):
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(120), nullable=False)
    password_hash = Column(String(256), nullable=False)
    role = Column(
        SqlEnum(
            AdminRole,
            name="admin_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
    )
    department = Column(String(120), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


__all__ = ["Admin", "AdminRole"]
