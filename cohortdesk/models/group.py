"""SQLAlchemy model defining cohort groups."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from cohortdesk.models.base import Base


class Group(Base):
    """A department/year cohort students can be assigned to."""

    __tablename__ = "groups"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(120), nullable=False)
    department = Column(String(120), nullable=False, index=True)
    year = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    color = Column(String(32), nullable=False, default="#6b7280")
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    members = relationship("Student", back_populates="group", passive_deletes=True)


__all__ = ["Group"]
