"""SQLAlchemy model for students managed through cohort groups."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from cohortdesk.models.base import Base


class Student(Base):
    """A student profile; only ``group_id`` is written by this service."""

    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(120), nullable=True)
    roll_number = Column(String(40), unique=True, nullable=True)
    department = Column(String(120), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    group_id = Column(
        String(36),
        ForeignKey("groups.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    group = relationship("Group", back_populates="members", lazy="joined")


__all__ = ["Student"]
