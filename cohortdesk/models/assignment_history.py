"""Append-only ledger of student group changes."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text

from .base import Base


class AssignmentHistory(Base):
    """One membership change, with group names frozen at change time.

    ``student_id`` and the group ids carry no foreign keys so entries stay
    readable after the student or either group is deleted.
    """

    __tablename__ = "assignment_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(36), nullable=False, index=True)
    from_group_id = Column(String(36), nullable=True)
    from_group_name = Column(String(120), nullable=True)
    from_group_department = Column(String(120), nullable=True)
    to_group_id = Column(String(36), nullable=True)
    to_group_name = Column(String(120), nullable=True)
    to_group_department = Column(String(120), nullable=True)
    assigned_by = Column(String(36), nullable=False)
    assigned_by_email = Column(String(255), nullable=True)
    assigned_at = Column(DateTime, nullable=False, index=True)
    reason = Column(Text, nullable=True)


__all__ = ["AssignmentHistory"]
