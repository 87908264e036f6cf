"""Administrative audit log model."""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Integer, String

from .base import Base


class AuditLog(Base):
    """Persisted administrative action (deletions, group changes)."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(40), nullable=False, index=True)
    performed_by = Column(String(36), nullable=False)
    target_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, index=True)
    details = Column(JSON, nullable=False, default=dict)


__all__ = ["AuditLog"]
