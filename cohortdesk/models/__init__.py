"""SQLAlchemy models for the MVC architecture."""

from .admin import Admin, AdminRole  # noqa: F401
from .assignment_history import AssignmentHistory  # noqa: F401
from .audit_log import AuditLog  # noqa: F401
from .base import Base
from .group import Group  # noqa: F401
from .student import Student  # noqa: F401

__all__ = [
    "Base",
    "Admin",
    "AdminRole",
    "Student",
    "Group",
    "AssignmentHistory",
    "AuditLog",
]
