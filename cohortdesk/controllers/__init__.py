"""FastAPI routers acting as controllers in the MVC architecture."""

from . import audit, auth, groups, students

__all__ = ["audit", "auth", "groups", "students"]
