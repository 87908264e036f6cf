"""Official department reference table.

Changing this table is a governance action: bump ``DEPARTMENTS_VERSION``
whenever an entry is added, renamed or removed. Records store the
canonical ``name``; codes are accepted on input and normalized.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cohortdesk.services.errors import InvalidRequestError

DEPARTMENTS_VERSION = "2024.1"

ALL_DEPARTMENTS = "All"
DEFAULT_COLOR = "#6b7280"
MIN_YEAR = 1
MAX_YEAR = 4


@dataclass(frozen=True, slots=True)
class Department:
    code: str
    name: str
    short_name: str
    description: str
    color: str


DEPARTMENTS: tuple[Department, ...] = (
    Department(
        code="CS",
        name="Computer Science",
        short_name="CS",
        description="Department of Computer Science",
        color="#3b82f6",
    ),
    Department(
        code="CS(AI&ML)",
        name="Computer Science with AI & ML",
        short_name="CS(AI&ML)",
        description="Department of Computer Science specializing in AI & ML",
        color="#8b5cf6",
    ),
    Department(
        code="ECE",
        name="Electronics and Communication Engineering",
        short_name="ECE",
        description="Department of Electronics and Communication Engineering",
        color="#f59e0b",
    ),
    Department(
        code="ME",
        name="Mechanical Engineering",
        short_name="ME",
        description="Department of Mechanical Engineering",
        color="#ef4444",
    ),
    Department(
        code="MAE",
        name="Mechanical Automobile Engineering",
        short_name="MAE",
        description="Department of Mechanical Automobile Engineering",
        color="#10b981",
    ),
    Department(
        code="BT",
        name="Biotechnology and Biochemical Engineering",
        short_name="BT",
        description="Department of Biotechnology and Biochemical Engineering",
        color="#ec4899",
    ),
)

ACADEMIC_YEARS: dict[int, str] = {
    1: "1st Year",
    2: "2nd Year",
    3: "3rd Year",
    4: "4th Year",
}

_LOOKUP: dict[str, Department] = {}
for _department in DEPARTMENTS:
    _LOOKUP[_department.code.lower()] = _department
    _LOOKUP[_department.name.lower()] = _department


def get_department(value: str | None) -> Optional[Department]:
    """Return the department matching a code or canonical name."""

    if not value:
        return None
    return _LOOKUP.get(value.strip().lower())


def normalize_department(value: str | None, *, allow_all: bool = False) -> str:
    """Return the canonical department name for ``value``.

    ``"All"`` is only accepted when ``allow_all`` is set (groups may span
    every department, students may not).
    """

    if allow_all and value and value.strip().lower() == ALL_DEPARTMENTS.lower():
        return ALL_DEPARTMENTS

    department = get_department(value)
    if department is None:
        raise InvalidRequestError(
            f"Unknown department '{value}'",
            reason="unknown-department",
        )
    return department.name


def department_color(value: str | None) -> str:
    department = get_department(value)
    return department.color if department else DEFAULT_COLOR


def same_department(left: str | None, right: str | None) -> bool:
    """Compare two department references, tolerating codes vs. names."""

    if not left or not right:
        return False
    left_department = get_department(left)
    right_department = get_department(right)
    if left_department is None or right_department is None:
        return left.strip().lower() == right.strip().lower()
    return left_department is right_department


def is_valid_year(year: int | None, *, allow_none: bool = False) -> bool:
    if year is None:
        return allow_none
    # bool is an int subclass
    if isinstance(year, bool) or not isinstance(year, int):
        return False
    return MIN_YEAR <= year <= MAX_YEAR


__all__ = [
    "ACADEMIC_YEARS",
    "ALL_DEPARTMENTS",
    "DEFAULT_COLOR",
    "DEPARTMENTS",
    "DEPARTMENTS_VERSION",
    "Department",
    "department_color",
    "get_department",
    "is_valid_year",
    "normalize_department",
    "same_department",
]
