"""Shared fixtures: an isolated SQLite store per test and seeded records."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_RUNTIME_DIR = Path(tempfile.mkdtemp(prefix="cohortdesk-tests-"))
os.environ.setdefault("DB_DSN", f"sqlite+aiosqlite:///{_RUNTIME_DIR / 'app.db'}")
os.environ.setdefault("LOG_FILE", str(_RUNTIME_DIR / "app.log"))
os.environ.setdefault("AUDIT_LOG_FILE", str(_RUNTIME_DIR / "audit.log"))
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from cohortdesk.database import create_engine, init_models  # noqa: E402
from cohortdesk.models import Admin, AdminRole, Group, Student  # noqa: E402
from cohortdesk.services.identity import Actor  # noqa: E402

CS = "Computer Science"
ECE = "Electronics and Communication Engineering"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh database file with every table created."""

    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'cohortdesk.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        yield session


@pytest.fixture
def make_group(session):
    async def _make(
        name: str = "Section A",
        *,
        department: str = CS,
        year: int | None = 2,
        is_default: bool = False,
    ) -> Group:
        group = Group(
            name=name,
            department=department,
            year=year,
            color="#3b82f6",
            is_default=is_default,
        )
        session.add(group)
        await session.commit()
        return group

    return _make


@pytest.fixture
def make_student(session):
    counter = {"n": 0}

    async def _make(
        *,
        department: str = CS,
        year: int = 2,
        group: Group | None = None,
        name: str | None = None,
    ) -> Student:
        counter["n"] += 1
        number = counter["n"]
        student = Student(
            email=f"student{number}@college.edu",
            name=name or f"Student {number}",
            roll_number=f"R{number:04d}",
            department=department,
            year=year,
            group_id=group.id if group is not None else None,
        )
        session.add(student)
        await session.commit()
        return student

    return _make


@pytest.fixture
def make_admin(session):
    async def _make(
        role: AdminRole = AdminRole.GLOBAL_ADMIN,
        *,
        department: str | None = None,
        email: str | None = None,
    ) -> Actor:
        admin = Admin(
            email=email or f"{role.value}-{department or 'all'}@college.edu".lower().replace(" ", "-"),
            name="Admin",
            password_hash="unused",
            role=role,
            department=department,
        )
        session.add(admin)
        await session.commit()
        return Actor.from_admin(admin)

    return _make


@pytest_asyncio.fixture
async def global_admin(make_admin) -> Actor:
    return await make_admin(AdminRole.GLOBAL_ADMIN)


@pytest_asyncio.fixture
async def scoped_admin(make_admin) -> Actor:
    return await make_admin(AdminRole.SCOPED_ADMIN, department=CS)
