"""HTTP surface tests through the FastAPI test client."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cohortdesk.database import create_engine, get_session, init_models
from cohortdesk.main import app
from cohortdesk.models import Admin, AdminRole, Group, Student
from cohortdesk.utils import create_access_token, hash_password

CS = "Computer Science"
ECE = "Electronics and Communication Engineering"


@pytest.fixture
def api(tmp_path):
    """Point the app at a throwaway database and seed two admins."""

    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    asyncio.run(init_models(engine))

    async def override_get_session():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    def seed(*records) -> None:
        async def _seed():
            async with factory() as session:
                session.add_all(records)
                await session.commit()

        asyncio.run(_seed())

    seed(
        Admin(
            id="admin-global",
            email="chair@college.edu",
            name="Chair",
            password_hash=hash_password("correct-horse"),
            role=AdminRole.GLOBAL_ADMIN,
        ),
        Admin(
            id="admin-cs",
            email="execom.cs@college.edu",
            name="Execom CS",
            password_hash="unused",
            role=AdminRole.SCOPED_ADMIN,
            department=CS,
        ),
    )

    yield SimpleNamespace(client=TestClient(app), seed=seed)

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


def auth(admin_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject=admin_id)}"}


def student(student_id: str, *, department: str = CS, group_id: str | None = None) -> Student:
    return Student(
        id=student_id,
        email=f"{student_id}@college.edu",
        name=student_id.upper(),
        roll_number=student_id,
        department=department,
        year=2,
        group_id=group_id,
    )


def group(group_id: str, name: str, *, is_default: bool = False) -> Group:
    return Group(id=group_id, name=name, department=CS, year=2, is_default=is_default)


def test_login_and_me(api):
    response = api.client.post(
        "/auth/login",
        json={"email": "chair@college.edu", "password": "correct-horse"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["role"] == "global-admin"

    me = api.client.get(
        "/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"}
    )
    assert me.status_code == 200
    assert me.json()["id"] == "admin-global"


def test_login_rejects_wrong_password(api):
    response = api.client.post(
        "/auth/login",
        json={"email": "chair@college.edu", "password": "wrong-password"},
    )

    assert response.status_code == 401


def test_missing_token_is_unauthorized(api):
    assert api.client.get("/groups/").status_code == 401


def test_unknown_principal_is_forbidden(api):
    response = api.client.get("/groups/", headers=auth("not-an-admin"))

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_bulk_assign_reports_each_id(api):
    api.seed(group("g-1", "G1"), student("s-1"), student("s-2", group_id="g-1"))

    response = api.client.post(
        "/students/assign",
        json={"studentIds": ["s-1", "s-2", "ghost"], "groupId": "g-1"},
        headers=auth("admin-cs"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["results"] == [
        {"studentId": "s-1", "outcome": "moved", "reason": None},
        {"studentId": "s-2", "outcome": "no-op", "reason": None},
        {"studentId": "ghost", "outcome": "failed", "reason": "not-found"},
    ]
    assert body["summary"] == {"moved": 1, "noOp": 1, "failed": 1}

    history = api.client.get("/students/s-1/history", headers=auth("admin-cs")).json()
    assert [entry["toGroupName"] for entry in history] == ["G1"]


def test_empty_selection_maps_to_invalid_request(api):
    response = api.client.post(
        "/students/assign",
        json={"studentIds": [], "groupId": None},
        headers=auth("admin-global"),
    )

    assert response.status_code == 422
    assert response.json()["code"] == "invalid-request"
    assert response.json()["reason"] == "empty-selection"


def test_assign_without_target_is_rejected(api):
    api.seed(group("g-1", "G1"), student("s-1", group_id="g-1"))
    headers = auth("admin-global")

    response = api.client.post(
        "/students/assign", json={"studentIds": ["s-1"]}, headers=headers
    )

    assert response.status_code == 422
    detail = api.client.get("/students/s-1", headers=headers).json()
    assert detail["student"]["groupId"] == "g-1"
    assert detail["assignmentHistory"] == []


def test_explicit_null_target_detaches(api):
    api.seed(group("g-1", "G1"), student("s-1", group_id="g-1"))

    response = api.client.post(
        "/students/assign",
        json={"studentIds": ["s-1"], "groupId": None},
        headers=auth("admin-global"),
    )

    assert response.status_code == 200
    assert response.json()["summary"] == {"moved": 1, "noOp": 0, "failed": 0}


def test_assign_to_unknown_group_is_not_found(api):
    api.seed(student("s-1"))

    response = api.client.post(
        "/students/assign",
        json={"studentIds": ["s-1"], "groupId": "missing"},
        headers=auth("admin-global"),
    )

    assert response.status_code == 404
    assert response.json()["code"] == "not-found"


def test_group_lifecycle(api):
    headers = auth("admin-global")

    created = api.client.post(
        "/groups/",
        json={"name": "Section C", "department": "CS", "year": 2},
        headers=headers,
    )
    assert created.status_code == 201
    group_id = created.json()["id"]
    assert created.json()["department"] == CS
    assert created.json()["memberCount"] == 0

    updated = api.client.patch(
        f"/groups/{group_id}", json={"description": "Evening batch"}, headers=headers
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Section C"
    assert updated.json()["description"] == "Evening batch"

    duplicate = api.client.post(
        "/groups/",
        json={"name": "Section C", "department": "Computer Science", "year": 2},
        headers=headers,
    )
    assert duplicate.status_code == 409

    listing = api.client.get("/groups/?includeUnassigned=true", headers=headers).json()
    assert [item["id"] for item in listing] == ["unassigned", group_id]


def test_delete_group_moves_members_to_unassigned(api):
    api.seed(group("g-1", "G1"), student("a", group_id="g-1"), student("b", group_id="g-1"))
    headers = auth("admin-global")

    response = api.client.delete("/groups/g-1", headers=headers)

    assert response.status_code == 200
    assert sorted(response.json()["detachedStudentIds"]) == ["a", "b"]
    members = api.client.get("/groups/unassigned/members", headers=headers).json()
    assert sorted(member["id"] for member in members) == ["a", "b"]
    assert api.client.get("/groups/g-1", headers=headers).status_code == 404


def test_default_group_delete_is_rejected(api):
    api.seed(group("g-default", "Default", is_default=True))

    response = api.client.delete("/groups/g-default", headers=auth("admin-global"))

    assert response.status_code == 422
    assert response.json()["reason"] == "cannot-delete-default"


def test_scoped_admin_cannot_delete_other_department(api):
    api.seed(student("e-1", department=ECE))

    response = api.client.delete("/students/e-1", headers=auth("admin-cs"))

    assert response.status_code == 403
    assert response.json()["reason"] == "cross-department-forbidden"
    assert api.client.get("/students/e-1", headers=auth("admin-cs")).status_code == 200


def test_student_deletion_is_audited(api):
    api.seed(student("c-1"))

    response = api.client.delete("/students/c-1", headers=auth("admin-cs"))

    assert response.status_code == 200
    assert api.client.get("/students/c-1", headers=auth("admin-cs")).status_code == 404

    # only global admins may read the audit log
    assert api.client.get("/audit-logs", headers=auth("admin-cs")).status_code == 403
    entries = api.client.get(
        "/audit-logs?targetId=c-1", headers=auth("admin-global")
    ).json()
    assert [entry["action"] for entry in entries] == ["STUDENT_DELETED"]
    assert entries[0]["performedBy"] == "admin-cs"
    assert entries[0]["details"]["deleted_by"] == "scoped-admin"


def test_student_detail_and_stats(api):
    api.seed(group("g-1", "G1"), student("s-1", group_id="g-1"), student("s-2"))
    headers = auth("admin-global")

    detail = api.client.get("/students/s-1", headers=headers).json()
    assert detail["student"]["group"]["name"] == "G1"
    assert detail["assignmentHistory"] == []
    assert detail["materialsViewedCount"] == 0
    assert detail["lastActivity"] is None

    stats = api.client.get("/students/stats", headers=headers).json()
    assert stats == {"years": 1, "departments": 1, "groups": 1, "students": 2}


def test_departments_table_is_public(api):
    response = api.client.get("/departments")

    assert response.status_code == 200
    body = response.json()
    assert len(body["departments"]) == 6
    assert body["departments"][0]["shortName"] == "CS"
    assert body["years"]["1"] == "1st Year"


def test_health(api):
    assert api.client.get("/health").json()["status"] == "healthy"
