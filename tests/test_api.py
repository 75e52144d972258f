"""HTTP tests for the plan API through FastAPI's TestClient."""
from __future__ import annotations

from datetime import date
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sigepp.app import app
from sigepp.db import Base
from sigepp.db.models import AcademicPeriod, Subject, TeacherAssignment
from sigepp.dependencies import get_db, get_file_storage, issue_identity_token
from sigepp.services.file_storage import LocalFileStorage


@pytest.fixture()
def client(tmp_path) -> Iterator[TestClient]:
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, future=True, expire_on_commit=False)

    with TestingSession() as session:
        first = AcademicPeriod(id="p-1", code="2025-1", name="First term", start_date=date(2025, 2, 1))
        second = AcademicPeriod(id="p-2", code="2025-2", name="Second term", start_date=date(2025, 8, 1))
        subject = Subject(id="s-1", code="IS-401", name="Software Project")
        session.add_all([first, second, subject])
        session.add_all(
            [
                TeacherAssignment(id="ta-1", teacher_id="teacher-1", subject_id="s-1", academic_period_id="p-1"),
                TeacherAssignment(id="ta-2", teacher_id="teacher-1", subject_id="s-1", academic_period_id="p-2"),
            ]
        )
        session.commit()

    def override_db() -> Iterator[Session]:
        session = TestingSession()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    storage = LocalFileStorage(tmp_path / "files", secret="test-secret")
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        engine.dispose()


def _auth(user_id: str, *roles: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_identity_token(user_id, roles)}"}


TEACHER = _auth("teacher-1", "TEACHER")
STRANGER = _auth("teacher-2", "TEACHER")
ADMIN = _auth("admin-1", "ADMIN")


def _create_plan(client: TestClient, **overrides) -> str:
    payload = {
        "title": "Inventory management system",
        "academic_period_id": "p-1",
        "teacher_assignment_ids": ["ta-1"],
        "student_names": ["Ana Gómez", "Luis Pérez"],
    }
    payload.update(overrides)
    response = client.post("/ppa", json=payload, headers=TEACHER)
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _set_status(client: TestClient, plan_id: str, status: str) -> None:
    response = client.post(f"/ppa/{plan_id}/status", json={"new_status": status}, headers=ADMIN)
    assert response.status_code == 200, response.text


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_identity_is_required(client: TestClient) -> None:
    assert client.get("/ppa/my").status_code == 401
    bad = client.get("/ppa/my", headers={"Authorization": "Bearer forged.token"})
    assert bad.status_code == 401


def test_create_and_read_plan(client: TestClient) -> None:
    plan_id = _create_plan(client)

    detail = client.get(f"/ppa/{plan_id}", headers=TEACHER).json()
    assert detail["status"] == "Proposal"
    assert detail["primary_teacher_id"] == "teacher-1"
    assert detail["teacher_assignment_ids"] == ["ta-1"]
    assert [s["name"] for s in detail["students"]] == ["Ana Gómez", "Luis Pérez"]
    assert detail["has_continuation"] is False

    mine = client.get("/ppa/my", headers=TEACHER).json()
    assert [p["id"] for p in mine] == [plan_id]
    assert mine[0]["students_count"] == 2

    history = client.get(f"/ppa/{plan_id}/history", headers=TEACHER).json()
    assert [(h["action_type"], h["action_label"]) for h in history] == [("Created", "Creación")]


def test_update_and_version_conflict(client: TestClient) -> None:
    plan_id = _create_plan(client)

    updated = client.put(f"/ppa/{plan_id}", json={"title": "Renamed plan", "expected_version": 1}, headers=TEACHER)
    assert updated.status_code == 200
    assert updated.json()["version"] == 2

    stale = client.put(f"/ppa/{plan_id}", json={"title": "Other name", "expected_version": 1}, headers=TEACHER)
    assert stale.status_code == 409
    assert stale.json()["error"] == "concurrency_conflict"


def test_error_mapping(client: TestClient) -> None:
    plan_id = _create_plan(client)

    duplicate = client.put(
        f"/ppa/{plan_id}", json={"new_students": [{"name": "Ana"}, {"name": " ANA"}]}, headers=TEACHER
    )
    assert duplicate.status_code == 422
    assert duplicate.json()["error"] == "duplicate_student"
    assert duplicate.json()["field"] == "new_students"

    forbidden = client.post(f"/ppa/{plan_id}/status", json={"new_status": "InProgress"}, headers=TEACHER)
    assert forbidden.status_code == 403

    assert client.get(f"/ppa/{plan_id}", headers=STRANGER).status_code == 403
    assert client.get("/ppa/missing", headers=TEACHER).status_code == 404

    _set_status(client, plan_id, "Archived")
    archived = client.put(f"/ppa/{plan_id}", json={"title": "Too late"}, headers=ADMIN)
    assert archived.status_code == 409
    assert archived.json() == {
        "detail": "Archived plans cannot be modified",
        "error": "invalid_state",
        "field": "status",
        "state": "Archived",
    }
    reopen = client.post(f"/ppa/{plan_id}/status", json={"new_status": "InProgress"}, headers=ADMIN)
    assert reopen.status_code == 409


def test_admin_creation_and_listing(client: TestClient) -> None:
    response = client.post(
        "/ppa/admin",
        json={
            "title": "Robotics club",
            "academic_period_id": "p-1",
            "teacher_assignment_ids": ["ta-1"],
            "primary_teacher_id": "teacher-2",
        },
        headers=ADMIN,
    )
    assert response.status_code == 201
    _create_plan(client)

    by_period = client.get("/ppa/by-period", params={"academic_period_id": "p-1"}, headers=ADMIN).json()
    assert by_period["total_items"] == 2
    by_teacher = client.get("/ppa/by-teacher", params={"teacher_id": "teacher-2"}, headers=STRANGER).json()
    assert [p["title"] for p in by_teacher["items"]] == ["Robotics club"]
    assert client.post("/ppa/admin", json={
        "title": "Nope",
        "academic_period_id": "p-1",
        "teacher_assignment_ids": ["ta-1"],
        "primary_teacher_id": "teacher-2",
    }, headers=TEACHER).status_code == 403


def test_permissions_and_transitions(client: TestClient) -> None:
    plan_id = _create_plan(client)

    caps = client.get(f"/ppa/{plan_id}/permissions", headers=TEACHER).json()
    assert caps["can_edit"] and not caps["can_change_status"]
    assert not any(client.get(f"/ppa/{plan_id}/permissions", headers=STRANGER).json().values())

    options = client.get(f"/ppa/{plan_id}/transitions", headers=ADMIN).json()
    assert options == {
        "current": "Proposal",
        "available": ["InProgress", "Completed", "Archived"],
        "suggested_next": "InProgress",
    }


def test_continuation_flow(client: TestClient) -> None:
    plan_id = _create_plan(client)
    body = {"target_academic_period_id": "p-2", "teacher_assignment_ids": ["ta-2"]}

    assert client.post(f"/ppa/{plan_id}/continue", json=body, headers=TEACHER).status_code == 409
    _set_status(client, plan_id, "Completed")

    created = client.post(f"/ppa/{plan_id}/continue", json=body, headers=TEACHER)
    assert created.status_code == 201
    successor = client.get(f"/ppa/{created.json()['id']}", headers=TEACHER).json()
    assert successor["is_continuation_of"] == plan_id
    assert successor["status"] == "Proposal"
    assert client.get(f"/ppa/{plan_id}", headers=TEACHER).json()["has_continuation"] is True

    again = client.post(f"/ppa/{plan_id}/continue", json=body, headers=ADMIN)
    assert again.status_code == 409


def test_attachment_upload_download_and_delete(client: TestClient) -> None:
    plan_id = _create_plan(client)

    uploaded = client.post(
        f"/ppa-attachments/{plan_id}/upload",
        data={"type": "PpaDocument"},
        files={"file": ("ppa.pdf", b"%PDF-1.7 demo", "application/pdf")},
        headers=TEACHER,
    )
    assert uploaded.status_code == 201, uploaded.text
    attachment = uploaded.json()
    assert attachment["name"] == "ppa.pdf"

    registered = client.post(
        f"/ppa-attachments/{plan_id}",
        json={"type": "Evidence", "name": "Photos", "file_key": "external/photos.zip"},
        headers=TEACHER,
    )
    assert registered.status_code == 201

    grouped = client.get(f"/ppa-attachments/by-ppa/{plan_id}/grouped", headers=TEACHER).json()
    assert [g["type"] for g in grouped] == ["PpaDocument", "Evidence"]
    assert grouped[0]["label"] == "Documento PPA"
    only_evidence = client.get(
        f"/ppa-attachments/by-ppa/{plan_id}", params={"type": "Evidence"}, headers=TEACHER
    ).json()
    assert [a["name"] for a in only_evidence] == ["Photos"]

    url = client.get(f"/ppa-attachments/{attachment['id']}/download-url", headers=TEACHER).json()["url"]
    download = client.get(url)
    assert download.status_code == 200
    assert download.content == b"%PDF-1.7 demo"
    assert download.headers["content-type"] == "application/pdf"

    assert client.delete(f"/ppa-attachments/{attachment['id']}", headers=STRANGER).status_code == 403
    assert client.delete(f"/ppa-attachments/{attachment['id']}", headers=TEACHER).status_code == 204
    assert client.delete(f"/ppa-attachments/{attachment['id']}", headers=TEACHER).status_code == 404
    assert client.get(url).status_code == 404


def test_upload_rejects_disallowed_type(client: TestClient) -> None:
    plan_id = _create_plan(client)

    response = client.post(
        f"/ppa-attachments/{plan_id}/upload",
        data={"type": "Other"},
        files={"file": ("tool.exe", b"MZ", "application/x-msdownload")},
        headers=TEACHER,
    )
    assert response.status_code == 422
    assert response.json()["field"] == "content_type"


def test_reference_listings(client: TestClient) -> None:
    periods = client.get("/academic-periods", headers=TEACHER).json()
    assert [p["code"] for p in periods["items"]] == ["2025-1", "2025-2"]
    assert periods["total_pages"] == 1

    assignments = client.get(
        "/teacher-assignments", params={"academic_period_id": "p-2"}, headers=TEACHER
    ).json()
    assert [a["id"] for a in assignments["items"]] == ["ta-2"]

    subjects = client.get("/subjects", headers=TEACHER).json()
    assert subjects["total_items"] == 1
