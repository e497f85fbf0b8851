"""Fixtures for F3 tests - Web API."""

import pytest
from fastapi.testclient import TestClient

from credit_portal.config.app_config import AppConfig, DatabaseConfig
from credit_portal.core.models import Subject
from credit_portal.db.repository import SqliteStore
from credit_portal.web.api import create_app


@pytest.fixture
def api_store(tmp_path):
    """Store seeded with a small catalog: semesters 1 and 3."""
    store = SqliteStore.open(tmp_path / "credits.db")
    for semester, code, credits in [(1, "FEC101", 4), (1, "FEC102", 3), (3, "CSC301", 4)]:
        store.insert_subject(
            Subject(
                subject_id=0,
                semester=semester,
                code=code,
                name=f"Subject {code}",
                mode_of_study="Theory",
                credits=credits,
            )
        )
    return store


@pytest.fixture
def subject_ids(api_store):
    return {s.code: s.subject_id for s in api_store.fetch_subjects()}


@pytest.fixture
def client(tmp_path, api_store):
    """Create test client with an isolated database."""
    config = AppConfig(database=DatabaseConfig(path=tmp_path / "credits.db"))
    app = create_app(config=config, store=api_store)
    return TestClient(app)


def _signup_and_login(client, role, user_id, **extra):
    body = {
        "role": role,
        "user_id": user_id,
        "name": extra.get("name", f"User {user_id}"),
        "department": "Computer",
        "password": "pw-" + user_id,
    }
    if "year_of_study" in extra:
        body["year_of_study"] = extra["year_of_study"]
    response = client.post("/api/auth/signup", json=body)
    assert response.status_code == 201, response.text

    response = client.post(
        "/api/auth/login",
        json={"role": role, "user_id": user_id, "password": "pw-" + user_id},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def student_headers(client):
    """Auth headers of a First-year student VU1F01."""
    return _signup_and_login(client, "student", "VU1F01", name="Asha Patil", year_of_study="First")


@pytest.fixture
def other_student_headers(client):
    """Auth headers of a Fourth-year student VU4F09."""
    return _signup_and_login(client, "student", "VU4F09", year_of_study="Fourth")


@pytest.fixture
def teacher_headers(client):
    """Auth headers of teacher T001."""
    return _signup_and_login(client, "teacher", "T001", name="Dr. Mehta")
