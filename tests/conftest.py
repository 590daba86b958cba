"""
Shared fixtures: in-memory SQLite schema per test, a TestClient, admin
bearer headers, a small API helper for seeding data and a fake AI client.
"""
import os

# Settings are read once at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-hrd-survey-suite-0001"
os.environ["GEMINI_API_KEY"] = ""
os.environ["PUBLIC_SURVEY_BASE_URL"] = "https://survey.test/s"

import pytest
from fastapi.testclient import TestClient

from hrd_survey.api.deps.store import get_ai_client
from hrd_survey.core.security import create_access_token
from hrd_survey.db.base import Base
from hrd_survey.db.session import SessionLocal, engine
from hrd_survey.main import app

API = "/api/v1"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin-1", "roles": ["admin"]})
    return {"Authorization": f"Bearer {token}"}


class FakeAI:
    """Returns queued replies in order (the last one repeats); exceptions are raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def generate(self, prompt, json_mode=False):
        self.prompts.append((prompt, json_mode))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_ai():
    """Installs a FakeAI as the AI client dependency and returns it."""
    def install(*replies):
        fake = FakeAI(*replies)
        app.dependency_overrides[get_ai_client] = lambda: fake
        return fake
    yield install
    app.dependency_overrides.pop(get_ai_client, None)


class ApiHelper:
    def __init__(self, client, headers):
        self.client = client
        self.headers = headers

    def course(self, **overrides):
        body = {"title": "리더십 과정", "instructor": "김강사", "target_participants": 50}
        body.update(overrides)
        r = self.client.post(f"{API}/courses", json=body, headers=self.headers)
        assert r.status_code == 201, r.text
        return r.json()

    def survey(self, course_id, **overrides):
        body = {"course_id": course_id, "title": "만족도 설문", "scale_type": 5}
        body.update(overrides)
        r = self.client.post(f"{API}/surveys", json=body, headers=self.headers)
        assert r.status_code == 201, r.text
        return r.json()

    def questions(self, survey_id, items):
        r = self.client.put(f"{API}/surveys/{survey_id}/questions", json={"questions": items},
                            headers=self.headers)
        assert r.status_code == 200, r.text
        return r.json()

    def set_status(self, survey_id, status):
        return self.client.patch(f"{API}/surveys/{survey_id}/status", json={"status": status},
                                 headers=self.headers)

    def submit(self, code, answers, **extra):
        body = {"answers": answers}
        body.update(extra)
        return self.client.post(f"{API}/public/surveys/{code}/responses", json=body)

    def active_survey(self, course_overrides=None, questions=None, **survey_overrides):
        """Course + survey + questions, activated. Returns (survey, questions)."""
        course = self.course(**(course_overrides or {}))
        survey = self.survey(course["id"], **survey_overrides)
        qs = self.questions(survey["id"], questions or [
            {"type": "choice", "category": "content", "content": "교육 내용이 유익했다"},
            {"type": "choice", "category": "instructor", "content": "강사의 전달력이 좋았다"},
            {"type": "text", "category": "other", "content": "개선점을 적어주세요", "is_required": False},
        ])
        r = self.set_status(survey["id"], "active")
        assert r.status_code == 200, r.text
        return survey, qs


@pytest.fixture
def api(client, admin_headers):
    return ApiHelper(client, admin_headers)
