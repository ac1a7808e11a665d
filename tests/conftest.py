from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from lms.main import app
from lms.repos.store import reset_memory_store
from lms.services import token_service
from lms.services.cache import cache_service

# Ensure repo root is on sys.path so `import lms` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

INSTRUCTOR = "instructor-1"
STUDENT = "student-1"


@pytest.fixture(autouse=True)
def reset_store() -> None:
    """Fresh in-memory repositories for every test."""
    reset_memory_store()


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with default role (student)."""
    return mint_token(username=STUDENT)


@pytest.fixture
def instructor_token() -> str:
    return mint_token(username=INSTRUCTOR, roles=["instructor"])


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# Course test helpers
# ---------------------------------------------------------------------------

QUIZ_QUESTIONS = [
    {"question": "2 + 2?", "options": ["3", "4"], "correctAnswer": 1, "points": 1},
    {"question": "Capital of France?", "options": ["Paris", "Rome"], "correctAnswer": 0, "points": 3},
]


def video_lesson(title: str = "Intro", **extra) -> dict:
    return {"title": title, "lessonType": "video", "videoUrl": "https://v.example/1", **extra}


def article_lesson(title: str = "Reading", **extra) -> dict:
    return {"title": title, "lessonType": "article", "articleContent": "Text", **extra}


def quiz_lesson(title: str = "Quiz", questions: list[dict] | None = None, **extra) -> dict:
    return {
        "title": title,
        "lessonType": "quiz",
        "quizQuestions": questions if questions is not None else QUIZ_QUESTIONS,
        **extra,
    }


def create_test_course(
    client: TestClient,
    instructor_token: str,
    lessons: list[dict] | None = None,
    *,
    published: bool = True,
    title: str = "Python Basics",
) -> tuple[str, list[str]]:
    """Create a course with lessons over the API; returns (course_id, lesson_ids)."""
    resp = client.post(
        "/courses",
        json={
            "title": title,
            "description": "Learn Python",
            "category": "Programming",
            "isPublished": published,
        },
        headers=auth(instructor_token),
    )
    assert resp.status_code == 201, resp.text
    course_id = resp.json()["id"]

    lesson_ids = []
    for body in lessons if lessons is not None else [video_lesson()]:
        r = client.post(f"/lessons/course/{course_id}", json=body, headers=auth(instructor_token))
        assert r.status_code == 201, r.text
        lesson_ids.append(r.json()["id"])
    return course_id, lesson_ids


def enroll(client: TestClient, token: str, course_id: str) -> None:
    resp = client.post(f"/courses/{course_id}/enroll", headers=auth(token))
    assert resp.status_code == 201, resp.text
