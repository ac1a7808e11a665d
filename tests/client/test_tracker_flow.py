"""End-to-end: the progress client against the real app over ASGI.

Four lessons (three videos and a quiz).  The learner watches, completes,
passes the quiz and ends with exactly one certificate.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
from fastapi.testclient import TestClient

from lms.client.api import ProgressApiClient
from lms.client.config import ClientSettings
from lms.client.local_cache import FileProgressCache, InMemoryProgressCache
from lms.client.reconcile import PENDING
from lms.client.scheduler import FAILURE_DISABLED, OFFLINE
from lms.client.tracker import CourseProgressTracker
from lms.main import app
from tests.conftest import (
    STUDENT,
    auth,
    create_test_course,
    enroll,
    mint_token,
    quiz_lesson,
    video_lesson,
)

BASE_URL = "http://lms.test"


def _settings(tmp_path: Path) -> ClientSettings:
    return ClientSettings(api_url=BASE_URL, cache_dir=tmp_path, debounce_seconds=0.05)


def _seed(client: TestClient, instructor_token: str, token: str) -> tuple[str, list[str]]:
    course_id, lesson_ids = create_test_course(
        client,
        instructor_token,
        [video_lesson("V1"), video_lesson("V2"), video_lesson("V3"), quiz_lesson()],
    )
    enroll(client, token, course_id)
    return course_id, lesson_ids


def test_full_course_ends_with_one_certificate(
    client: TestClient, instructor_token: str, tmp_path: Path
) -> None:
    token = mint_token(username=STUDENT)
    course_id, lesson_ids = _seed(client, instructor_token, token)
    settings = _settings(tmp_path)

    async def scenario() -> CourseProgressTracker:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as http:
            tracker = CourseProgressTracker(
                course_id,
                lesson_ids,
                ProgressApiClient(http, token=token),
                FileProgressCache(settings.cache_dir),
                settings=settings,
            )
            view = await tracker.load()
            assert view.progress == 0
            assert view.status == "in_progress"

            for seconds in (5, 10, 15):
                await tracker.update_video_position(seconds)
            assert tracker.view.view(lesson_ids[0]).phase == PENDING
            await asyncio.sleep(0.2)
            assert tracker.scheduler.sent == 1
            assert tracker.view.view(lesson_ids[0]).video_timestamp == 15

            for lesson_id in lesson_ids[:3]:
                await tracker.mark_lesson_complete(lesson_id)
            assert tracker.current_progress == 75
            assert tracker.certificate is None

            result = await tracker.submit_quiz(lesson_ids[3], {0: 1, 1: 0})
            assert result.passed
            assert result.course_completed

            # repeated completion must not mint a second certificate
            await tracker.mark_lesson_complete(lesson_ids[3])
            await tracker.close()
            return tracker

    tracker = asyncio.run(scenario())
    assert tracker.view.status == "completed"
    assert tracker.view.progress == 100
    assert tracker.certificate is not None

    certs = client.get("/certificates/user", headers=auth(token)).json()
    assert len(certs) == 1
    assert certs[0]["id"] == tracker.certificate.id

    server = client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()
    assert server["progress"] == 100
    assert server["status"] == "completed"


def test_reload_resumes_from_local_copy(
    client: TestClient, instructor_token: str, tmp_path: Path
) -> None:
    token = mint_token(username=STUDENT)
    course_id, lesson_ids = _seed(client, instructor_token, token)
    settings = _settings(tmp_path)

    async def session(watch: float | None) -> CourseProgressTracker:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as http:
            tracker = CourseProgressTracker(
                course_id,
                lesson_ids,
                ProgressApiClient(http, token=token),
                FileProgressCache(settings.cache_dir),
                settings=settings,
            )
            await tracker.load()
            if watch is not None:
                await tracker.select_lesson(1)
                await tracker.update_video_position(watch)
            # closed before the debounce fires: only the local copy has it
            await tracker.close()
            return tracker

    asyncio.run(session(33))
    reopened = asyncio.run(session(None))
    assert reopened.current_lesson_id == lesson_ids[1]
    assert reopened.view.view(lesson_ids[1]).video_timestamp == 33
    assert reopened.view.view(lesson_ids[1]).phase == PENDING


def test_missing_endpoint_keeps_progress_local(tmp_path: Path) -> None:
    lesson_ids = ["l1", "l2"]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Not Found"})

    async def scenario() -> CourseProgressTracker:
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as http:
            cache = InMemoryProgressCache()
            tracker = CourseProgressTracker(
                "c1",
                lesson_ids,
                ProgressApiClient(http, token="tok"),
                cache,
                settings=_settings(tmp_path),
            )
            await tracker.load()
            assert not tracker.scheduler.remote_enabled

            outcome = await tracker.mark_lesson_complete("l1")
            assert outcome is not None and outcome.failure == FAILURE_DISABLED
            assert cache.load("c1")["l1"].completed
            return tracker

    tracker = asyncio.run(scenario())
    assert tracker.current_progress == 50
    assert tracker.scheduler.state == OFFLINE
    assert tracker.certificate is None
