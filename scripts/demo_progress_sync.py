"""Demo: a learner works through a four-lesson course with the progress client.

Runs the API in-process (httpx ASGITransport, in-memory repositories) and
drives it with CourseProgressTracker: debounced video saves, immediate
completions, a quiz, and the certificate at the end.

Run with:
    python scripts/demo_progress_sync.py
"""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import httpx

from lms.client.api import ProgressApiClient
from lms.client.config import ClientSettings
from lms.client.local_cache import FileProgressCache
from lms.client.tracker import CourseProgressTracker
from lms.main import app
from lms.services.token_service import create_access_token

BASE_URL = "http://lms.local"


async def seed(http: httpx.AsyncClient, instructor: str) -> tuple[str, list[str]]:
    headers = {"Authorization": f"Bearer {instructor}"}
    r = await http.post(
        "/courses",
        json={
            "title": "Python Basics",
            "description": "From variables to functions.",
            "category": "Programming",
            "isPublished": True,
        },
        headers=headers,
    )
    r.raise_for_status()
    course_id = r.json()["id"]

    lessons = [
        {"title": "Welcome", "lessonType": "video", "videoUrl": "https://videos.example/1"},
        {"title": "Variables", "lessonType": "article", "articleContent": "x = 1"},
        {"title": "Functions", "lessonType": "video", "videoUrl": "https://videos.example/3"},
        {
            "title": "Check yourself",
            "lessonType": "quiz",
            "quizQuestions": [
                {"question": "2 + 2?", "options": ["3", "4"], "correctAnswer": 1},
                {"question": "len('ab')?", "options": ["2", "1"], "correctAnswer": 0},
            ],
        },
    ]
    lesson_ids = []
    for body in lessons:
        r = await http.post(f"/lessons/course/{course_id}", json=body, headers=headers)
        r.raise_for_status()
        lesson_ids.append(r.json()["id"])
    return course_id, lesson_ids


async def main() -> None:
    instructor = create_access_token(sub="instructor-1", roles=["instructor"])
    student = create_access_token(sub="student-1")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as http:
        course_id, lesson_ids = await seed(http, instructor)
        r = await http.post(
            f"/courses/{course_id}/enroll",
            headers={"Authorization": f"Bearer {student}"},
        )
        print(f"1. enroll                  -> {r.status_code}")

        with tempfile.TemporaryDirectory() as tmp:
            api = ProgressApiClient(http, token=student)
            settings = ClientSettings(
                api_url=BASE_URL, cache_dir=Path(tmp), debounce_seconds=0.2
            )
            tracker = CourseProgressTracker(
                course_id,
                lesson_ids,
                api,
                FileProgressCache(settings.cache_dir),
                settings=settings,
            )

            view = await tracker.load()
            print(f"2. load                    -> {view.progress}% {view.status}")

            for seconds in (5, 10, 15):
                await tracker.update_video_position(seconds)
            await asyncio.sleep(0.4)
            print(
                f"3. three video updates     -> {tracker.scheduler.sent} request(s) sent, "
                f"state={tracker.scheduler.state}"
            )

            await tracker.mark_lesson_complete(lesson_ids[0])
            await tracker.mark_lesson_complete(lesson_ids[1])
            await tracker.mark_lesson_complete(lesson_ids[2])
            print(f"4. three lessons completed -> {tracker.current_progress}%")

            result = await tracker.submit_quiz(lesson_ids[3], {0: 1, 1: 0})
            print(f"5. quiz                    -> score={result.score} passed={result.passed}")
            print(f"6. course                  -> {tracker.view.progress}% {tracker.view.status}")
            if tracker.certificate is not None:
                print(f"7. certificate             -> {tracker.certificate.certificate_code}")

            await tracker.close()

        r = await http.get(
            "/certificates/user", headers={"Authorization": f"Bearer {student}"}
        )
        print(f"8. certificates on server  -> {len(r.json())}")


if __name__ == "__main__":
    asyncio.run(main())
