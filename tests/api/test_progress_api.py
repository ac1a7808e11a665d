"""Progress endpoints: read-through cache, per-lesson writes, derived percent."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import (
    article_lesson,
    auth,
    create_test_course,
    enroll,
    mint_token,
    quiz_lesson,
    video_lesson,
)


def _setup(client: TestClient, instructor_token: str, token: str, n: int = 2):
    course_id, lesson_ids = create_test_course(
        client, instructor_token, [video_lesson(f"L{i}") for i in range(n)]
    )
    enroll(client, token, course_id)
    return course_id, lesson_ids


def _post(client: TestClient, token: str, course_id: str, lesson_id: str, **body):
    return client.post(
        f"/progress/courses/{course_id}/lessons/{lesson_id}", json=body, headers=auth(token)
    )


# ---- 401 / 403 / 404 ----


def test_progress_rejects_missing_token(client: TestClient) -> None:
    assert client.get("/progress/courses/x").status_code == 401


def test_progress_requires_enrollment(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (lesson_id,) = create_test_course(client, instructor_token)
    resp = client.get(f"/progress/courses/{course_id}", headers=auth(token))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Not enrolled in this course"
    assert _post(client, token, course_id, lesson_id, completed=True).status_code == 403


def test_progress_unknown_course_is_404(client: TestClient, token: str) -> None:
    assert client.get("/progress/courses/nope", headers=auth(token)).status_code == 404


def test_update_rejects_lesson_from_other_course(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, _ = _setup(client, instructor_token, token)
    _, (foreign,) = create_test_course(client, instructor_token, title="Other")
    assert _post(client, token, course_id, foreign, completed=True).status_code == 404


def test_negative_video_timestamp_is_422(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (lesson_id, _) = _setup(client, instructor_token, token)
    assert _post(client, token, course_id, lesson_id, videoTimestamp=-1).status_code == 422


# ---- reads ----


def test_first_read_starts_progress(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, _ = _setup(client, instructor_token, token)
    body = client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()
    assert body["courseId"] == course_id
    assert body["progress"] == 0
    assert body["status"] == "in_progress"
    assert body["lessons"] == []
    assert body["startedAt"] is not None


def test_quick_progress_before_any_access(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, _ = _setup(client, instructor_token, token)
    body = client.get(f"/progress/courses/{course_id}/quick", headers=auth(token)).json()
    assert body == {
        "courseId": course_id,
        "progress": 0,
        "status": "not_started",
        "lastAccessedAt": None,
        "lastAccessedLesson": None,
    }


def test_list_my_progress_includes_course_title(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (lesson_id, _) = _setup(client, instructor_token, token)
    _post(client, token, course_id, lesson_id, completed=True)
    rows = client.get("/progress", headers=auth(token)).json()
    assert len(rows) == 1
    assert rows[0]["courseTitle"] == "Python Basics"
    assert rows[0]["progress"] == 50


# ---- writes ----


def test_video_position_is_recorded(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (lesson_id, _) = _setup(client, instructor_token, token)
    body = _post(client, token, course_id, lesson_id, videoTimestamp=42.5).json()
    assert body["progress"] == 0
    assert body["lastAccessedLesson"] == lesson_id
    (entry,) = body["lessons"]
    assert entry["videoTimestamp"] == 42.5
    assert entry["completed"] is False


def test_completion_updates_percent_and_status(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (first, second) = _setup(client, instructor_token, token)
    assert _post(client, token, course_id, first, completed=True).json()["progress"] == 50
    body = _post(client, token, course_id, second, completed=True).json()
    assert body["progress"] == 100
    assert body["status"] == "completed"
    assert body["completedAt"] is not None


def test_completed_false_does_not_revert(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (first, _) = _setup(client, instructor_token, token)
    done = _post(client, token, course_id, first, completed=True).json()
    again = _post(client, token, course_id, first, completed=False, videoTimestamp=3).json()
    assert again["progress"] == 50
    (entry,) = again["lessons"]
    assert entry["completed"] is True
    assert entry["completedAt"] == done["lessons"][0]["completedAt"]
    assert entry["videoTimestamp"] == 3


def test_completed_true_ignored_for_unpassed_quiz(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (quiz_id,) = create_test_course(client, instructor_token, [quiz_lesson()])
    enroll(client, token, course_id)

    body = _post(client, token, course_id, quiz_id, completed=True).json()
    assert body["progress"] == 0
    assert body["status"] == "in_progress"
    (entry,) = body["lessons"]
    assert entry["completed"] is False

    certs = client.get("/certificates/user", headers=auth(token)).json()
    assert certs == []


def test_completed_true_is_noop_on_passed_quiz(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (quiz_id,) = create_test_course(client, instructor_token, [quiz_lesson()])
    enroll(client, token, course_id)
    passed = client.post(
        f"/quiz/{quiz_id}/submit", json={"answers": {"0": 1, "1": 0}}, headers=auth(token)
    ).json()
    assert passed["lessonCompleted"] is True

    body = _post(client, token, course_id, quiz_id, completed=True).json()
    assert body["progress"] == 100
    assert body["status"] == "completed"
    assert body["lessons"][0]["quizScore"] == 100


def test_time_spent_accumulates(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (first, second) = _setup(client, instructor_token, token)
    _post(client, token, course_id, first, videoTimestamp=30, timeSpent=30)
    body = _post(client, token, course_id, second, videoTimestamp=5, timeSpent=45).json()
    assert body["totalTimeSpent"] == 75

    assert _post(client, token, course_id, second, timeSpent=-1).status_code == 422


def test_writes_to_different_lessons_both_survive(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (first, second) = _setup(client, instructor_token, token)
    _post(client, token, course_id, first, videoTimestamp=10)
    _post(client, token, course_id, second, videoTimestamp=20)
    body = client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()
    offsets = {e["lessonId"]: e["videoTimestamp"] for e in body["lessons"]}
    assert offsets == {first: 10, second: 20}


def test_progress_is_per_user(client: TestClient, instructor_token: str, token: str) -> None:
    course_id, (first, _) = _setup(client, instructor_token, token)
    other = mint_token(username="student-2")
    enroll(client, other, course_id)
    _post(client, token, course_id, first, completed=True)
    body = client.get(f"/progress/courses/{course_id}", headers=auth(other)).json()
    assert body["progress"] == 0


# ---- cache ----


def test_write_invalidates_cached_read(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (first, _) = _setup(client, instructor_token, token)
    assert client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()["progress"] == 0
    _post(client, token, course_id, first, completed=True)
    assert client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()["progress"] == 50


def test_adding_a_lesson_recomputes_percent(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (first, _) = _setup(client, instructor_token, token)
    _post(client, token, course_id, first, completed=True)
    assert client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()["progress"] == 50

    r = client.post(
        f"/lessons/course/{course_id}", json=article_lesson("Extra"), headers=auth(instructor_token)
    )
    assert r.status_code == 201
    assert client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()["progress"] == 33


def test_completed_course_stays_completed_when_lesson_added(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (first, second) = _setup(client, instructor_token, token)
    _post(client, token, course_id, first, completed=True)
    _post(client, token, course_id, second, completed=True)
    client.post(
        f"/lessons/course/{course_id}", json=article_lesson("Bonus"), headers=auth(instructor_token)
    )
    body = client.get(f"/progress/courses/{course_id}", headers=auth(token)).json()
    assert body["status"] == "completed"
    assert body["progress"] == 67
