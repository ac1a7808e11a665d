from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import (
    auth,
    create_test_course,
    enroll,
    mint_token,
    quiz_lesson,
    video_lesson,
)


def test_course_analytics_for_instructor(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (video_id, quiz_id) = create_test_course(
        client, instructor_token, [video_lesson(), quiz_lesson()]
    )
    other = mint_token(username="student-2")
    enroll(client, token, course_id)
    enroll(client, other, course_id)

    client.post(f"/lessons/{video_id}/complete", headers=auth(token))
    client.post(
        f"/quiz/{quiz_id}/submit", json={"answers": {"0": 1, "1": 0}}, headers=auth(token)
    )
    client.post(f"/quiz/{quiz_id}/submit", json={"answers": {"0": 1}}, headers=auth(other))

    resp = client.get(f"/analytics/courses/{course_id}", headers=auth(instructor_token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["enrolled"] == 2
    assert body["completed"] == 1
    assert body["completionRate"] == 50.0
    assert body["certificatesIssued"] == 1
    assert body["activeLast7Days"] == 2
    by_id = {s["lessonId"]: s for s in body["lessons"]}
    assert by_id[video_id]["completions"] == 1
    assert by_id[video_id]["averageQuizScore"] is None
    assert by_id[quiz_id]["averageQuizScore"] == 62.5


def test_course_analytics_denied_to_students(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, _ = create_test_course(client, instructor_token)
    assert client.get(f"/analytics/courses/{course_id}", headers=auth(token)).status_code == 403


def test_admin_platform_stats(
    client: TestClient, instructor_token: str, token: str, admin_token: str
) -> None:
    course_id, (lesson_id,) = create_test_course(client, instructor_token)
    enroll(client, token, course_id)
    client.post(f"/lessons/{lesson_id}/complete", headers=auth(token))

    body = client.get("/admin/stats", headers=auth(admin_token)).json()
    assert body["courses"] == 1
    assert body["enrollments"] == 1
    assert body["certificates"] == 1
    assert body["progressByStatus"]["completed"] == 1


def test_admin_stats_requires_admin(client: TestClient, token: str) -> None:
    assert client.get("/admin/stats", headers=auth(token)).status_code == 403
