"""Tests for Prometheus metrics.

prometheus-client keeps one global registry and counters only go up, so
every assertion is on the DELTA around the action under test.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth, create_test_course, enroll


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def _sum_samples(name: str, **labels: str) -> float:
    """Sum a metric over every label set matching ``labels``."""
    total = 0.0
    for metric in REGISTRY.collect():
        for sample in metric.samples:
            if sample.name != name:
                continue
            if all(sample.labels.get(k) == v for k, v in labels.items()):
                total += sample.value
    return total


def test_request_counter_increments(client: TestClient) -> None:
    before = _sum_samples("http_requests_total", method="GET", status_code="200")
    client.get("/health")
    after = _sum_samples("http_requests_total", method="GET", status_code="200")
    assert after - before >= 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    before = _sum_samples("http_request_duration_seconds_count", method="GET")
    client.get("/health")
    after = _sum_samples("http_request_duration_seconds_count", method="GET")
    assert after - before >= 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "progress_updates_total" in resp.text


def test_progress_write_counts_update_and_completion(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, (lesson_id,) = create_test_course(client, instructor_token)
    enroll(client, token, course_id)

    updates = _get_sample("progress_updates_total", {"source": "lesson"})
    lessons_done = _get_sample("lesson_completions_total")
    courses_done = _get_sample("course_completions_total")
    issued = _get_sample("certificates_issued_total")

    resp = client.post(
        f"/progress/courses/{course_id}/lessons/{lesson_id}",
        json={"completed": True},
        headers=auth(token),
    )
    assert resp.status_code == 200

    assert _get_sample("progress_updates_total", {"source": "lesson"}) - updates == 1
    assert _get_sample("lesson_completions_total") - lessons_done == 1
    assert _get_sample("course_completions_total") - courses_done == 1
    assert _get_sample("certificates_issued_total") - issued == 1


def test_cache_hit_and_miss_counted(
    client: TestClient, instructor_token: str, token: str
) -> None:
    course_id, _ = create_test_course(client, instructor_token)
    enroll(client, token, course_id)

    misses = _get_sample("cache_operations_total", {"operation": "miss"})
    hits = _get_sample("cache_operations_total", {"operation": "hit"})
    client.get(f"/progress/courses/{course_id}", headers=auth(token))
    client.get(f"/progress/courses/{course_id}", headers=auth(token))
    assert _get_sample("cache_operations_total", {"operation": "miss"}) - misses == 1
    assert _get_sample("cache_operations_total", {"operation": "hit"}) - hits == 1
