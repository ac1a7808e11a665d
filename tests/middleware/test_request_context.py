"""Tests for the request context middleware.

Verifies that every response gets an X-Request-ID header (generated or
echoed from the request) and that log records inside a request carry it.
"""

from __future__ import annotations

import logging
import uuid

from fastapi.testclient import TestClient

from lms.middleware.request_context import _RequestContextFilter, request_id_var


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    """Even error responses (401) get an X-Request-ID header."""
    resp = client.get("/progress")
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_filter_attaches_current_request_id() -> None:
    record = logging.LogRecord("t", logging.INFO, "x.py", 1, "m", (), None)
    token = request_id_var.set("abc")
    try:
        assert _RequestContextFilter().filter(record) is True
    finally:
        request_id_var.reset(token)
    assert record.request_id == "abc"  # type: ignore[attr-defined]


def test_filter_uses_placeholder_outside_requests() -> None:
    record = logging.LogRecord("t", logging.INFO, "x.py", 1, "m", (), None)
    _RequestContextFilter().filter(record)
    assert record.request_id == "-"  # type: ignore[attr-defined]
