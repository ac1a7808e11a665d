from __future__ import annotations

import json
import logging

from lms.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging


def _record(level: int = logging.INFO, msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=level,
        pathname="svc.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_noisy_libraries_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record())
    assert "hello" in output
    assert "[svc.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "bad thing"))
    assert "bad thing" in output
    assert "[svc.py:42]" in output


def test_json_formatter_lifts_progress_context() -> None:
    record = _record(
        msg="Lesson completed",
        request_id="req-1",
        course_id="c-1",
        lesson_id="l-1",
    )
    entry = json.loads(_JsonFormatter().format(record))
    assert entry["message"] == "Lesson completed"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "req-1"
    assert entry["course_id"] == "c-1"
    assert entry["lesson_id"] == "l-1"


def test_json_formatter_skips_placeholder_request_id() -> None:
    entry = json.loads(_JsonFormatter().format(_record(request_id="-")))
    assert "request_id" not in entry
    assert "course_id" not in entry
