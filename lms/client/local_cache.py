"""Client-side mirror of lesson progress, one document per course.

Each document maps lesson id to ``{completed, videoTimestamp,
lastAccessedAt, savedAt}`` and lives under the key ``progress_{courseId}``.
The mirror is written before any remote attempt, so it is the copy that
survives a failed save.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Protocol

from pydantic import ConfigDict, TypeAdapter
from pydantic import ValidationError as SchemaError

from lms.schemas.base import CamelModel

logger = logging.getLogger(__name__)


def cache_key(course_id: str) -> str:
    return f"progress_{course_id}"


class LocalLessonEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    completed: bool = False
    video_timestamp: float = 0.0
    last_accessed_at: datetime | None = None
    saved_at: datetime | None = None


_DOCUMENT = TypeAdapter(dict[str, LocalLessonEntry])


class ProgressCache(Protocol):
    def load(self, course_id: str) -> dict[str, LocalLessonEntry]: ...
    def save_lesson(self, course_id: str, lesson_id: str, entry: LocalLessonEntry) -> None: ...
    def clear(self, course_id: str) -> None: ...


class InMemoryProgressCache:
    def __init__(self) -> None:
        self._docs: dict[str, dict[str, LocalLessonEntry]] = {}

    def load(self, course_id: str) -> dict[str, LocalLessonEntry]:
        return dict(self._docs.get(cache_key(course_id), {}))

    def save_lesson(self, course_id: str, lesson_id: str, entry: LocalLessonEntry) -> None:
        self._docs.setdefault(cache_key(course_id), {})[lesson_id] = entry

    def clear(self, course_id: str) -> None:
        self._docs.pop(cache_key(course_id), None)


class FileProgressCache:
    """One JSON file per course under ``directory``.

    An unreadable or corrupt file is logged and treated as empty; a failed
    write is logged and the in-flight save carries on against the server.
    """

    def __init__(self, directory: Path) -> None:
        self._dir = directory

    def _path(self, course_id: str) -> Path:
        return self._dir / f"{cache_key(course_id)}.json"

    def load(self, course_id: str) -> dict[str, LocalLessonEntry]:
        path = self._path(course_id)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError:
            logger.exception("Could not read local progress %s", path)
            return {}
        try:
            return _DOCUMENT.validate_json(raw)
        except SchemaError:
            logger.warning("Discarding corrupt local progress %s", path)
            return {}

    def _write(self, course_id: str, doc: dict[str, LocalLessonEntry]) -> None:
        path = self._path(course_id)
        tmp = path.with_suffix(".json.tmp")
        payload = {k: v.to_wire() for k, v in doc.items()}
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, sort_keys=True), encoding="utf-8")
            os.replace(tmp, path)
        except OSError:
            logger.exception("Could not write local progress %s", path)

    def save_lesson(self, course_id: str, lesson_id: str, entry: LocalLessonEntry) -> None:
        doc = self.load(course_id)
        doc[lesson_id] = entry
        self._write(course_id, doc)

    def clear(self, course_id: str) -> None:
        self._path(course_id).unlink(missing_ok=True)
