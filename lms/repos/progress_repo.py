"""Storage for enrollment progress.

The document is split in two: a per-enrollment summary (percent, status,
timestamps) and one entry per lesson.  Writers upsert a single lesson
entry and then the summary, so two sessions updating different lessons of
the same course never clobber each other's lesson entries.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from lms.models.progress import EnrollmentProgress, LessonProgress


class ProgressRepo(Protocol):
    async def get(self, user_id: str, course_id: str) -> EnrollmentProgress | None: ...
    async def upsert_lesson(
        self, user_id: str, course_id: str, entry: LessonProgress
    ) -> None: ...
    async def save_summary(self, progress: EnrollmentProgress) -> None: ...
    async def list_for_user(self, user_id: str) -> list[EnrollmentProgress]: ...
    async def list_for_course(self, course_id: str) -> list[EnrollmentProgress]: ...
    async def count_by_status(self) -> dict[str, int]: ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        self._summaries: dict[tuple[str, str], EnrollmentProgress] = {}
        self._lessons: dict[tuple[str, str], dict[str, LessonProgress]] = {}

    async def get(self, user_id: str, course_id: str) -> EnrollmentProgress | None:
        key = (user_id, course_id)
        summary = self._summaries.get(key)
        if summary is None:
            return None
        lessons = tuple(self._lessons.get(key, {}).values())
        return replace(summary, lessons=lessons)

    async def upsert_lesson(
        self, user_id: str, course_id: str, entry: LessonProgress
    ) -> None:
        key = (user_id, course_id)
        if key not in self._summaries:
            self._summaries[key] = EnrollmentProgress(
                user_id=user_id, course_id=course_id
            )
        self._lessons.setdefault(key, {})[entry.lesson_id] = entry

    async def save_summary(self, progress: EnrollmentProgress) -> None:
        key = (progress.user_id, progress.course_id)
        self._summaries[key] = replace(progress, lessons=())
        self._lessons.setdefault(key, {})

    async def list_for_user(self, user_id: str) -> list[EnrollmentProgress]:
        keys = [k for k in self._summaries if k[0] == user_id]
        return [p for k in keys if (p := await self.get(*k)) is not None]

    async def list_for_course(self, course_id: str) -> list[EnrollmentProgress]:
        keys = [k for k in self._summaries if k[1] == course_id]
        return [p for k in keys if (p := await self.get(*k)) is not None]

    async def count_by_status(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for summary in self._summaries.values():
            counts[summary.status] = counts.get(summary.status, 0) + 1
        return counts
