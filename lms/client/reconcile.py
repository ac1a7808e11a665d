"""Merge the server's progress record with the local mirror.

Local entries win for the fields they carry (completed, resume offset,
last access); quiz scores only ever come from the server.  Percent and
status are recomputed over the course's lesson list, never taken from
either side.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from lms.client.local_cache import LocalLessonEntry
from lms.models.progress import COMPLETED, IN_PROGRESS, NOT_STARTED, round_percent
from lms.schemas.progress import CourseProgressOut, LessonProgressOut

PENDING = "pending"
CONFIRMED = "confirmed"


@dataclass(frozen=True, slots=True)
class LessonView:
    lesson_id: str
    completed: bool = False
    video_timestamp: float = 0.0
    last_accessed_at: datetime | None = None
    quiz_score: int | None = None
    phase: str = CONFIRMED


@dataclass(frozen=True, slots=True)
class MergeResult:
    progress: int
    status: str
    lessons: tuple[LessonView, ...]
    views: Mapping[str, LessonView]
    last_accessed_lesson: str | None = None

    def view(self, lesson_id: str) -> LessonView:
        return self.views.get(lesson_id) or LessonView(lesson_id=lesson_id)

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED


def _agrees(remote: LessonProgressOut | None, local: LocalLessonEntry) -> bool:
    if remote is None:
        return False
    return (
        remote.completed == local.completed
        and remote.video_timestamp == local.video_timestamp
    )


def _merge_lesson(
    lesson_id: str,
    remote: LessonProgressOut | None,
    local: LocalLessonEntry | None,
) -> LessonView:
    quiz_score = remote.quiz_score if remote else None
    if local is None:
        if remote is None:
            return LessonView(lesson_id=lesson_id)
        return LessonView(
            lesson_id=lesson_id,
            completed=remote.completed,
            video_timestamp=remote.video_timestamp,
            last_accessed_at=remote.last_accessed_at,
            quiz_score=quiz_score,
        )
    return LessonView(
        lesson_id=lesson_id,
        completed=local.completed,
        video_timestamp=local.video_timestamp,
        last_accessed_at=local.last_accessed_at,
        quiz_score=quiz_score,
        phase=CONFIRMED if _agrees(remote, local) else PENDING,
    )


def merge_progress(
    remote: CourseProgressOut | None,
    local: Mapping[str, LocalLessonEntry],
    lessons: Sequence[str],
) -> MergeResult:
    remote_lessons = {e.lesson_id: e for e in remote.lessons} if remote else {}

    # course lessons in course order, then anything else by id
    course_ids = list(dict.fromkeys(lessons))
    extra_ids = sorted((set(remote_lessons) | set(local)) - set(course_ids))

    merged = tuple(
        _merge_lesson(lid, remote_lessons.get(lid), local.get(lid))
        for lid in (*course_ids, *extra_ids)
    )
    views = {v.lesson_id: v for v in merged}

    done = sum(1 for lid in course_ids if views[lid].completed)
    percent = round_percent(done, len(course_ids))

    accessed = [v for v in merged if v.last_accessed_at is not None]

    if course_ids and done == len(course_ids):
        status = COMPLETED
    elif remote is not None and remote.status == NOT_STARTED and not (local or accessed):
        status = NOT_STARTED
    else:
        status = IN_PROGRESS

    if accessed:
        last = max(accessed, key=lambda v: (v.last_accessed_at, v.lesson_id)).lesson_id
    else:
        last = remote.last_accessed_lesson if remote else None

    return MergeResult(
        progress=percent,
        status=status,
        lessons=merged,
        views=views,
        last_accessed_lesson=last,
    )
