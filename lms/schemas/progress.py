"""Progress payloads shared by the API and the progress client.

The client validates every response against these models; a payload that
does not fit is rejected at the boundary instead of being probed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from lms.models.progress import EnrollmentProgress, LessonProgress
from lms.schemas.base import CamelModel

ProgressStatus = Literal["not_started", "in_progress", "completed"]


class LessonProgressOut(CamelModel):
    lesson_id: str
    completed: bool = False
    video_timestamp: float = 0.0
    quiz_score: int | None = None
    last_accessed_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_domain(cls, entry: LessonProgress) -> LessonProgressOut:
        return cls(
            lesson_id=entry.lesson_id,
            completed=entry.completed,
            video_timestamp=entry.video_timestamp,
            quiz_score=entry.quiz_score,
            last_accessed_at=entry.last_accessed_at,
            completed_at=entry.completed_at,
        )


class CourseProgressOut(CamelModel):
    course_id: str
    progress: int = Field(ge=0, le=100)
    status: ProgressStatus
    lessons: list[LessonProgressOut] = Field(default_factory=list)
    last_accessed_lesson: str | None = None
    started_at: datetime | None = None
    last_accessed_at: datetime | None = None
    completed_at: datetime | None = None
    total_time_spent: int = 0

    @classmethod
    def from_domain(cls, progress: EnrollmentProgress) -> CourseProgressOut:
        return cls(
            course_id=progress.course_id,
            progress=progress.percent,
            status=progress.status,  # type: ignore[arg-type]
            lessons=[LessonProgressOut.from_domain(e) for e in progress.lessons],
            last_accessed_lesson=progress.last_accessed_lesson,
            started_at=progress.started_at,
            last_accessed_at=progress.last_accessed_at,
            completed_at=progress.completed_at,
            total_time_spent=progress.total_time_spent,
        )


class ProgressUpdateIn(CamelModel):
    completed: bool | None = None
    video_timestamp: float | None = Field(default=None, ge=0)
    time_spent: int = Field(default=0, ge=0)  # seconds since the previous write


class QuickProgressOut(CamelModel):
    course_id: str
    progress: int = Field(ge=0, le=100)
    status: ProgressStatus
    last_accessed_at: datetime | None = None
    last_accessed_lesson: str | None = None


class ProgressSummaryOut(CamelModel):
    course_id: str
    course_title: str = ""
    progress: int = Field(ge=0, le=100)
    status: ProgressStatus
    started_at: datetime | None = None
    last_accessed_at: datetime | None = None
    completed_at: datetime | None = None


class LessonCompleteOut(CamelModel):
    lesson_id: str
    course_id: str
    already_completed: bool
    progress: int = Field(ge=0, le=100)
    status: ProgressStatus
    completed_at: datetime | None = None
    certificate_id: str | None = None
