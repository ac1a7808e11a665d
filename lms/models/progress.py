from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

NOT_STARTED = "not_started"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    score: int
    answers: dict[int, int] = field(default_factory=dict)
    submitted_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class LessonProgress:
    """Per-lesson progress inside an EnrollmentProgress.

    ``completed_at`` is written once, on the first transition to completed,
    and never changes afterwards.
    """

    lesson_id: str
    completed: bool = False
    completed_at: datetime | None = None
    last_accessed_at: datetime | None = None
    video_timestamp: float = 0.0
    quiz_score: int | None = None
    quiz_attempts: tuple[QuizAttempt, ...] = ()

    @property
    def state(self) -> str:
        if self.completed:
            return COMPLETED
        if self.last_accessed_at is not None:
            return IN_PROGRESS
        return NOT_STARTED


@dataclass(frozen=True, slots=True)
class EnrollmentProgress:
    """Progress document for one (user, course) pair.

    ``percent`` is derived from the lesson entries and the course's current
    lesson set; services recompute it on every write.
    """

    user_id: str
    course_id: str
    percent: int = 0
    status: str = NOT_STARTED  # not_started|in_progress|completed
    started_at: datetime | None = None
    last_accessed_at: datetime | None = None
    last_accessed_lesson: str | None = None
    lessons: tuple[LessonProgress, ...] = ()
    total_time_spent: int = 0  # seconds
    completed_at: datetime | None = None

    def lesson(self, lesson_id: str) -> LessonProgress | None:
        for entry in self.lessons:
            if entry.lesson_id == lesson_id:
                return entry
        return None

    def completed_lesson_ids(self) -> frozenset[str]:
        return frozenset(e.lesson_id for e in self.lessons if e.completed)

    def with_lesson(self, entry: LessonProgress) -> EnrollmentProgress:
        """Return a copy with ``entry`` replacing (or appended after) its slot."""
        lessons = list(self.lessons)
        for i, existing in enumerate(lessons):
            if existing.lesson_id == entry.lesson_id:
                lessons[i] = entry
                break
        else:
            lessons.append(entry)
        return replace(self, lessons=tuple(lessons))


def round_percent(part: int, whole: int) -> int:
    """``round(100 * part / whole)`` with halves rounded up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)
