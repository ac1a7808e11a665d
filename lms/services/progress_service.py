"""Server side of progress tracking.

Every write goes through ``_commit``:

  1. upsert the single lesson entry that changed
  2. re-read the enrollment, so entries written concurrently by another
     session for other lessons are counted
  3. recompute percent/status over the course's current lesson list and
     save the summary
  4. on the transition to a completed course, issue the certificate
  5. drop the cached progress read for (user, course)

Reads recompute the percent against the current lesson list as well, so
adding or removing lessons is reflected without a write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from lms.core.metrics import COURSE_COMPLETIONS, LESSON_COMPLETIONS, PROGRESS_UPDATES
from lms.models.certificate import Certificate
from lms.models.course import Lesson
from lms.models.progress import (
    IN_PROGRESS,
    EnrollmentProgress,
    LessonProgress,
    round_percent,
)
from lms.repos.store import Store
from lms.services import certificate_service, course_service, lesson_state
from lms.services.cache import cache_service, progress_key
from lms.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    progress: EnrollmentProgress
    lesson: LessonProgress
    lesson_newly_completed: bool
    course_newly_completed: bool
    certificate: Certificate | None = None


def _now() -> datetime:
    return datetime.now(UTC)


async def _lesson_ids(store: Store, course_id: str) -> list[str]:
    return [le.id for le in await store.lessons.list_for_course(course_id)]


async def _require_course_lesson(store: Store, course_id: str, lesson_id: str) -> Lesson:
    lesson = await store.lessons.get(lesson_id)
    if lesson is None or lesson.course_id != course_id:
        raise NotFoundError("Lesson not found in this course")
    return lesson


def _with_current_percent(
    progress: EnrollmentProgress, lesson_ids: list[str]
) -> EnrollmentProgress:
    done = len(progress.completed_lesson_ids() & set(lesson_ids))
    return replace(progress, percent=round_percent(done, len(lesson_ids)))


async def get_course_progress(
    store: Store, user_id: str, course_id: str
) -> EnrollmentProgress:
    """Return the enrollment's progress, starting it on first access."""
    await course_service.require_course(store, course_id)
    await course_service.require_enrollment(store, user_id, course_id)

    progress = await store.progress.get(user_id, course_id)
    if progress is None:
        now = _now()
        progress = EnrollmentProgress(
            user_id=user_id,
            course_id=course_id,
            status=IN_PROGRESS,
            started_at=now,
            last_accessed_at=now,
        )
        await store.progress.save_summary(progress)
        logger.info(
            "Progress started user=%s course=%s",
            user_id,
            course_id,
            extra={"user_id": user_id, "course_id": course_id},
        )
        return progress

    return _with_current_percent(progress, await _lesson_ids(store, course_id))


async def get_quick(
    store: Store, user_id: str, course_id: str
) -> EnrollmentProgress | None:
    """Summary only; None when the learner never opened the course."""
    await course_service.require_course(store, course_id)
    progress = await store.progress.get(user_id, course_id)
    if progress is None:
        return None
    return _with_current_percent(progress, await _lesson_ids(store, course_id))


async def list_for_user(store: Store, user_id: str) -> list[EnrollmentProgress]:
    """All of the learner's progress, most recently accessed first."""
    out = []
    for progress in await store.progress.list_for_user(user_id):
        out.append(
            _with_current_percent(progress, await _lesson_ids(store, progress.course_id))
        )
    epoch = datetime.min.replace(tzinfo=UTC)
    out.sort(key=lambda p: p.last_accessed_at or epoch, reverse=True)
    return out


async def update_lesson(
    store: Store,
    user_id: str,
    course_id: str,
    lesson_id: str,
    *,
    completed: bool | None = None,
    video_timestamp: float | None = None,
    time_spent: int = 0,
) -> ProgressUpdate:
    """Record a view, resume offset or completion for one lesson.

    A quiz lesson only completes by passing the quiz, so ``completed=True``
    is dropped for a quiz the learner has not passed yet.
    """
    await course_service.require_enrollment(store, user_id, course_id)
    lesson = await _require_course_lesson(store, course_id, lesson_id)

    now = _now()
    before = await store.progress.get(user_id, course_id)
    previous = before.lesson(lesson_id) if before else None
    if completed and lesson.is_quiz and not (previous is not None and previous.completed):
        logger.debug(
            "Ignoring completed=true for unpassed quiz lesson=%s user=%s",
            lesson_id,
            user_id,
        )
        completed = None
    entry = lesson_state.apply_update(
        previous,
        lesson_id,
        now,
        completed=completed,
        video_timestamp=video_timestamp,
    )
    if completed is False and previous is not None and previous.completed:
        logger.debug(
            "Ignoring completed=false for completed lesson=%s user=%s",
            lesson_id,
            user_id,
        )
    return await _commit(
        store, user_id, course_id, before, previous, entry, now, "lesson", time_spent=time_spent
    )


async def complete_lesson(
    store: Store, user_id: str, lesson_id: str
) -> tuple[ProgressUpdate, bool]:
    """Mark a lesson completed.  Returns ``(update, already_completed)``."""
    lesson = await course_service.require_lesson(store, lesson_id)
    await course_service.require_enrollment(store, user_id, lesson.course_id)

    now = _now()
    before = await store.progress.get(user_id, lesson.course_id)
    previous = before.lesson(lesson_id) if before else None
    already = previous is not None and previous.completed
    if lesson.is_quiz and not already:
        raise ValidationError("Pass the quiz to complete this lesson")
    entry = lesson_state.apply_update(previous, lesson_id, now, completed=True)
    update = await _commit(
        store, user_id, lesson.course_id, before, previous, entry, now, "complete"
    )
    return update, already


async def record_quiz(
    store: Store,
    user_id: str,
    lesson: Lesson,
    *,
    score: int,
    answers: dict[int, int],
    time_spent: int = 0,
) -> ProgressUpdate:
    now = _now()
    before = await store.progress.get(user_id, lesson.course_id)
    previous = before.lesson(lesson.id) if before else None
    entry = lesson_state.record_quiz_attempt(
        previous, lesson.id, now, score=score, answers=answers
    )
    return await _commit(
        store,
        user_id,
        lesson.course_id,
        before,
        previous,
        entry,
        now,
        "quiz",
        time_spent=time_spent,
    )


async def _commit(
    store: Store,
    user_id: str,
    course_id: str,
    before: EnrollmentProgress | None,
    previous: LessonProgress | None,
    entry: LessonProgress,
    now: datetime,
    source: str,
    *,
    time_spent: int = 0,
) -> ProgressUpdate:
    await store.progress.upsert_lesson(user_id, course_id, entry)
    current = await store.progress.get(user_id, course_id)
    if current is None:
        current = EnrollmentProgress(user_id=user_id, course_id=course_id, lessons=(entry,))

    after = lesson_state.summarize(
        current,
        await _lesson_ids(store, course_id),
        now,
        last_accessed_lesson=entry.lesson_id,
        time_spent=time_spent,
    )
    await store.progress.save_summary(after)
    PROGRESS_UPDATES.labels(source=source).inc()

    lesson_done = entry.completed and not (previous is not None and previous.completed)
    if lesson_done:
        LESSON_COMPLETIONS.inc()
        logger.info(
            "Lesson completed user=%s lesson=%s",
            user_id,
            entry.lesson_id,
            extra={"user_id": user_id, "course_id": course_id, "lesson_id": entry.lesson_id},
        )

    course_done = lesson_state.became_completed(before, after)
    certificate = None
    if course_done:
        COURSE_COMPLETIONS.inc()
        logger.info(
            "Course completed user=%s course=%s",
            user_id,
            course_id,
            extra={"user_id": user_id, "course_id": course_id},
        )
        certificate, _ = await certificate_service.issue(store, user_id, course_id)

    await cache_service.delete(progress_key(user_id, course_id))
    return ProgressUpdate(
        progress=after,
        lesson=entry,
        lesson_newly_completed=lesson_done,
        course_newly_completed=course_done,
        certificate=certificate,
    )


async def invalidate_course(course_id: str) -> None:
    """Drop every learner's cached progress for a course (lesson set changed)."""
    await cache_service.delete_pattern(f"progress:*:{course_id}")
