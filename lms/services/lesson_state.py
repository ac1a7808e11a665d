"""Lesson completion state machine.

Per lesson:  not_started -> in_progress -> completed

  - first access moves a lesson to in_progress
  - an explicit completion, or a quiz score >= PASSING_SCORE, moves it to
    completed
  - completed is terminal: re-access, an explicit ``completed=False`` or a
    lower quiz retake leave the state alone.  Scores, attempts and resume
    offsets are still recorded.

Per enrollment, ``summarize`` recomputes percent and status over the
course's *current* lesson list.  Once an enrollment reaches completed it
stays completed even if lessons are added later; only the percent moves.

Every function here is pure and takes ``now`` from the caller.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import datetime

from lms.models.progress import (
    COMPLETED,
    IN_PROGRESS,
    NOT_STARTED,
    EnrollmentProgress,
    LessonProgress,
    QuizAttempt,
    round_percent,
)
from lms.services.quiz_scoring import is_passing


def touch(
    entry: LessonProgress | None,
    lesson_id: str,
    now: datetime,
    *,
    video_timestamp: float | None = None,
) -> LessonProgress:
    """Record an access to the lesson, optionally with a resume offset."""
    if entry is None:
        entry = LessonProgress(lesson_id=lesson_id)
    entry = replace(entry, last_accessed_at=now)
    if video_timestamp is not None:
        entry = replace(entry, video_timestamp=max(0.0, video_timestamp))
    return entry


def complete(entry: LessonProgress, now: datetime) -> LessonProgress:
    if entry.completed:
        return entry
    return replace(entry, completed=True, completed_at=now)


def apply_update(
    entry: LessonProgress | None,
    lesson_id: str,
    now: datetime,
    *,
    completed: bool | None = None,
    video_timestamp: float | None = None,
) -> LessonProgress:
    """Apply a client progress write (view, resume offset, completion)."""
    entry = touch(entry, lesson_id, now, video_timestamp=video_timestamp)
    if completed:
        entry = complete(entry, now)
    return entry


def record_quiz_attempt(
    entry: LessonProgress | None,
    lesson_id: str,
    now: datetime,
    *,
    score: int,
    answers: Mapping[int, int],
) -> LessonProgress:
    """Append the attempt, keep the latest score, complete on a pass."""
    entry = touch(entry, lesson_id, now)
    attempt = QuizAttempt(score=score, answers=dict(answers), submitted_at=now)
    entry = replace(
        entry,
        quiz_score=score,
        quiz_attempts=(*entry.quiz_attempts, attempt),
    )
    if is_passing(score):
        entry = complete(entry, now)
    return entry


def summarize(
    progress: EnrollmentProgress,
    lesson_ids: Sequence[str],
    now: datetime,
    *,
    last_accessed_lesson: str | None = None,
    time_spent: int = 0,
) -> EnrollmentProgress:
    """Recompute percent and status after a lesson entry changed.

    ``time_spent`` is the learner-reported seconds since the previous write
    and is added to the running total.
    """
    course_lessons = set(lesson_ids)
    done = len(progress.completed_lesson_ids() & course_lessons)
    percent = round_percent(done, len(course_lessons))

    all_done = bool(course_lessons) and done == len(course_lessons)
    if progress.status == COMPLETED or all_done:
        status = COMPLETED
    elif progress.lessons or progress.status == IN_PROGRESS:
        status = IN_PROGRESS
    else:
        status = NOT_STARTED

    completed_at = progress.completed_at
    if status == COMPLETED and completed_at is None:
        completed_at = now

    return replace(
        progress,
        percent=percent,
        status=status,
        started_at=progress.started_at or now,
        last_accessed_at=now,
        last_accessed_lesson=last_accessed_lesson or progress.last_accessed_lesson,
        completed_at=completed_at,
        total_time_spent=progress.total_time_spent + max(0, time_spent),
    )


def became_completed(before: EnrollmentProgress | None, after: EnrollmentProgress) -> bool:
    was = before is not None and before.status == COMPLETED
    return after.status == COMPLETED and not was
