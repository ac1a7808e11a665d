from __future__ import annotations

import logging
from dataclasses import dataclass

from lms.core.metrics import QUIZ_SCORES, QUIZ_SUBMISSIONS
from lms.models.course import Lesson
from lms.models.quiz import QuizResult
from lms.repos.store import Store
from lms.services import course_service, progress_service
from lms.services.errors import NotFoundError, ValidationError
from lms.services.progress_service import ProgressUpdate
from lms.services.quiz_scoring import score_quiz

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Submission:
    lesson: Lesson
    result: QuizResult
    progress: ProgressUpdate


async def _require_quiz(store: Store, lesson_id: str) -> Lesson:
    lesson = await course_service.require_lesson(store, lesson_id)
    if not lesson.is_quiz:
        raise ValidationError("This lesson is not a quiz")
    if not lesson.quiz_questions:
        raise ValidationError("This quiz has no questions")
    return lesson


async def submit(
    store: Store,
    user_id: str,
    lesson_id: str,
    answers: dict[int, int],
    *,
    time_taken: int = 0,
) -> Submission:
    """Grade, keep the attempt, and feed the score into lesson progress.

    Answers for indices outside the question bank are ignored.
    """
    lesson = await _require_quiz(store, lesson_id)
    await course_service.require_enrollment(store, user_id, lesson.course_id)

    graded = score_quiz(lesson.quiz_questions, answers)
    result = QuizResult.new(
        user_id=user_id,
        course_id=lesson.course_id,
        lesson_id=lesson.id,
        score=graded.score,
        passed=graded.passed,
        earned_points=graded.earned_points,
        total_points=graded.total_points,
        answers=dict(answers),
        outcomes=graded.outcomes,
        time_taken=max(0, time_taken),
    )
    await store.quiz_results.add(result)
    QUIZ_SUBMISSIONS.labels(passed=str(graded.passed).lower()).inc()
    QUIZ_SCORES.observe(graded.score)
    logger.info(
        "Quiz graded user=%s lesson=%s score=%d passed=%s",
        user_id,
        lesson.id,
        graded.score,
        graded.passed,
        extra={"user_id": user_id, "course_id": lesson.course_id, "lesson_id": lesson.id},
    )

    update = await progress_service.record_quiz(
        store,
        user_id,
        lesson,
        score=graded.score,
        answers=dict(answers),
        time_spent=result.time_taken,
    )
    return Submission(lesson=lesson, result=result, progress=update)


async def results(store: Store, user_id: str, lesson_id: str) -> list[QuizResult]:
    """Every attempt, newest first."""
    await course_service.require_lesson(store, lesson_id)
    attempts = await store.quiz_results.list_for_lesson(user_id, lesson_id)
    return sorted(attempts, key=lambda r: r.submitted_at, reverse=True)


async def best(store: Store, user_id: str, lesson_id: str) -> QuizResult:
    """Highest score; the newest attempt wins a tie."""
    attempts = await results(store, user_id, lesson_id)
    if not attempts:
        raise NotFoundError("No quiz attempts yet")
    return max(attempts, key=lambda r: (r.score, r.submitted_at))
