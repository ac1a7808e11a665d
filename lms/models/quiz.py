from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

PASSING_SCORE = 70


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class QuestionOutcome:
    question_index: int
    selected: int | None
    correct_answer: int
    is_correct: bool
    points: int


@dataclass(frozen=True, slots=True)
class QuizResult:
    """One scored quiz submission. Every attempt is kept."""

    id: str
    user_id: str
    course_id: str
    lesson_id: str
    score: int  # 0..100
    passed: bool
    earned_points: int
    total_points: int
    answers: dict[int, int] = field(default_factory=dict)
    outcomes: tuple[QuestionOutcome, ...] = ()
    time_taken: int = 0  # seconds, as reported by the client
    submitted_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(
        *,
        user_id: str,
        course_id: str,
        lesson_id: str,
        score: int,
        passed: bool,
        earned_points: int,
        total_points: int,
        answers: dict[int, int],
        outcomes: tuple[QuestionOutcome, ...] = (),
        time_taken: int = 0,
    ) -> QuizResult:
        return QuizResult(
            id=str(uuid4()),
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            score=score,
            passed=passed,
            earned_points=earned_points,
            total_points=total_points,
            answers=answers,
            outcomes=outcomes,
            time_taken=time_taken,
        )

    @property
    def total_questions(self) -> int:
        return len(self.outcomes)

    @property
    def correct_answers(self) -> int:
        return sum(1 for o in self.outcomes if o.is_correct)
