from __future__ import annotations

from datetime import datetime

from pydantic import Field

from lms.models.quiz import QuizResult
from lms.schemas.base import CamelModel


class QuizSubmitIn(CamelModel):
    answers: dict[int, int] = Field(default_factory=dict)
    time_taken: int = Field(default=0, ge=0)


class QuestionReviewOut(CamelModel):
    question: str
    options: list[str]
    correct_answer: int
    user_answer: int | None = None
    is_correct: bool
    points: int


class QuizSubmitOut(CamelModel):
    score: int = Field(ge=0, le=100)
    passed: bool
    total_questions: int
    correct_answers: int
    answers: list[QuestionReviewOut]
    lesson_completed: bool = False
    course_completed: bool = False


class QuizResultOut(CamelModel):
    id: str
    lesson_id: str
    score: int
    passed: bool
    total_questions: int
    correct_answers: int
    time_taken: int = 0
    submitted_at: datetime

    @classmethod
    def from_domain(cls, result: QuizResult) -> QuizResultOut:
        return cls(
            id=result.id,
            lesson_id=result.lesson_id,
            score=result.score,
            passed=result.passed,
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            time_taken=result.time_taken,
            submitted_at=result.submitted_at,
        )
