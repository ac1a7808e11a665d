"""Grade a quiz submission against a lesson's question bank.

Scoring is weighted by question points (default 1): the score is the
earned share of the total points as a whole percentage, and a submission
passes at PASSING_SCORE or above.  Unanswered questions earn nothing.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from lms.models.course import QuizQuestion
from lms.models.progress import round_percent
from lms.models.quiz import PASSING_SCORE, QuestionOutcome


@dataclass(frozen=True, slots=True)
class QuizScore:
    score: int
    passed: bool
    earned_points: int
    total_points: int
    outcomes: tuple[QuestionOutcome, ...]

    @property
    def total_questions(self) -> int:
        return len(self.outcomes)

    @property
    def correct_answers(self) -> int:
        return sum(1 for o in self.outcomes if o.is_correct)


def is_passing(score: int) -> bool:
    return score >= PASSING_SCORE


def score_quiz(
    questions: Sequence[QuizQuestion], answers: Mapping[int, int]
) -> QuizScore:
    earned = 0
    total = 0
    outcomes = []
    for index, question in enumerate(questions):
        selected = answers.get(index)
        is_correct = selected is not None and selected == question.correct_answer
        total += question.points
        if is_correct:
            earned += question.points
        outcomes.append(
            QuestionOutcome(
                question_index=index,
                selected=selected,
                correct_answer=question.correct_answer,
                is_correct=is_correct,
                points=question.points,
            )
        )

    score = round_percent(earned, total)
    return QuizScore(
        score=score,
        passed=is_passing(score),
        earned_points=earned,
        total_points=total,
        outcomes=tuple(outcomes),
    )
