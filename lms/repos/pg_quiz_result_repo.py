"""PostgreSQL implementation of QuizResultRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import QuizResultRow
from lms.models.quiz import QuestionOutcome, QuizResult


class PgQuizResultRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, result: QuizResult) -> None:
        self._session.add(
            QuizResultRow(
                id=result.id,
                user_id=result.user_id,
                course_id=result.course_id,
                lesson_id=result.lesson_id,
                score=result.score,
                passed=result.passed,
                earned_points=result.earned_points,
                total_points=result.total_points,
                answers={str(k): v for k, v in result.answers.items()},
                outcomes=[
                    {
                        "questionIndex": o.question_index,
                        "selected": o.selected,
                        "correctAnswer": o.correct_answer,
                        "isCorrect": o.is_correct,
                        "points": o.points,
                    }
                    for o in result.outcomes
                ],
                time_taken=result.time_taken,
                submitted_at=result.submitted_at,
            )
        )
        await self._session.flush()

    async def list_for_lesson(self, user_id: str, lesson_id: str) -> list[QuizResult]:
        stmt = (
            select(QuizResultRow)
            .where(QuizResultRow.user_id == user_id, QuizResultRow.lesson_id == lesson_id)
            .order_by(QuizResultRow.submitted_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_result(r) for r in rows]

    async def list_for_course(self, course_id: str) -> list[QuizResult]:
        stmt = select(QuizResultRow).where(QuizResultRow.course_id == course_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_result(r) for r in rows]


def _row_to_result(row: QuizResultRow) -> QuizResult:
    return QuizResult(
        id=row.id,
        user_id=row.user_id,
        course_id=row.course_id,
        lesson_id=row.lesson_id,
        score=row.score,
        passed=row.passed,
        earned_points=row.earned_points,
        total_points=row.total_points,
        answers={int(k): v for k, v in (row.answers or {}).items()},
        outcomes=tuple(
            QuestionOutcome(
                question_index=o["questionIndex"],
                selected=o.get("selected"),
                correct_answer=o["correctAnswer"],
                is_correct=o["isCorrect"],
                points=o["points"],
            )
            for o in row.outcomes or ()
        ),
        time_taken=row.time_taken,
        submitted_at=row.submitted_at,
    )
