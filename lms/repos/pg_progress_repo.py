"""PostgreSQL implementation of ProgressRepo.

Lesson entries are written with INSERT .. ON CONFLICT DO UPDATE on the
(user_id, course_id, lesson_id) key, so each write touches exactly one
lesson row.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import EnrollmentProgressRow, LessonProgressRow
from lms.models.progress import EnrollmentProgress, LessonProgress, QuizAttempt


class PgProgressRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, course_id: str) -> EnrollmentProgress | None:
        row = await self._session.get(EnrollmentProgressRow, (user_id, course_id))
        if row is None:
            return None
        return await self._assemble(row)

    async def upsert_lesson(
        self, user_id: str, course_id: str, entry: LessonProgress
    ) -> None:
        summary = insert(EnrollmentProgressRow).values(
            user_id=user_id, course_id=course_id
        )
        await self._session.execute(summary.on_conflict_do_nothing())

        values = {
            "completed": entry.completed,
            "completed_at": entry.completed_at,
            "last_accessed_at": entry.last_accessed_at,
            "video_timestamp": entry.video_timestamp,
            "quiz_score": entry.quiz_score,
            "quiz_attempts": [_attempt_to_json(a) for a in entry.quiz_attempts],
        }
        stmt = insert(LessonProgressRow).values(
            user_id=user_id, course_id=course_id, lesson_id=entry.lesson_id, **values
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "course_id", "lesson_id"],
            set_=values,
        )
        await self._session.execute(stmt)

    async def save_summary(self, progress: EnrollmentProgress) -> None:
        values = {
            "percent": progress.percent,
            "status": progress.status,
            "started_at": progress.started_at,
            "last_accessed_at": progress.last_accessed_at,
            "last_accessed_lesson": progress.last_accessed_lesson,
            "total_time_spent": progress.total_time_spent,
            "completed_at": progress.completed_at,
        }
        stmt = insert(EnrollmentProgressRow).values(
            user_id=progress.user_id, course_id=progress.course_id, **values
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "course_id"], set_=values
        )
        await self._session.execute(stmt)

    async def list_for_user(self, user_id: str) -> list[EnrollmentProgress]:
        stmt = select(EnrollmentProgressRow).where(
            EnrollmentProgressRow.user_id == user_id
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [await self._assemble(r) for r in rows]

    async def list_for_course(self, course_id: str) -> list[EnrollmentProgress]:
        stmt = select(EnrollmentProgressRow).where(
            EnrollmentProgressRow.course_id == course_id
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [await self._assemble(r) for r in rows]

    async def count_by_status(self) -> dict[str, int]:
        stmt = select(EnrollmentProgressRow.status, func.count()).group_by(
            EnrollmentProgressRow.status
        )
        return {status: n for status, n in (await self._session.execute(stmt)).all()}

    async def _assemble(self, row: EnrollmentProgressRow) -> EnrollmentProgress:
        stmt = select(LessonProgressRow).where(
            LessonProgressRow.user_id == row.user_id,
            LessonProgressRow.course_id == row.course_id,
        )
        lesson_rows = (await self._session.execute(stmt)).scalars().all()
        return EnrollmentProgress(
            user_id=row.user_id,
            course_id=row.course_id,
            percent=row.percent,
            status=row.status,
            started_at=row.started_at,
            last_accessed_at=row.last_accessed_at,
            last_accessed_lesson=row.last_accessed_lesson,
            total_time_spent=row.total_time_spent,
            completed_at=row.completed_at,
            lessons=tuple(_row_to_lesson_progress(r) for r in lesson_rows),
        )


def _attempt_to_json(attempt: QuizAttempt) -> dict:
    return {
        "score": attempt.score,
        "answers": {str(k): v for k, v in attempt.answers.items()},
        "submittedAt": attempt.submitted_at.isoformat()
        if attempt.submitted_at
        else None,
    }


def _attempt_from_json(data: dict) -> QuizAttempt:
    submitted = data.get("submittedAt")
    return QuizAttempt(
        score=data["score"],
        answers={int(k): v for k, v in (data.get("answers") or {}).items()},
        submitted_at=datetime.fromisoformat(submitted) if submitted else None,
    )


def _row_to_lesson_progress(row: LessonProgressRow) -> LessonProgress:
    return LessonProgress(
        lesson_id=row.lesson_id,
        completed=row.completed,
        completed_at=row.completed_at,
        last_accessed_at=row.last_accessed_at,
        video_timestamp=row.video_timestamp,
        quiz_score=row.quiz_score,
        quiz_attempts=tuple(_attempt_from_json(a) for a in row.quiz_attempts or ()),
    )
