"""PostgreSQL implementations of CourseRepo and LessonRepo."""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import CourseRow, LessonRow
from lms.models.course import Course, Lesson, QuizQuestion


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, course_id: str) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        return _row_to_course(row) if row is not None else None

    async def list_all(self, *, published_only: bool = False) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at.desc())
        if published_only:
            stmt = stmt.where(CourseRow.is_published.is_(True))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_by_instructor(self, instructor_id: str) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.instructor_id == instructor_id)
            .order_by(CourseRow.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def add(self, course: Course) -> None:
        self._session.add(
            CourseRow(
                id=course.id,
                title=course.title,
                subtitle=course.subtitle,
                description=course.description,
                instructor_id=course.instructor_id,
                category=course.category,
                level=course.level,
                price=course.price,
                is_published=course.is_published,
                created_at=course.created_at,
            )
        )
        await self._session.flush()

    async def update(self, course: Course) -> None:
        row = await self._session.get(CourseRow, course.id)
        if row is None:
            raise KeyError("course not found")
        row.title = course.title
        row.subtitle = course.subtitle
        row.description = course.description
        row.category = course.category
        row.level = course.level
        row.price = course.price
        row.is_published = course.is_published
        await self._session.flush()

    async def delete(self, course_id: str) -> None:
        await self._session.execute(delete(CourseRow).where(CourseRow.id == course_id))

    async def count(self) -> int:
        stmt = select(func.count()).select_from(CourseRow)
        return (await self._session.execute(stmt)).scalar_one()


class PgLessonRepo:
    """Satisfies the LessonRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, lesson_id: str) -> Lesson | None:
        row = await self._session.get(LessonRow, lesson_id)
        return _row_to_lesson(row) if row is not None else None

    async def list_for_course(self, course_id: str) -> list[Lesson]:
        stmt = (
            select(LessonRow)
            .where(LessonRow.course_id == course_id)
            .order_by(LessonRow.position)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_lesson(r) for r in rows]

    async def add(self, lesson: Lesson) -> None:
        try:
            async with self._session.begin_nested():
                self._session.add(LessonRow(id=lesson.id, **_lesson_values(lesson)))
        except IntegrityError as e:
            raise ValueError("lesson order already taken") from e

    async def update(self, lesson: Lesson) -> None:
        row = await self._session.get(LessonRow, lesson.id)
        if row is None:
            raise KeyError("lesson not found")
        try:
            async with self._session.begin_nested():
                for key, value in _lesson_values(lesson).items():
                    setattr(row, key, value)
        except IntegrityError as e:
            raise ValueError("lesson order already taken") from e

    async def delete(self, lesson_id: str) -> None:
        await self._session.execute(delete(LessonRow).where(LessonRow.id == lesson_id))

    async def delete_for_course(self, course_id: str) -> None:
        await self._session.execute(
            delete(LessonRow).where(LessonRow.course_id == course_id)
        )


def _lesson_values(lesson: Lesson) -> dict:
    return {
        "course_id": lesson.course_id,
        "title": lesson.title,
        "lesson_type": lesson.lesson_type,
        "position": lesson.order,
        "duration": lesson.duration,
        "content": lesson.content,
        "video_url": lesson.video_url,
        "article_content": lesson.article_content,
        "quiz_questions": [
            {
                "question": q.question,
                "options": list(q.options),
                "correctAnswer": q.correct_answer,
                "points": q.points,
            }
            for q in lesson.quiz_questions
        ],
        "is_preview": lesson.is_preview,
    }


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        subtitle=row.subtitle or "",
        description=row.description or "",
        instructor_id=row.instructor_id,
        category=row.category,
        level=row.level,
        price=row.price,
        is_published=row.is_published,
        created_at=row.created_at,
    )


def _row_to_lesson(row: LessonRow) -> Lesson:
    return Lesson(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        lesson_type=row.lesson_type,
        order=row.position,
        duration=row.duration,
        content=row.content or "",
        video_url=row.video_url,
        article_content=row.article_content,
        quiz_questions=tuple(
            QuizQuestion(
                question=q["question"],
                options=tuple(q.get("options", ())),
                correct_answer=q["correctAnswer"],
                points=q.get("points", 1),
            )
            for q in row.quiz_questions or ()
        ),
        is_preview=row.is_preview,
    )
