"""Course catalog, lessons and enrollment.

Ownership rule for every write: the course's instructor or an admin.
Unpublished courses are visible only to those same people.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from lms.models.course import LESSON_TYPES, Course, Lesson, QuizQuestion
from lms.models.enrollment import Enrollment
from lms.models.principal import Principal
from lms.models.progress import EnrollmentProgress
from lms.repos.store import Store
from lms.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


async def require_course(store: Store, course_id: str) -> Course:
    course = await store.courses.get(course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return course


def _require_owner(principal: Principal, course: Course) -> None:
    if not principal.can_manage(course.instructor_id):
        logger.warning(
            "Course write denied: user=%s course=%s", principal.user_id, course.id
        )
        raise PermissionDeniedError("Not authorized to modify this course")


async def list_published(
    store: Store, *, page: int = 1, limit: int = 10
) -> tuple[list[Course], int]:
    """Return one page of published courses (newest first) and the total."""
    courses = await store.courses.list_all(published_only=True)
    start = (page - 1) * limit
    return courses[start : start + limit], len(courses)


async def get_with_lessons(
    store: Store, course_id: str, principal: Principal | None = None
) -> tuple[Course, list[Lesson]]:
    course = await require_course(store, course_id)
    if not course.is_published and (
        principal is None or not principal.can_manage(course.instructor_id)
    ):
        raise NotFoundError("Course not found")
    return course, await store.lessons.list_for_course(course_id)


async def create_course(store: Store, principal: Principal, **fields: Any) -> Course:
    course = Course.new(instructor_id=principal.user_id, **fields)
    await store.courses.add(course)
    logger.info("Course created id=%s by user=%s", course.id, principal.user_id)
    return course


async def update_course(
    store: Store, principal: Principal, course_id: str, **changes: Any
) -> Course:
    course = await require_course(store, course_id)
    _require_owner(principal, course)
    updated = replace(course, **{k: v for k, v in changes.items() if v is not None})
    await store.courses.update(updated)
    return updated


async def delete_course(store: Store, principal: Principal, course_id: str) -> None:
    course = await require_course(store, course_id)
    _require_owner(principal, course)
    await store.lessons.delete_for_course(course_id)
    await store.courses.delete(course_id)
    logger.info("Course deleted id=%s by user=%s", course_id, principal.user_id)


# ---------------------------------------------------------------------------
# Enrollment
# ---------------------------------------------------------------------------


async def enroll(store: Store, user_id: str, course_id: str) -> Enrollment:
    course = await require_course(store, course_id)
    if not course.is_published:
        raise NotFoundError("Course not found")
    if await store.enrollments.get(user_id, course_id) is not None:
        raise ConflictError("Already enrolled in this course")

    enrollment = Enrollment.new(user_id=user_id, course_id=course_id)
    try:
        await store.enrollments.add(enrollment)
    except ValueError as e:
        raise ConflictError("Already enrolled in this course") from e
    logger.info(
        "Enrolled user=%s course=%s",
        user_id,
        course_id,
        extra={"user_id": user_id, "course_id": course_id},
    )
    return enrollment


async def require_enrollment(store: Store, user_id: str, course_id: str) -> None:
    if await store.enrollments.get(user_id, course_id) is None:
        logger.warning("Not enrolled: user=%s course=%s", user_id, course_id)
        raise PermissionDeniedError("Not enrolled in this course")


async def list_enrolled(
    store: Store, user_id: str
) -> list[tuple[Course, Enrollment, EnrollmentProgress | None]]:
    out = []
    for enrollment in await store.enrollments.list_for_user(user_id):
        course = await store.courses.get(enrollment.course_id)
        if course is None:
            continue
        progress = await store.progress.get(user_id, course.id)
        out.append((course, enrollment, progress))
    out.sort(key=lambda t: t[1].enrolled_at, reverse=True)
    return out


# ---------------------------------------------------------------------------
# Lessons
# ---------------------------------------------------------------------------


def validate_lesson(lesson: Lesson) -> None:
    """Type-specific content checks."""
    if lesson.lesson_type not in LESSON_TYPES:
        raise ValidationError(f"lessonType must be one of {', '.join(LESSON_TYPES)}")
    if lesson.duration < 1:
        raise ValidationError("duration must be at least 1 minute")
    if lesson.lesson_type == "video" and not lesson.video_url:
        raise ValidationError("Video URL is required for video lessons")
    if lesson.lesson_type == "article" and not lesson.article_content:
        raise ValidationError("Article content is required for article lessons")
    if lesson.lesson_type == "quiz":
        if not lesson.quiz_questions:
            raise ValidationError("Quiz questions are required for quiz lessons")
        for i, q in enumerate(lesson.quiz_questions):
            _validate_question(i, q)


def _validate_question(index: int, q: QuizQuestion) -> None:
    if not q.question.strip():
        raise ValidationError(f"question {index}: text is required")
    if len(q.options) < 2:
        raise ValidationError(f"question {index}: at least two options are required")
    if not 0 <= q.correct_answer < len(q.options):
        raise ValidationError(f"question {index}: correctAnswer is out of range")
    if q.points < 1:
        raise ValidationError(f"question {index}: points must be at least 1")


def _strip_foreign_content(lesson: Lesson) -> Lesson:
    """Drop content that does not belong to the lesson type."""
    return replace(
        lesson,
        video_url=lesson.video_url if lesson.lesson_type == "video" else None,
        article_content=(
            lesson.article_content if lesson.lesson_type == "article" else None
        ),
        quiz_questions=lesson.quiz_questions if lesson.lesson_type == "quiz" else (),
    )


async def list_lessons(store: Store, course_id: str) -> list[Lesson]:
    await require_course(store, course_id)
    return await store.lessons.list_for_course(course_id)


async def require_lesson(store: Store, lesson_id: str) -> Lesson:
    lesson = await store.lessons.get(lesson_id)
    if lesson is None:
        raise NotFoundError("Lesson not found")
    return lesson


async def create_lesson(
    store: Store,
    principal: Principal,
    course_id: str,
    *,
    order: int | None = None,
    **fields: Any,
) -> Lesson:
    course = await require_course(store, course_id)
    _require_owner(principal, course)

    if order is None:
        existing = await store.lessons.list_for_course(course_id)
        order = max((le.order for le in existing), default=0) + 1

    lesson = _strip_foreign_content(Lesson.new(course_id=course_id, order=order, **fields))
    validate_lesson(lesson)
    try:
        await store.lessons.add(lesson)
    except ValueError as e:
        raise ConflictError(f"A lesson with order {order} already exists") from e
    logger.info("Lesson created id=%s course=%s", lesson.id, course_id)
    return lesson


async def update_lesson(
    store: Store, principal: Principal, lesson_id: str, **changes: Any
) -> Lesson:
    lesson = await require_lesson(store, lesson_id)
    course = await require_course(store, lesson.course_id)
    _require_owner(principal, course)

    updated = replace(lesson, **{k: v for k, v in changes.items() if v is not None})
    updated = _strip_foreign_content(updated)
    validate_lesson(updated)
    try:
        await store.lessons.update(updated)
    except ValueError as e:
        raise ConflictError(f"A lesson with order {updated.order} already exists") from e
    return updated


async def delete_lesson(store: Store, principal: Principal, lesson_id: str) -> None:
    lesson = await require_lesson(store, lesson_id)
    course = await require_course(store, lesson.course_id)
    _require_owner(principal, course)
    await store.lessons.delete(lesson_id)
    logger.info("Lesson deleted id=%s course=%s", lesson_id, course.id)
