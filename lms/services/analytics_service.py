"""Per-course and platform-wide aggregates for instructors and admins.

Computed on request from the repositories; nothing is pre-aggregated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from lms.models.principal import Principal
from lms.models.progress import COMPLETED
from lms.repos.store import Store
from lms.services import course_service, rating_service
from lms.services.errors import PermissionDeniedError
from lms.services.rating_service import RatingStats

ACTIVE_WINDOW = timedelta(days=7)


@dataclass(frozen=True, slots=True)
class LessonStats:
    lesson_id: str
    title: str
    order: int
    completions: int
    average_quiz_score: float | None = None


@dataclass(frozen=True, slots=True)
class CourseAnalytics:
    course_id: str
    title: str
    enrolled: int
    completed: int
    completion_rate: float
    average_progress: float
    active_last_7_days: int
    certificates_issued: int
    lessons: tuple[LessonStats, ...]
    ratings: RatingStats


@dataclass(frozen=True, slots=True)
class PlatformStats:
    courses: int
    enrollments: int
    certificates: int
    progress_by_status: dict[str, int]


async def course_analytics(
    store: Store, principal: Principal, course_id: str, *, now: datetime | None = None
) -> CourseAnalytics:
    course = await course_service.require_course(store, course_id)
    if not principal.can_manage(course.instructor_id):
        raise PermissionDeniedError("Not authorized to view analytics for this course")

    now = now or datetime.now(UTC)
    enrollments = await store.enrollments.list_for_course(course_id)
    records = await store.progress.list_for_course(course_id)
    lessons = await store.lessons.list_for_course(course_id)
    quiz_results = await store.quiz_results.list_for_course(course_id)
    certificates = await store.certificates.list_for_course(course_id)

    completed = sum(1 for p in records if p.status == COMPLETED)
    cutoff = now - ACTIVE_WINDOW
    active = sum(
        1 for p in records if p.last_accessed_at is not None and p.last_accessed_at >= cutoff
    )

    lesson_stats = []
    for lesson in lessons:
        completions = sum(
            1 for p in records if (e := p.lesson(lesson.id)) is not None and e.completed
        )
        scores = [r.score for r in quiz_results if r.lesson_id == lesson.id]
        lesson_stats.append(
            LessonStats(
                lesson_id=lesson.id,
                title=lesson.title,
                order=lesson.order,
                completions=completions,
                average_quiz_score=round(sum(scores) / len(scores), 1) if scores else None,
            )
        )

    enrolled = len(enrollments)
    return CourseAnalytics(
        course_id=course.id,
        title=course.title,
        enrolled=enrolled,
        completed=completed,
        completion_rate=round(100 * completed / enrolled, 1) if enrolled else 0.0,
        average_progress=(
            round(sum(p.percent for p in records) / len(records), 1) if records else 0.0
        ),
        active_last_7_days=active,
        certificates_issued=len(certificates),
        lessons=tuple(lesson_stats),
        ratings=rating_service.summarize(await store.ratings.list_for_course(course_id)),
    )


async def platform_stats(store: Store) -> PlatformStats:
    return PlatformStats(
        courses=await store.courses.count(),
        enrollments=await store.enrollments.count(),
        certificates=await store.certificates.count(),
        progress_by_status=await store.progress.count_by_status(),
    )
