from __future__ import annotations

import logging

from fastapi import APIRouter

from lms.api.dependencies import StoreDep, UserDep
from lms.api.errors import domain_errors
from lms.schemas.base import CamelModel
from lms.services import analytics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


class LessonStatsOut(CamelModel):
    lesson_id: str
    title: str
    order: int
    completions: int
    average_quiz_score: float | None = None


class RatingSummaryOut(CamelModel):
    average: float
    total: int
    distribution: dict[int, int]


class CourseAnalyticsOut(CamelModel):
    course_id: str
    title: str
    enrolled: int
    completed: int
    completion_rate: float
    average_progress: float
    active_last_7_days: int
    certificates_issued: int
    lessons: list[LessonStatsOut]
    ratings: RatingSummaryOut


@router.get("/courses/{course_id}", response_model=CourseAnalyticsOut)
async def course_analytics(
    course_id: str, principal: UserDep, store: StoreDep
) -> CourseAnalyticsOut:
    """Instructor of the course or admin."""
    with domain_errors():
        a = await analytics_service.course_analytics(store, principal, course_id)
    logger.info("Analytics requested course=%s by user=%s", course_id, principal.user_id)
    return CourseAnalyticsOut(
        course_id=a.course_id,
        title=a.title,
        enrolled=a.enrolled,
        completed=a.completed,
        completion_rate=a.completion_rate,
        average_progress=a.average_progress,
        active_last_7_days=a.active_last_7_days,
        certificates_issued=a.certificates_issued,
        lessons=[
            LessonStatsOut(
                lesson_id=s.lesson_id,
                title=s.title,
                order=s.order,
                completions=s.completions,
                average_quiz_score=s.average_quiz_score,
            )
            for s in a.lessons
        ],
        ratings=RatingSummaryOut(
            average=a.ratings.average,
            total=a.ratings.total,
            distribution=a.ratings.distribution,
        ),
    )
