from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import Field

from lms.api.dependencies import StoreDep, UserDep, optional_user, require_any_role
from lms.api.errors import domain_errors
from lms.api.lessons import LessonOut
from lms.models.course import Course
from lms.models.principal import Principal
from lms.models.rating import Rating
from lms.schemas.base import CamelModel
from lms.services import course_service, rating_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])

Level = Literal["Beginner", "Intermediate", "Advanced"]


class CourseIn(CamelModel):
    title: str = Field(min_length=1, max_length=500)
    subtitle: str = ""
    description: str = Field(min_length=1)
    category: str = Field(min_length=1)
    level: Level = "Beginner"
    price: float = Field(default=0.0, ge=0)
    is_published: bool = False


class CoursePatch(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    subtitle: str | None = None
    description: str | None = None
    category: str | None = None
    level: Level | None = None
    price: float | None = Field(default=None, ge=0)
    is_published: bool | None = None


class CourseOut(CamelModel):
    id: str
    title: str
    subtitle: str
    description: str
    instructor_id: str
    category: str
    level: str
    price: float
    is_published: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, course: Course) -> CourseOut:
        return cls(
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


class CourseDetailOut(CourseOut):
    lessons: list[LessonOut] = Field(default_factory=list)
    total_duration: int = 0


class CoursePageOut(CamelModel):
    courses: list[CourseOut]
    total: int
    page: int
    pages: int


class EnrollmentOut(CamelModel):
    course_id: str
    user_id: str
    enrolled_at: datetime


class EnrolledCourseOut(CamelModel):
    course: CourseOut
    enrolled_at: datetime
    progress: int = 0
    status: str = "not_started"


class RatingIn(CamelModel):
    rating: int = Field(ge=1, le=5)
    review: str = Field(default="", max_length=rating_service.MAX_REVIEW_LENGTH)


class RatingOut(CamelModel):
    id: str
    user_id: str
    course_id: str
    rating: int
    review: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, r: Rating) -> RatingOut:
        return cls(
            id=r.id,
            user_id=r.user_id,
            course_id=r.course_id,
            rating=r.rating,
            review=r.review,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )


class RatingPageOut(CamelModel):
    ratings: list[RatingOut]
    total: int
    page: int
    pages: int


class RatingStatsOut(CamelModel):
    average: float
    total: int
    distribution: dict[int, int]


def _pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@router.get("", response_model=CoursePageOut)
async def list_courses(
    store: StoreDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> CoursePageOut:
    courses, total = await course_service.list_published(store, page=page, limit=limit)
    return CoursePageOut(
        courses=[CourseOut.from_domain(c) for c in courses],
        total=total,
        page=page,
        pages=_pages(total, limit),
    )


@router.get("/enrolled/me", response_model=list[EnrolledCourseOut])
async def my_courses(principal: UserDep, store: StoreDep) -> list[EnrolledCourseOut]:
    rows = await course_service.list_enrolled(store, principal.user_id)
    return [
        EnrolledCourseOut(
            course=CourseOut.from_domain(course),
            enrolled_at=enrollment.enrolled_at,
            progress=progress.percent if progress else 0,
            status=progress.status if progress else "not_started",
        )
        for course, enrollment, progress in rows
    ]


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseIn,
    store: StoreDep,
    principal: Annotated[Principal, Depends(require_any_role({"instructor", "admin"}))],
) -> CourseOut:
    with domain_errors():
        course = await course_service.create_course(store, principal, **body.model_dump())
    return CourseOut.from_domain(course)


@router.get("/{course_id}", response_model=CourseDetailOut)
async def get_course(
    course_id: str,
    store: StoreDep,
    principal: Annotated[Principal | None, Depends(optional_user)],
) -> CourseDetailOut:
    with domain_errors():
        course, lessons = await course_service.get_with_lessons(store, course_id, principal)
    return CourseDetailOut(
        **CourseOut.from_domain(course).model_dump(),
        lessons=[LessonOut.from_domain(le) for le in lessons],
        total_duration=sum(le.duration for le in lessons),
    )


@router.put("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: str, body: CoursePatch, principal: UserDep, store: StoreDep
) -> CourseOut:
    with domain_errors():
        course = await course_service.update_course(
            store, principal, course_id, **body.model_dump(exclude_unset=True)
        )
    return CourseOut.from_domain(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(course_id: str, principal: UserDep, store: StoreDep) -> None:
    with domain_errors():
        await course_service.delete_course(store, principal, course_id)


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll(course_id: str, principal: UserDep, store: StoreDep) -> EnrollmentOut:
    with domain_errors():
        enrollment = await course_service.enroll(store, principal.user_id, course_id)
    return EnrollmentOut(
        course_id=enrollment.course_id,
        user_id=enrollment.user_id,
        enrolled_at=enrollment.enrolled_at,
    )


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------


@router.post("/{course_id}/ratings", response_model=RatingOut, status_code=status.HTTP_201_CREATED)
async def rate_course(
    course_id: str,
    body: RatingIn,
    response: Response,
    principal: UserDep,
    store: StoreDep,
) -> RatingOut:
    """Create the caller's rating (201) or replace it (200)."""
    with domain_errors():
        rating, created = await rating_service.rate(
            store, principal.user_id, course_id, body.rating, body.review
        )
    if not created:
        response.status_code = status.HTTP_200_OK
    return RatingOut.from_domain(rating)


@router.delete("/{course_id}/ratings", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rating(course_id: str, principal: UserDep, store: StoreDep) -> None:
    with domain_errors():
        await rating_service.remove(store, principal.user_id, course_id)


@router.get("/{course_id}/ratings", response_model=RatingPageOut)
async def list_ratings(
    course_id: str,
    store: StoreDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RatingPageOut:
    with domain_errors():
        ratings, total = await rating_service.list_page(
            store, course_id, page=page, limit=limit
        )
    return RatingPageOut(
        ratings=[RatingOut.from_domain(r) for r in ratings],
        total=total,
        page=page,
        pages=_pages(total, limit),
    )


@router.get("/{course_id}/ratings/stats", response_model=RatingStatsOut)
async def rating_stats(course_id: str, store: StoreDep) -> RatingStatsOut:
    with domain_errors():
        stats = await rating_service.stats(store, course_id)
    return RatingStatsOut(
        average=stats.average, total=stats.total, distribution=stats.distribution
    )


@router.get("/{course_id}/my-rating", response_model=RatingOut)
async def my_rating(course_id: str, principal: UserDep, store: StoreDep) -> RatingOut:
    with domain_errors():
        rating = await rating_service.mine(store, principal.user_id, course_id)
    return RatingOut.from_domain(rating)
