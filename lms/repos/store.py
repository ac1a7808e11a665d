"""Bundle of repositories handed to services.

Two flavours, same shape:
- ``memory_store``: process-wide in-memory repos, used when DATABASE_URL
  is unset (dev, tests).
- ``pg_store(session)``: PostgreSQL repos sharing one request-scoped
  session, so a request's writes commit or roll back together.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from lms.repos.certificate_repo import CertificateRepo, InMemoryCertificateRepo
from lms.repos.course_repo import CourseRepo, InMemoryCourseRepo
from lms.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from lms.repos.lesson_repo import InMemoryLessonRepo, LessonRepo
from lms.repos.pg_certificate_repo import PgCertificateRepo
from lms.repos.pg_course_repo import PgCourseRepo, PgLessonRepo
from lms.repos.pg_enrollment_repo import PgEnrollmentRepo
from lms.repos.pg_progress_repo import PgProgressRepo
from lms.repos.pg_quiz_result_repo import PgQuizResultRepo
from lms.repos.pg_rating_repo import PgRatingRepo
from lms.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from lms.repos.quiz_result_repo import InMemoryQuizResultRepo, QuizResultRepo
from lms.repos.rating_repo import InMemoryRatingRepo, RatingRepo


@dataclass(slots=True)
class Store:
    courses: CourseRepo
    lessons: LessonRepo
    enrollments: EnrollmentRepo
    progress: ProgressRepo
    quiz_results: QuizResultRepo
    certificates: CertificateRepo
    ratings: RatingRepo


def new_memory_store() -> Store:
    return Store(
        courses=InMemoryCourseRepo(),
        lessons=InMemoryLessonRepo(),
        enrollments=InMemoryEnrollmentRepo(),
        progress=InMemoryProgressRepo(),
        quiz_results=InMemoryQuizResultRepo(),
        certificates=InMemoryCertificateRepo(),
        ratings=InMemoryRatingRepo(),
    )


def pg_store(session: AsyncSession) -> Store:
    return Store(
        courses=PgCourseRepo(session),
        lessons=PgLessonRepo(session),
        enrollments=PgEnrollmentRepo(session),
        progress=PgProgressRepo(session),
        quiz_results=PgQuizResultRepo(session),
        certificates=PgCertificateRepo(session),
        ratings=PgRatingRepo(session),
    )


memory_store = new_memory_store()


def reset_memory_store() -> None:
    """Swap every in-memory repo for an empty one (tests)."""
    fresh = new_memory_store()
    for name in Store.__slots__:
        setattr(memory_store, name, getattr(fresh, name))
