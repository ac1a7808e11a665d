"""Progress endpoints consumed by the progress client.

GET  /progress/courses/{course_id}
  -> read-through cache (check cache -> miss -> repositories -> populate)
POST /progress/courses/{course_id}/lessons/{lesson_id}
  -> upsert one lesson entry, recompute the summary, invalidate the cache
"""

from __future__ import annotations

from fastapi import APIRouter

from lms.api.dependencies import StoreDep, UserDep
from lms.api.errors import domain_errors
from lms.core.config import SETTINGS
from lms.core.metrics import CACHE_OPERATIONS
from lms.models.progress import NOT_STARTED
from lms.schemas.progress import (
    CourseProgressOut,
    ProgressSummaryOut,
    ProgressUpdateIn,
    QuickProgressOut,
)
from lms.services import progress_service
from lms.services.cache import cache_service, progress_key

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("", response_model=list[ProgressSummaryOut])
async def list_my_progress(principal: UserDep, store: StoreDep) -> list[ProgressSummaryOut]:
    out = []
    for progress in await progress_service.list_for_user(store, principal.user_id):
        course = await store.courses.get(progress.course_id)
        out.append(
            ProgressSummaryOut(
                course_id=progress.course_id,
                course_title=course.title if course else "",
                progress=progress.percent,
                status=progress.status,  # type: ignore[arg-type]
                started_at=progress.started_at,
                last_accessed_at=progress.last_accessed_at,
                completed_at=progress.completed_at,
            )
        )
    return out


@router.get("/courses/{course_id}", response_model=CourseProgressOut)
async def get_course_progress(
    course_id: str, principal: UserDep, store: StoreDep
) -> CourseProgressOut:
    """Full progress document for the caller in one course.

    The first read for an enrollment starts it (status in_progress).
    Cached per (user, course); every progress write drops the entry.
    """
    cache_key = progress_key(principal.user_id, course_id)

    cached = await cache_service.get(cache_key)
    if cached is not None:
        CACHE_OPERATIONS.labels(operation="hit").inc()
        return CourseProgressOut.model_validate_json(cached)

    CACHE_OPERATIONS.labels(operation="miss").inc()
    with domain_errors():
        progress = await progress_service.get_course_progress(
            store, principal.user_id, course_id
        )

    out = CourseProgressOut.from_domain(progress)
    await cache_service.set(cache_key, out.model_dump_json(), SETTINGS.progress_cache_ttl)
    return out


@router.get("/courses/{course_id}/quick", response_model=QuickProgressOut)
async def get_quick_progress(
    course_id: str, principal: UserDep, store: StoreDep
) -> QuickProgressOut:
    with domain_errors():
        progress = await progress_service.get_quick(store, principal.user_id, course_id)
    if progress is None:
        return QuickProgressOut(course_id=course_id, progress=0, status=NOT_STARTED)
    return QuickProgressOut(
        course_id=course_id,
        progress=progress.percent,
        status=progress.status,  # type: ignore[arg-type]
        last_accessed_at=progress.last_accessed_at,
        last_accessed_lesson=progress.last_accessed_lesson,
    )


@router.post("/courses/{course_id}/lessons/{lesson_id}", response_model=CourseProgressOut)
async def update_lesson_progress(
    course_id: str,
    lesson_id: str,
    body: ProgressUpdateIn,
    principal: UserDep,
    store: StoreDep,
) -> CourseProgressOut:
    with domain_errors():
        update = await progress_service.update_lesson(
            store,
            principal.user_id,
            course_id,
            lesson_id,
            completed=body.completed,
            video_timestamp=body.video_timestamp,
            time_spent=body.time_spent,
        )
    return CourseProgressOut.from_domain(update.progress)

