from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from lms.models.rating import Rating
from lms.repos.store import Store
from lms.services import course_service
from lms.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_REVIEW_LENGTH = 1000


@dataclass(frozen=True, slots=True)
class RatingStats:
    average: float
    total: int
    distribution: dict[int, int] = field(default_factory=dict)


def summarize(ratings: list[Rating]) -> RatingStats:
    distribution = {star: 0 for star in range(1, 6)}
    for r in ratings:
        distribution[r.rating] += 1
    total = len(ratings)
    average = round(sum(r.rating for r in ratings) / total, 1) if total else 0.0
    return RatingStats(average=average, total=total, distribution=distribution)


async def rate(
    store: Store, user_id: str, course_id: str, rating: int, review: str = ""
) -> tuple[Rating, bool]:
    """Create or replace the learner's rating. Returns ``(rating, created)``."""
    if not 1 <= rating <= 5:
        raise ValidationError("rating must be between 1 and 5")
    review = review.strip()
    if len(review) > MAX_REVIEW_LENGTH:
        raise ValidationError(f"review must be at most {MAX_REVIEW_LENGTH} characters")

    await course_service.require_course(store, course_id)
    await course_service.require_enrollment(store, user_id, course_id)

    existing = await store.ratings.get_for_user_course(user_id, course_id)
    if existing is None:
        saved = Rating.new(user_id=user_id, course_id=course_id, rating=rating, review=review)
    else:
        saved = replace(existing, rating=rating, review=review, updated_at=datetime.now(UTC))
    await store.ratings.upsert(saved)
    logger.info("Course rated user=%s course=%s rating=%d", user_id, course_id, rating)
    return saved, existing is None


async def remove(store: Store, user_id: str, course_id: str) -> None:
    if not await store.ratings.delete(user_id, course_id):
        raise NotFoundError("Rating not found")


async def list_page(
    store: Store, course_id: str, *, page: int = 1, limit: int = 10
) -> tuple[list[Rating], int]:
    await course_service.require_course(store, course_id)
    ratings = await store.ratings.list_for_course(course_id)
    start = (page - 1) * limit
    return ratings[start : start + limit], len(ratings)


async def stats(store: Store, course_id: str) -> RatingStats:
    await course_service.require_course(store, course_id)
    return summarize(await store.ratings.list_for_course(course_id))


async def mine(store: Store, user_id: str, course_id: str) -> Rating:
    rating = await store.ratings.get_for_user_course(user_id, course_id)
    if rating is None:
        raise NotFoundError("Rating not found")
    return rating
