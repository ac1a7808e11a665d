from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Rating:
    id: str
    user_id: str
    course_id: str
    rating: int  # 1..5
    review: str = ""
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(*, user_id: str, course_id: str, rating: int, review: str = "") -> Rating:
        return Rating(
            id=str(uuid4()),
            user_id=user_id,
            course_id=course_id,
            rating=rating,
            review=review,
        )
