from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Enrollment:
    """A learner's registration in a course. Unique per (user, course)."""

    id: str
    user_id: str
    course_id: str
    enrolled_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(*, user_id: str, course_id: str) -> Enrollment:
        return Enrollment(id=str(uuid4()), user_id=user_id, course_id=course_id)
