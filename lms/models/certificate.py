from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Certificate:
    """Completion certificate. At most one exists per (user, course).

    ``certificate_code`` is the public verification handle; it is unique
    across all certificates and never reissued.
    """

    id: str
    user_id: str
    course_id: str
    certificate_code: str
    issued_at: datetime = field(default_factory=_now)
    course_title: str = ""
    instructor_id: str = ""

    @staticmethod
    def new(
        *,
        user_id: str,
        course_id: str,
        course_title: str = "",
        instructor_id: str = "",
    ) -> Certificate:
        return Certificate(
            id=str(uuid4()),
            user_id=user_id,
            course_id=course_id,
            certificate_code=str(uuid4()),
            course_title=course_title,
            instructor_id=instructor_id,
        )
