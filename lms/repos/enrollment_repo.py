from __future__ import annotations

from typing import Protocol

from lms.models.enrollment import Enrollment


class EnrollmentRepo(Protocol):
    async def get(self, user_id: str, course_id: str) -> Enrollment | None: ...
    async def add(self, enrollment: Enrollment) -> None: ...
    async def list_for_user(self, user_id: str) -> list[Enrollment]: ...
    async def list_for_course(self, course_id: str) -> list[Enrollment]: ...
    async def count(self) -> int: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[str, str], Enrollment] = {}

    async def get(self, user_id: str, course_id: str) -> Enrollment | None:
        return self._by_key.get((user_id, course_id))

    async def add(self, enrollment: Enrollment) -> None:
        key = (enrollment.user_id, enrollment.course_id)
        if key in self._by_key:
            raise ValueError("already enrolled")
        self._by_key[key] = enrollment

    async def list_for_user(self, user_id: str) -> list[Enrollment]:
        return [e for (uid, _), e in self._by_key.items() if uid == user_id]

    async def list_for_course(self, course_id: str) -> list[Enrollment]:
        return [e for (_, cid), e in self._by_key.items() if cid == course_id]

    async def count(self) -> int:
        return len(self._by_key)
