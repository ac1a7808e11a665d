from __future__ import annotations

from typing import Protocol

from lms.models.course import Course


class CourseRepo(Protocol):
    async def get(self, course_id: str) -> Course | None: ...
    async def list_all(self, *, published_only: bool = False) -> list[Course]: ...
    async def list_by_instructor(self, instructor_id: str) -> list[Course]: ...
    async def add(self, course: Course) -> None: ...
    async def update(self, course: Course) -> None: ...
    async def delete(self, course_id: str) -> None: ...
    async def count(self) -> int: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Course] = {}

    async def get(self, course_id: str) -> Course | None:
        return self._by_id.get(course_id)

    async def list_all(self, *, published_only: bool = False) -> list[Course]:
        courses = sorted(self._by_id.values(), key=lambda c: c.created_at, reverse=True)
        if published_only:
            return [c for c in courses if c.is_published]
        return courses

    async def list_by_instructor(self, instructor_id: str) -> list[Course]:
        return [c for c in await self.list_all() if c.instructor_id == instructor_id]

    async def add(self, course: Course) -> None:
        if course.id in self._by_id:
            raise ValueError("course already exists")
        self._by_id[course.id] = course

    async def update(self, course: Course) -> None:
        if course.id not in self._by_id:
            raise KeyError("course not found")
        self._by_id[course.id] = course

    async def delete(self, course_id: str) -> None:
        self._by_id.pop(course_id, None)

    async def count(self) -> int:
        return len(self._by_id)
