from __future__ import annotations

from typing import Protocol

from lms.models.course import Lesson


class LessonRepo(Protocol):
    async def get(self, lesson_id: str) -> Lesson | None: ...
    async def list_for_course(self, course_id: str) -> list[Lesson]: ...
    async def add(self, lesson: Lesson) -> None: ...
    async def update(self, lesson: Lesson) -> None: ...
    async def delete(self, lesson_id: str) -> None: ...
    async def delete_for_course(self, course_id: str) -> None: ...


class InMemoryLessonRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Lesson] = {}

    async def get(self, lesson_id: str) -> Lesson | None:
        return self._by_id.get(lesson_id)

    async def list_for_course(self, course_id: str) -> list[Lesson]:
        lessons = [le for le in self._by_id.values() if le.course_id == course_id]
        return sorted(lessons, key=lambda le: le.order)

    async def add(self, lesson: Lesson) -> None:
        self._check_order(lesson)
        self._by_id[lesson.id] = lesson

    async def update(self, lesson: Lesson) -> None:
        if lesson.id not in self._by_id:
            raise KeyError("lesson not found")
        self._check_order(lesson)
        self._by_id[lesson.id] = lesson

    async def delete(self, lesson_id: str) -> None:
        self._by_id.pop(lesson_id, None)

    async def delete_for_course(self, course_id: str) -> None:
        for lesson_id in [k for k, v in self._by_id.items() if v.course_id == course_id]:
            del self._by_id[lesson_id]

    def _check_order(self, lesson: Lesson) -> None:
        # (course_id, order) is unique, as in the lessons table
        for other in self._by_id.values():
            if (
                other.id != lesson.id
                and other.course_id == lesson.course_id
                and other.order == lesson.order
            ):
                raise ValueError("lesson order already taken")
