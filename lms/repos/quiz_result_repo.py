from __future__ import annotations

from typing import Protocol

from lms.models.quiz import QuizResult


class QuizResultRepo(Protocol):
    async def add(self, result: QuizResult) -> None: ...
    async def list_for_lesson(self, user_id: str, lesson_id: str) -> list[QuizResult]: ...
    async def list_for_course(self, course_id: str) -> list[QuizResult]: ...


class InMemoryQuizResultRepo:
    def __init__(self) -> None:
        self._results: list[QuizResult] = []

    async def add(self, result: QuizResult) -> None:
        self._results.append(result)

    async def list_for_lesson(self, user_id: str, lesson_id: str) -> list[QuizResult]:
        """All attempts by ``user_id`` on ``lesson_id``, oldest first."""
        return [
            r
            for r in self._results
            if r.user_id == user_id and r.lesson_id == lesson_id
        ]

    async def list_for_course(self, course_id: str) -> list[QuizResult]:
        return [r for r in self._results if r.course_id == course_id]
