from __future__ import annotations

from typing import Protocol

from lms.models.rating import Rating


class RatingRepo(Protocol):
    async def get_for_user_course(self, user_id: str, course_id: str) -> Rating | None: ...
    async def upsert(self, rating: Rating) -> None: ...
    async def delete(self, user_id: str, course_id: str) -> bool: ...
    async def list_for_course(self, course_id: str) -> list[Rating]: ...


class InMemoryRatingRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[str, str], Rating] = {}

    async def get_for_user_course(self, user_id: str, course_id: str) -> Rating | None:
        return self._by_key.get((user_id, course_id))

    async def upsert(self, rating: Rating) -> None:
        self._by_key[(rating.user_id, rating.course_id)] = rating

    async def delete(self, user_id: str, course_id: str) -> bool:
        return self._by_key.pop((user_id, course_id), None) is not None

    async def list_for_course(self, course_id: str) -> list[Rating]:
        """Newest first."""
        ratings = [r for (_, cid), r in self._by_key.items() if cid == course_id]
        return sorted(ratings, key=lambda r: r.created_at, reverse=True)
