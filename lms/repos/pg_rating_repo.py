"""PostgreSQL implementation of RatingRepo."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import RatingRow
from lms.models.rating import Rating


class PgRatingRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_user_course(self, user_id: str, course_id: str) -> Rating | None:
        stmt = select(RatingRow).where(
            RatingRow.user_id == user_id, RatingRow.course_id == course_id
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_rating(row) if row is not None else None

    async def upsert(self, rating: Rating) -> None:
        stmt = insert(RatingRow).values(
            id=rating.id,
            user_id=rating.user_id,
            course_id=rating.course_id,
            rating=rating.rating,
            review=rating.review,
            created_at=rating.created_at,
            updated_at=rating.updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "course_id"],
            set_={
                "rating": rating.rating,
                "review": rating.review,
                "updated_at": rating.updated_at,
            },
        )
        await self._session.execute(stmt)

    async def delete(self, user_id: str, course_id: str) -> bool:
        stmt = delete(RatingRow).where(
            RatingRow.user_id == user_id, RatingRow.course_id == course_id
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def list_for_course(self, course_id: str) -> list[Rating]:
        stmt = (
            select(RatingRow)
            .where(RatingRow.course_id == course_id)
            .order_by(RatingRow.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_rating(r) for r in rows]


def _row_to_rating(row: RatingRow) -> Rating:
    return Rating(
        id=row.id,
        user_id=row.user_id,
        course_id=row.course_id,
        rating=row.rating,
        review=row.review or "",
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
