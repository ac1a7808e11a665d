"""PostgreSQL implementation of CertificateRepo."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import CertificateRow
from lms.models.certificate import Certificate


class PgCertificateRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, certificate_id: str) -> Certificate | None:
        row = await self._session.get(CertificateRow, certificate_id)
        return _row_to_certificate(row) if row is not None else None

    async def get_for_user_course(
        self, user_id: str, course_id: str
    ) -> Certificate | None:
        stmt = select(CertificateRow).where(
            CertificateRow.user_id == user_id, CertificateRow.course_id == course_id
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_certificate(row) if row is not None else None

    async def get_by_code(self, code: str) -> Certificate | None:
        stmt = select(CertificateRow).where(CertificateRow.certificate_code == code)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_certificate(row) if row is not None else None

    async def add(self, certificate: Certificate) -> None:
        """Insert; a concurrent issue for the same (user, course) surfaces
        as ValueError, matching the in-memory repo."""
        try:
            async with self._session.begin_nested():
                self._session.add(
                    CertificateRow(
                        id=certificate.id,
                        user_id=certificate.user_id,
                        course_id=certificate.course_id,
                        certificate_code=certificate.certificate_code,
                        issued_at=certificate.issued_at,
                        course_title=certificate.course_title,
                        instructor_id=certificate.instructor_id,
                    )
                )
        except IntegrityError as e:
            raise ValueError("certificate already issued") from e

    async def list_for_user(self, user_id: str) -> list[Certificate]:
        stmt = (
            select(CertificateRow)
            .where(CertificateRow.user_id == user_id)
            .order_by(CertificateRow.issued_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_certificate(r) for r in rows]

    async def list_for_course(self, course_id: str) -> list[Certificate]:
        stmt = (
            select(CertificateRow)
            .where(CertificateRow.course_id == course_id)
            .order_by(CertificateRow.issued_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_certificate(r) for r in rows]

    async def count(self) -> int:
        stmt = select(func.count()).select_from(CertificateRow)
        return (await self._session.execute(stmt)).scalar_one()


def _row_to_certificate(row: CertificateRow) -> Certificate:
    return Certificate(
        id=row.id,
        user_id=row.user_id,
        course_id=row.course_id,
        certificate_code=row.certificate_code,
        issued_at=row.issued_at,
        course_title=row.course_title or "",
        instructor_id=row.instructor_id or "",
    )
