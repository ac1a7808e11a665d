"""Certificate issuance and lookup.

Issuing is idempotent per (user, course): the first call for a completed
enrollment creates the certificate, every later call (including one that
loses a race against a concurrent issue) returns that same record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from lms.core.metrics import CERTIFICATES_ISSUED
from lms.models.certificate import Certificate
from lms.models.principal import Principal
from lms.models.progress import COMPLETED
from lms.repos.store import Store
from lms.services.errors import NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Verification:
    certificate: Certificate
    verified_at: datetime


async def issue(store: Store, user_id: str, course_id: str) -> tuple[Certificate, bool]:
    """Return ``(certificate, created)``.

    Raises NotFoundError for an unknown course and PermissionDeniedError
    when the enrollment has not been completed yet.
    """
    existing = await store.certificates.get_for_user_course(user_id, course_id)
    if existing is not None:
        return existing, False

    course = await store.courses.get(course_id)
    if course is None:
        raise NotFoundError("Course not found")

    progress = await store.progress.get(user_id, course_id)
    if progress is None or progress.status != COMPLETED:
        logger.warning(
            "Certificate refused: user=%s course=%s not completed", user_id, course_id
        )
        raise PermissionDeniedError("Course not completed")

    certificate = Certificate.new(
        user_id=user_id,
        course_id=course_id,
        course_title=course.title,
        instructor_id=course.instructor_id,
    )
    try:
        await store.certificates.add(certificate)
    except ValueError:
        winner = await store.certificates.get_for_user_course(user_id, course_id)
        if winner is None:
            raise
        return winner, False

    CERTIFICATES_ISSUED.inc()
    logger.info(
        "Certificate issued id=%s user=%s course=%s",
        certificate.id,
        user_id,
        course_id,
        extra={"user_id": user_id, "course_id": course_id},
    )
    return certificate, True


async def get_for_course(store: Store, user_id: str, course_id: str) -> Certificate:
    certificate = await store.certificates.get_for_user_course(user_id, course_id)
    if certificate is None:
        raise NotFoundError("Certificate not found")
    return certificate


async def get_owned(store: Store, principal: Principal, certificate_id: str) -> Certificate:
    certificate = await store.certificates.get(certificate_id)
    if certificate is None:
        raise NotFoundError("Certificate not found")
    if certificate.user_id != principal.user_id and not principal.is_admin():
        logger.warning(
            "Certificate access denied: user=%s certificate=%s",
            principal.user_id,
            certificate_id,
        )
        raise PermissionDeniedError("Not your certificate")
    return certificate


async def verify(store: Store, id_or_code: str) -> Verification:
    """Public check, by certificate id or by certificate code."""
    certificate = await store.certificates.get(id_or_code)
    if certificate is None:
        certificate = await store.certificates.get_by_code(id_or_code)
    if certificate is None:
        raise NotFoundError("Certificate not found")
    return Verification(certificate=certificate, verified_at=datetime.now(UTC))
