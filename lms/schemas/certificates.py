from __future__ import annotations

from datetime import datetime

from lms.models.certificate import Certificate
from lms.schemas.base import CamelModel


class CertificateIn(CamelModel):
    course_id: str


class CertificateOut(CamelModel):
    id: str
    user_id: str
    course_id: str
    course_title: str = ""
    certificate_code: str
    issued_at: datetime

    @classmethod
    def from_domain(cls, certificate: Certificate) -> CertificateOut:
        return cls(
            id=certificate.id,
            user_id=certificate.user_id,
            course_id=certificate.course_id,
            course_title=certificate.course_title,
            certificate_code=certificate.certificate_code,
            issued_at=certificate.issued_at,
        )


class VerificationOut(CamelModel):
    valid: bool = True
    certificate: CertificateOut
    verified_at: datetime
