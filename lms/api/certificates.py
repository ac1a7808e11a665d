from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

from lms.api.dependencies import StoreDep, UserDep
from lms.api.errors import domain_errors
from lms.schemas.certificates import CertificateIn, CertificateOut, VerificationOut
from lms.services import certificate_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/certificates", tags=["certificates"])


@router.post("", response_model=CertificateOut, status_code=status.HTTP_201_CREATED)
async def issue_certificate(
    body: CertificateIn, response: Response, principal: UserDep, store: StoreDep
) -> CertificateOut:
    """Issue the caller's certificate for a completed course.

    201 with a new certificate, or 200 with the one issued earlier.
    """
    with domain_errors():
        certificate, created = await certificate_service.issue(
            store, principal.user_id, body.course_id
        )
    if not created:
        response.status_code = status.HTTP_200_OK
    return CertificateOut.from_domain(certificate)


@router.get("/user", response_model=list[CertificateOut])
async def my_certificates(principal: UserDep, store: StoreDep) -> list[CertificateOut]:
    certificates = await store.certificates.list_for_user(principal.user_id)
    return [CertificateOut.from_domain(c) for c in certificates]


@router.get("/course/{course_id}", response_model=CertificateOut)
async def my_certificate_for_course(
    course_id: str, principal: UserDep, store: StoreDep
) -> CertificateOut:
    with domain_errors():
        certificate = await certificate_service.get_for_course(
            store, principal.user_id, course_id
        )
    return CertificateOut.from_domain(certificate)


@router.get("/{certificate_id}", response_model=CertificateOut)
async def get_certificate(
    certificate_id: str, principal: UserDep, store: StoreDep
) -> CertificateOut:
    with domain_errors():
        certificate = await certificate_service.get_owned(store, principal, certificate_id)
    return CertificateOut.from_domain(certificate)


@router.get("/{certificate_id}/verify", response_model=VerificationOut)
async def verify_certificate(certificate_id: str, store: StoreDep) -> VerificationOut:
    """Public: anyone holding a certificate id or code can check it."""
    with domain_errors():
        verification = await certificate_service.verify(store, certificate_id)
    logger.info("Certificate verified id=%s", verification.certificate.id)
    return VerificationOut(
        certificate=CertificateOut.from_domain(verification.certificate),
        verified_at=verification.verified_at,
    )
