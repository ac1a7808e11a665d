from __future__ import annotations

from typing import Protocol

from lms.models.certificate import Certificate


class CertificateRepo(Protocol):
    async def get(self, certificate_id: str) -> Certificate | None: ...
    async def get_for_user_course(
        self, user_id: str, course_id: str
    ) -> Certificate | None: ...
    async def get_by_code(self, code: str) -> Certificate | None: ...
    async def add(self, certificate: Certificate) -> None: ...
    async def list_for_user(self, user_id: str) -> list[Certificate]: ...
    async def list_for_course(self, course_id: str) -> list[Certificate]: ...
    async def count(self) -> int: ...


class InMemoryCertificateRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Certificate] = {}
        self._by_key: dict[tuple[str, str], Certificate] = {}

    async def get(self, certificate_id: str) -> Certificate | None:
        return self._by_id.get(certificate_id)

    async def get_for_user_course(
        self, user_id: str, course_id: str
    ) -> Certificate | None:
        return self._by_key.get((user_id, course_id))

    async def get_by_code(self, code: str) -> Certificate | None:
        for cert in self._by_id.values():
            if cert.certificate_code == code:
                return cert
        return None

    async def add(self, certificate: Certificate) -> None:
        key = (certificate.user_id, certificate.course_id)
        if key in self._by_key:
            raise ValueError("certificate already issued")
        self._by_id[certificate.id] = certificate
        self._by_key[key] = certificate

    async def list_for_user(self, user_id: str) -> list[Certificate]:
        certs = [c for c in self._by_id.values() if c.user_id == user_id]
        return sorted(certs, key=lambda c: c.issued_at, reverse=True)

    async def list_for_course(self, course_id: str) -> list[Certificate]:
        certs = [c for c in self._by_id.values() if c.course_id == course_id]
        return sorted(certs, key=lambda c: c.issued_at, reverse=True)

    async def count(self) -> int:
        return len(self._by_id)
