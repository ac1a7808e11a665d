"""HTTP client for the progress endpoints.

The caller owns the ``httpx.AsyncClient`` (base URL, transport, pooling)
and hands it in together with the learner's bearer token; nothing here is
a module-level singleton.

Every failure is raised as a RemoteProgressError subclass:

  RemoteTimeoutError     the request timed out
  RemoteNotFoundError    404, the endpoint or record does not exist
  RemoteValidationError  any other 4xx; ``message`` is the server's detail
  RemoteServiceError     5xx, transport failure, or a body that does not
                         match the documented schema
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from lms.schemas.certificates import CertificateIn, CertificateOut
from lms.schemas.progress import CourseProgressOut, ProgressUpdateIn
from lms.schemas.quiz import QuizSubmitIn, QuizSubmitOut

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_TIMEOUT = 10.0


class RemoteProgressError(Exception):
    pass


class RemoteTimeoutError(RemoteProgressError):
    pass


class RemoteNotFoundError(RemoteProgressError):
    pass


class RemoteValidationError(RemoteProgressError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class RemoteServiceError(RemoteProgressError):
    pass


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return str(body)


class ProgressApiClient:
    def __init__(self, http: httpx.AsyncClient, *, token: str | None = None) -> None:
        self._http = http
        self._token = token

    def _headers(self) -> dict[str, str]:
        if self._token is None:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Any:
        try:
            response = await self._http.request(
                method, path, json=json, headers=self._headers(), timeout=timeout
            )
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(f"{method} {path} timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise RemoteServiceError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise RemoteNotFoundError(f"{method} {path}: {_detail(response)}")
        if 400 <= response.status_code < 500:
            raise RemoteValidationError(response.status_code, _detail(response))
        if response.status_code >= 500:
            raise RemoteServiceError(
                f"{method} {path} answered {response.status_code}: {_detail(response)}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteServiceError(f"{method} {path} returned a non-JSON body") from e

    @staticmethod
    def _parse(model: type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except SchemaError as e:
            logger.error("Rejected %s payload: %s", model.__name__, e)
            raise RemoteServiceError(f"malformed {model.__name__} payload") from e

    async def get_progress(
        self, course_id: str, *, timeout: float = DEFAULT_TIMEOUT
    ) -> CourseProgressOut:
        payload = await self._request("GET", f"/progress/courses/{course_id}", timeout=timeout)
        return self._parse(CourseProgressOut, payload)

    async def update_lesson_progress(
        self,
        course_id: str,
        lesson_id: str,
        *,
        completed: bool,
        video_timestamp: float,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> CourseProgressOut:
        body = ProgressUpdateIn(completed=completed, video_timestamp=video_timestamp)
        payload = await self._request(
            "POST",
            f"/progress/courses/{course_id}/lessons/{lesson_id}",
            json=body.to_wire(),
            timeout=timeout,
        )
        return self._parse(CourseProgressOut, payload)

    async def submit_quiz(
        self,
        lesson_id: str,
        answers: dict[int, int],
        *,
        time_taken: int = 0,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> QuizSubmitOut:
        body = QuizSubmitIn(answers=answers, time_taken=time_taken)
        payload = await self._request(
            "POST", f"/quiz/{lesson_id}/submit", json=body.to_wire(), timeout=timeout
        )
        return self._parse(QuizSubmitOut, payload)

    async def issue_certificate(
        self, course_id: str, *, timeout: float = DEFAULT_TIMEOUT
    ) -> CertificateOut:
        body = CertificateIn(course_id=course_id)
        payload = await self._request("POST", "/certificates", json=body.to_wire(), timeout=timeout)
        return self._parse(CertificateOut, payload)
