"""Translate service-layer errors into HTTP responses.

Endpoints wrap their service calls in ``with domain_errors():`` so each
LmsError subclass lands on one status code, with the error message as
the ``detail``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from lms.services.errors import (
    ConflictError,
    LmsError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[LmsError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
}


def status_for(err: LmsError) -> int:
    for cls in type(err).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return status.HTTP_400_BAD_REQUEST


@contextmanager
def domain_errors() -> Iterator[None]:
    try:
        yield
    except LmsError as e:
        code = status_for(e)
        logger.warning("Request rejected status=%d: %s", code, e)
        raise HTTPException(status_code=code, detail=str(e)) from None
