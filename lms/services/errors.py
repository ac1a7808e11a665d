"""Domain errors raised by the service layer.

The API layer maps them onto HTTP status codes (see lms.api.errors);
services never raise HTTPException themselves.
"""

from __future__ import annotations


class LmsError(Exception):
    """Base for every domain error. ``str(err)`` is safe to show clients."""


class NotFoundError(LmsError):
    pass


class PermissionDeniedError(LmsError):
    pass


class ValidationError(LmsError):
    pass


class ConflictError(LmsError):
    pass
