"""
Error taxonomy shared by services and dependencies.

Every error is an HTTPException so FastAPI renders it as ``{"detail": ...}``
with the matching status code. UpstreamError never carries the storage
failure to the caller; the original exception is logged instead.
"""

import logging
from typing import Optional

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class GoSaveError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class ValidationError(GoSaveError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class AuthenticationError(GoSaveError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class AuthorizationError(GoSaveError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions"


class NotFoundError(GoSaveError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(GoSaveError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class UpstreamError(GoSaveError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(detail)
        if cause is not None:
            logger.error(f"Upstream failure ({self.detail}): {cause!r}")


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


def is_unique_violation(exc: BaseException) -> bool:
    """True if a storage error is a duplicate-key violation (Postgres 23505)."""
    code = getattr(exc, "code", None)
    if code == "23505":
        return True
    message = str(exc).lower()
    return "duplicate key" in message or "already exists" in message
