"""Shared service-error mapping for API v1 route modules."""

from __future__ import annotations

from fastapi import HTTPException, status

from app.core.exceptions import DatabaseError, NotFoundError, ValidationError


def map_service_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND, str(exc)
    if isinstance(exc, DatabaseError):
        return status.HTTP_503_SERVICE_UNAVAILABLE, "Storage is unavailable."
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error."


def http_error(exc: Exception) -> HTTPException:
    code, detail = map_service_error(exc)
    return HTTPException(status_code=code, detail=detail)
