"""Common schema module."""

from __future__ import annotations

from pydantic import BaseModel


class APIEnvelope(BaseModel):
    status: str = "ok"
    message: str | None = None


class ErrorEnvelope(BaseModel):
    status: str = "error"
    error_code: str
    detail: str


class ReconciliationResponse(BaseModel):
    canceled: int = 0
    created: int = 0
    skipped: int = 0
    complete: bool = True
    errors: list[str] = []
