"""Structured logging helpers for scheduling and queue events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class LogContext:
    """Normalized context fields expected in structured logs."""

    lead_id: int | None = None
    template_key: str | None = None
    stage: str | None = None
    trace_id: str | None = None


def build_log_event(event: str, context: LogContext, **fields: Any) -> dict[str, Any]:
    """Build a normalized structured log payload.

    The payload is passed as ``extra`` to stdlib logging calls, so field names
    must not shadow ``LogRecord`` attributes such as ``created`` or ``name``.
    """
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "lead_id": context.lead_id,
        "template_key": context.template_key,
        "stage": context.stage,
        "trace_id": context.trace_id,
    }
    payload.update(fields)
    return payload
