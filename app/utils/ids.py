"""Identifier generation helpers."""

from __future__ import annotations

import uuid


def new_trace_id() -> str:
    """Correlates the log lines of one reconciliation pass."""
    return uuid.uuid4().hex
