"""Deterministic sanitizers used before lead and template persistence."""

from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")
_EMAIL = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence/display."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    cleaned = cleaned[:max_len]
    return cleaned


def normalize_phone(value: str | None) -> str | None:
    """Keep digits only; an input without digits normalizes to None."""
    if value is None:
        return None
    digits = _NON_DIGITS.sub("", value)
    return digits or None


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL.match(value.strip()))
