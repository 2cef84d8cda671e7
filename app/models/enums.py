"""Canonical enum values for the funnel schema."""

from __future__ import annotations

import enum


class LeadStage(str, enum.Enum):
    CAPTURED_FORM = "captured_form"
    LEAD_CAPTURED = "lead_captured"
    CHECKOUT_STARTED = "checkout_started"
    CONNECTED = "connected"
    PAYMENT_PENDING = "payment_pending"
    SUBSCRIBED_ACTIVE = "subscribed_active"
    SUBSCRIBED_ONBOARDING = "subscribed_onboarding"
    SUBSCRIBED_PAST_DUE = "subscribed_past_due"
    SUBSCRIBED_CANCELED = "subscribed_canceled"
    NURTURE = "nurture"
    LOST = "lost"
    BLOCKED = "blocked"


class QueueStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CANCELED = "canceled"
    SENT = "sent"


class EventType(str, enum.Enum):
    LEAD_CREATED = "lead_created"
    STAGE_CHANGED = "stage_changed"
    LEAD_DELETED = "lead_deleted"
    FOLLOW_SENT = "follow_sent"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values (not member names) so raw SQL filters stay readable."""
    return [member.value for member in enum_cls]
