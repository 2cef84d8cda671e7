"""Queue schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.enums import LeadStage, QueueStatus


class QueueItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: int
    template_key: str
    stage: LeadStage
    delay_seconds: int
    scheduled_for: datetime
    status: QueueStatus
    sent_at: datetime | None = None
    canceled_at: datetime | None = None
    cancel_reason: str | None = None
    created_at: datetime


class ScheduledCountResponse(BaseModel):
    template_key: str
    scheduled: int


class DispatchResponse(BaseModel):
    action: str
    queue_item_id: int | None = None
    lead_id: int | None = None
    template_key: str | None = None
    sent_at: datetime | None = None
    wait_seconds: int | None = None
