"""Lead request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import LeadStage
from app.schemas.common import ReconciliationResponse


class LeadCreateRequest(BaseModel):
    # created_at is assigned by the server; clients cannot backdate it.
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=32)
    stage: LeadStage = LeadStage.CAPTURED_FORM
    source: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=5000)


class LeadUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=32)
    source: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=5000)
    silenced_until: datetime | None = None


class LeadStageUpdateRequest(BaseModel):
    stage: LeadStage


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    stage: LeadStage
    source: str | None = None
    notes: str | None = None
    last_interaction_at: datetime | None = None
    silenced_until: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None


class LeadWriteResponse(BaseModel):
    lead: LeadResponse
    queue: ReconciliationResponse


class LeadDeleteResponse(BaseModel):
    id: int
    canceled: int


class PredictedFollowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    template_key: str
    delay_label: str
    scheduled_raw: datetime
    scheduled_adjusted: datetime
    is_adjusted: bool
