"""Template request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import LeadStage
from app.scheduling.followup_rules import RuleCatalog


class TemplateCreateRequest(BaseModel):
    stage: LeadStage
    delay_seconds: int = Field(ge=0)
    content: str = Field(min_length=1, max_length=5000)
    name: str | None = Field(default=None, max_length=255)
    active: bool = True
    catalog: RuleCatalog | None = None


class TemplateUpdateRequest(BaseModel):
    content: str | None = Field(default=None, min_length=1, max_length=5000)
    name: str | None = Field(default=None, max_length=255)
    active: bool | None = None


class TemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_key: str
    name: str | None = None
    stage: LeadStage
    delay_seconds: int
    content: str
    active: bool
    created_at: datetime
    updated_at: datetime | None = None


class FollowUpRuleResponse(BaseModel):
    delay_seconds: int
    label: str


class EligibleLeadsResponse(BaseModel):
    template_key: str
    count: int
    lead_ids: list[int]
