"""Pydantic schema package for API contracts."""

from app.schemas.common import APIEnvelope, ErrorEnvelope, ReconciliationResponse
from app.schemas.leads import (
    LeadCreateRequest,
    LeadDeleteResponse,
    LeadResponse,
    LeadStageUpdateRequest,
    LeadUpdateRequest,
    LeadWriteResponse,
    PredictedFollowResponse,
)
from app.schemas.queue import DispatchResponse, QueueItemResponse, ScheduledCountResponse
from app.schemas.templates import (
    EligibleLeadsResponse,
    FollowUpRuleResponse,
    TemplateCreateRequest,
    TemplateResponse,
    TemplateUpdateRequest,
)

__all__ = [
    "APIEnvelope",
    "DispatchResponse",
    "EligibleLeadsResponse",
    "ErrorEnvelope",
    "FollowUpRuleResponse",
    "LeadCreateRequest",
    "LeadDeleteResponse",
    "LeadResponse",
    "LeadStageUpdateRequest",
    "LeadUpdateRequest",
    "LeadWriteResponse",
    "PredictedFollowResponse",
    "QueueItemResponse",
    "ReconciliationResponse",
    "ScheduledCountResponse",
    "TemplateCreateRequest",
    "TemplateResponse",
    "TemplateUpdateRequest",
]
