"""Eligibility and fire-time prediction for follow-up templates.

Pure functions only: nothing here touches the database, so previews can be
computed as often as the UI likes without creating queue rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Union

from app.models.enums import LeadStage
from app.models.lead import Lead
from app.models.message_template import MessageTemplate
from app.scheduling.business_hours import BusinessHoursWindow, adjust_to_business_hours, default_window
from app.scheduling.followup_rules import get_delay_label


@dataclass(frozen=True)
class LeadSnapshot:
    """Detached view of a lead, e.g. as it will look after a stage move."""

    id: int | None
    name: str
    stage: LeadStage
    created_at: datetime

    @classmethod
    def of(cls, lead: Lead, stage: LeadStage | str | None = None) -> "LeadSnapshot":
        return cls(
            id=lead.id,
            name=lead.name,
            stage=LeadStage(stage if stage is not None else lead.stage),
            created_at=lead.created_at,
        )


LeadLike = Union[Lead, LeadSnapshot]


@dataclass(frozen=True)
class PredictedFollow:
    template_key: str
    delay_label: str
    scheduled_raw: datetime
    scheduled_adjusted: datetime
    is_adjusted: bool


def is_eligible(template: MessageTemplate, lead: LeadLike) -> bool:
    """A lead in stage S is only ever eligible for active templates declared for S."""
    return bool(template.active) and LeadStage(template.stage) == LeadStage(lead.stage)


def reference_timestamp(lead: LeadLike) -> datetime:
    return lead.created_at


def predict_follows(
    lead: LeadLike,
    templates: Iterable[MessageTemplate],
    window: BusinessHoursWindow | None = None,
) -> list[PredictedFollow]:
    """Fire times per eligible template, read in the business timezone by default."""
    eligible = [template for template in templates if is_eligible(template, lead)]
    if not eligible:
        return []

    window = window or default_window()
    anchor = reference_timestamp(lead)
    predicted = []
    for template in eligible:
        raw = anchor + timedelta(seconds=template.delay_seconds)
        adjusted = adjust_to_business_hours(raw, window)
        predicted.append(
            PredictedFollow(
                template_key=template.template_key,
                delay_label=get_delay_label(template.stage, template.delay_seconds),
                scheduled_raw=raw,
                scheduled_adjusted=adjusted,
                is_adjusted=raw != adjusted,
            )
        )
    predicted.sort(key=lambda follow: (follow.scheduled_adjusted, follow.template_key))
    return predicted


def get_eligible_leads(template: MessageTemplate, leads: Iterable[LeadLike]) -> list[LeadLike]:
    stage = LeadStage(template.stage)
    return [lead for lead in leads if LeadStage(lead.stage) == stage]


def count_eligible_leads(template: MessageTemplate, leads: Iterable[LeadLike]) -> int:
    return len(get_eligible_leads(template, leads))


def render_message(template: MessageTemplate, lead: LeadLike) -> str:
    """Fill the ``{name}`` placeholder with the lead's first name."""
    first_name = (lead.name or "").strip().split(" ")[0]
    return template.content.replace("{name}", first_name)
