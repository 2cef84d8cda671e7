"""Stage metadata and queue protection rules."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from app.models.enums import LeadStage


@dataclass(frozen=True)
class StageInfo:
    label: str
    description: str


STAGE_INFO: Mapping[LeadStage, StageInfo] = MappingProxyType(
    {
        LeadStage.CAPTURED_FORM: StageInfo("Lead captured", "Lead filled in the signup form"),
        LeadStage.LEAD_CAPTURED: StageInfo("Lead captured (WhatsApp)", "Lead arrived via WhatsApp, details pending"),
        LeadStage.CHECKOUT_STARTED: StageInfo("Checkout started", "Lead opened the checkout"),
        LeadStage.CONNECTED: StageInfo("Connected", "Lead is in an active support conversation"),
        LeadStage.PAYMENT_PENDING: StageInfo("Payment pending", "Payment created, awaiting confirmation"),
        LeadStage.SUBSCRIBED_ACTIVE: StageInfo("Active customer", "Customer confirmed joining the group"),
        LeadStage.SUBSCRIBED_ONBOARDING: StageInfo("Onboarding sent", "Group link sent, awaiting confirmation"),
        LeadStage.SUBSCRIBED_PAST_DUE: StageInfo("Subscription past due", "Payment is late"),
        LeadStage.SUBSCRIBED_CANCELED: StageInfo("Subscription canceled", "Subscription was canceled"),
        LeadStage.NURTURE: StageInfo("Nurture", "Receiving content nurture"),
        LeadStage.LOST: StageInfo("Lost", "Lead lost"),
        LeadStage.BLOCKED: StageInfo("Blocked", "Do not contact"),
    }
)

# Items bound to these stages survive reconciliation while the lead stays there.
PROTECTED_QUEUE_STAGES = frozenset({LeadStage.SUBSCRIBED_ACTIVE, LeadStage.NURTURE})


def is_protected_queue_item(item_stage: LeadStage | str, current_lead_stage: LeadStage | str) -> bool:
    item_stage = LeadStage(item_stage)
    return item_stage in PROTECTED_QUEUE_STAGES and item_stage == LeadStage(current_lead_stage)
