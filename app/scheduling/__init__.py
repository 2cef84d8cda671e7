"""Follow-up scheduling core: calendar, rule table and prediction."""

from app.scheduling.business_hours import (
    BUSINESS_HOURS,
    BusinessHoursWindow,
    adjust_to_business_hours,
    default_window,
    is_within_business_hours,
)
from app.scheduling.cancel_reasons import CancelReason, ExitedStage, LeadDeleted, StageChanged, parse_cancel_reason
from app.scheduling.followup_rules import (
    RULE_TABLE,
    FollowUpRule,
    RuleCatalog,
    generate_template_key,
    get_delay_label,
    is_valid_followup,
)
from app.scheduling.prediction import (
    LeadSnapshot,
    PredictedFollow,
    count_eligible_leads,
    get_eligible_leads,
    predict_follows,
    render_message,
)
from app.scheduling.stages import PROTECTED_QUEUE_STAGES, STAGE_INFO, is_protected_queue_item

__all__ = [
    "BUSINESS_HOURS",
    "BusinessHoursWindow",
    "CancelReason",
    "ExitedStage",
    "FollowUpRule",
    "LeadDeleted",
    "LeadSnapshot",
    "PROTECTED_QUEUE_STAGES",
    "PredictedFollow",
    "RULE_TABLE",
    "RuleCatalog",
    "STAGE_INFO",
    "StageChanged",
    "adjust_to_business_hours",
    "count_eligible_leads",
    "default_window",
    "generate_template_key",
    "get_delay_label",
    "get_eligible_leads",
    "is_protected_queue_item",
    "is_valid_followup",
    "parse_cancel_reason",
    "predict_follows",
    "render_message",
]
