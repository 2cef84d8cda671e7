from __future__ import annotations

from datetime import datetime

from app.models.enums import LeadStage
from app.models.message_template import MessageTemplate
from app.scheduling.business_hours import BUSINESS_HOURS
from app.scheduling.prediction import (
    LeadSnapshot,
    count_eligible_leads,
    get_eligible_leads,
    is_eligible,
    predict_follows,
    render_message,
)


def _template(stage: LeadStage, delay: int, active: bool = True, content: str = "Hi {name}") -> MessageTemplate:
    return MessageTemplate(
        template_key=f"{stage.value}_{delay}",
        stage=stage,
        delay_seconds=delay,
        content=content,
        active=active,
    )


def _lead(stage: LeadStage, created_at: datetime, lead_id: int = 1, name: str = "Maria Silva") -> LeadSnapshot:
    return LeadSnapshot(id=lead_id, name=name, stage=stage, created_at=created_at)


def test_saturday_night_checkout_follow_moves_to_monday_opening():
    lead = _lead(LeadStage.CHECKOUT_STARTED, datetime(2026, 10, 17, 21, 0))
    [follow] = predict_follows(lead, [_template(LeadStage.CHECKOUT_STARTED, 1800)], BUSINESS_HOURS)

    assert follow.scheduled_raw == datetime(2026, 10, 17, 21, 30)
    assert follow.scheduled_adjusted == datetime(2026, 10, 19, 9, 0)
    assert follow.is_adjusted is True
    assert follow.delay_label == "+30 minutes"


def test_immediate_onboarding_inside_window_is_not_adjusted():
    lead = _lead(LeadStage.SUBSCRIBED_ACTIVE, datetime(2026, 10, 20, 10, 0))
    [follow] = predict_follows(lead, [_template(LeadStage.SUBSCRIBED_ACTIVE, 0)], BUSINESS_HOURS)

    assert follow.scheduled_adjusted == datetime(2026, 10, 20, 10, 0)
    assert follow.is_adjusted is False


def test_sunday_immediate_follow_waits_for_monday():
    lead = _lead(LeadStage.SUBSCRIBED_ACTIVE, datetime(2026, 10, 18, 14, 0))
    [follow] = predict_follows(lead, [_template(LeadStage.SUBSCRIBED_ACTIVE, 0)], BUSINESS_HOURS)

    assert follow.scheduled_raw == datetime(2026, 10, 18, 14, 0)
    assert follow.scheduled_adjusted == datetime(2026, 10, 19, 9, 0)


def test_only_active_templates_of_the_lead_stage_are_predicted():
    lead = _lead(LeadStage.CAPTURED_FORM, datetime(2026, 10, 20, 10, 0))
    templates = [
        _template(LeadStage.CAPTURED_FORM, 2 * 86400),
        _template(LeadStage.CAPTURED_FORM, 4 * 86400, active=False),
        _template(LeadStage.CHECKOUT_STARTED, 1800),
    ]

    follows = predict_follows(lead, templates, BUSINESS_HOURS)

    assert [follow.template_key for follow in follows] == ["captured_form_172800"]
    assert is_eligible(templates[1], lead) is False
    assert predict_follows(_lead(LeadStage.LOST, datetime(2026, 10, 20, 10)), templates, BUSINESS_HOURS) == []


def test_predictions_are_sorted_by_adjusted_time_then_key():
    lead = _lead(LeadStage.SUBSCRIBED_ACTIVE, datetime(2026, 10, 18, 14, 0))
    templates = [
        _template(LeadStage.SUBSCRIBED_ACTIVE, 300),
        _template(LeadStage.SUBSCRIBED_ACTIVE, 60),
        _template(LeadStage.SUBSCRIBED_ACTIVE, 0),
    ]

    follows = predict_follows(lead, templates, BUSINESS_HOURS)

    # All three collapse onto Monday 09:00, so the key breaks the tie.
    assert [follow.scheduled_adjusted for follow in follows] == [datetime(2026, 10, 19, 9, 0)] * 3
    assert [follow.template_key for follow in follows] == [
        "subscribed_active_0",
        "subscribed_active_300",
        "subscribed_active_60",
    ]


def test_eligible_leads_filter_on_stage():
    template = _template(LeadStage.CHECKOUT_STARTED, 1800)
    leads = [
        _lead(LeadStage.CHECKOUT_STARTED, datetime(2026, 10, 20, 10), lead_id=1),
        _lead(LeadStage.CAPTURED_FORM, datetime(2026, 10, 20, 10), lead_id=2),
        _lead(LeadStage.CHECKOUT_STARTED, datetime(2026, 10, 20, 11), lead_id=3),
    ]

    assert [lead.id for lead in get_eligible_leads(template, leads)] == [1, 3]
    assert count_eligible_leads(template, leads) == 2


def test_render_message_uses_first_name():
    lead = _lead(LeadStage.CHECKOUT_STARTED, datetime(2026, 10, 20, 10))
    assert render_message(_template(LeadStage.CHECKOUT_STARTED, 1800), lead) == "Hi Maria"
