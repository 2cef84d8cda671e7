from __future__ import annotations

import pytest

from app.models.enums import LeadStage
from app.scheduling.followup_rules import (
    DAY,
    MINUTE,
    RULE_TABLE,
    RuleCatalog,
    format_delay_seconds,
    generate_template_key,
    get_delay_label,
    is_valid_followup,
)


def test_checkout_started_accepts_thirty_minutes_but_not_arbitrary_offsets():
    assert is_valid_followup(LeadStage.CHECKOUT_STARTED, 30 * MINUTE) is True
    assert is_valid_followup(LeadStage.CHECKOUT_STARTED, 999) is False


def test_stage_without_rules_rejects_every_delay():
    assert RULE_TABLE.rules_for(LeadStage.LOST) == ()
    assert is_valid_followup(LeadStage.LOST, 2 * DAY) is False
    assert is_valid_followup("not_a_stage", 0) is False


def test_catalog_filter_applies_to_validation():
    assert RULE_TABLE.is_valid(LeadStage.SUBSCRIBED_ACTIVE, 0, RuleCatalog.ONBOARDING) is True
    assert RULE_TABLE.is_valid(LeadStage.SUBSCRIBED_ACTIVE, 0, RuleCatalog.SALES) is False
    assert RULE_TABLE.catalog_of(LeadStage.CAPTURED_FORM) == RuleCatalog.SALES


def test_stage_listing_per_catalog():
    assert set(RULE_TABLE.stages(RuleCatalog.SALES)) == {LeadStage.CAPTURED_FORM, LeadStage.CHECKOUT_STARTED}
    assert RULE_TABLE.stages(RuleCatalog.ONBOARDING) == [LeadStage.SUBSCRIBED_ACTIVE]
    assert len(RULE_TABLE.stages()) == 3


def test_template_key_format():
    assert generate_template_key(LeadStage.CHECKOUT_STARTED, 1800) == "checkout_started_1800"
    assert generate_template_key("subscribed_active", 0) == "subscribed_active_0"


@pytest.mark.parametrize(
    "stage, delay, label",
    [
        (LeadStage.CHECKOUT_STARTED, 1800, "+30 minutes"),
        (LeadStage.CAPTURED_FORM, 7 * DAY, "D+7"),
        (LeadStage.SUBSCRIBED_ACTIVE, 0, "Immediate"),
        (LeadStage.LOST, 3 * 3600, "3 hour(s)"),
    ],
)
def test_delay_labels(stage, delay, label):
    assert get_delay_label(stage, delay) == label


def test_format_delay_seconds_fallbacks():
    assert format_delay_seconds(0) == "Immediate"
    assert format_delay_seconds(45) == "45 seconds"
    assert format_delay_seconds(600) == "10 minute(s)"
    assert format_delay_seconds(3 * DAY) == "D+3"


def test_rule_table_cannot_be_mutated():
    catalogs = RULE_TABLE.as_dict()
    catalogs["sales"]["captured_form"].append({"delay_seconds": 1, "label": "x"})

    assert is_valid_followup(LeadStage.CAPTURED_FORM, 1) is False
    with pytest.raises(TypeError):
        RULE_TABLE._rules[LeadStage.LOST] = ()
