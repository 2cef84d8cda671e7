from __future__ import annotations

import pytest

from app.models.enums import LeadStage
from app.scheduling.cancel_reasons import ExitedStage, LeadDeleted, StageChanged, parse_cancel_reason


def test_exited_stage_code_carries_both_stages():
    reason = ExitedStage(LeadStage.CHECKOUT_STARTED, LeadStage.SUBSCRIBED_ACTIVE)
    assert reason.code == "exited_checkout_started_to_subscribed_active"


@pytest.mark.parametrize(
    "reason",
    [
        StageChanged(),
        LeadDeleted(),
        ExitedStage(LeadStage.SUBSCRIBED_PAST_DUE, LeadStage.SUBSCRIBED_CANCELED),
        ExitedStage(LeadStage.CAPTURED_FORM, LeadStage.LOST),
    ],
)
def test_codes_parse_back_to_the_same_reason(reason):
    assert parse_cancel_reason(reason.code) == reason


def test_unknown_code_is_rejected():
    with pytest.raises(ValueError):
        parse_cancel_reason("exited_nowhere_to_lost")
    with pytest.raises(ValueError):
        parse_cancel_reason("because")
