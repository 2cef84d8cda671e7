"""Canonical follow-up rules.

The rule table is fixed at import time. Templates may only bind to a
(stage, delay) pair listed here, and nothing at runtime can add stages or
delays. Only a template's ``content`` and ``active`` flag are editable.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from app.models.enums import LeadStage

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class RuleCatalog(str, enum.Enum):
    SALES = "sales"
    ONBOARDING = "onboarding"


@dataclass(frozen=True)
class FollowUpRule:
    delay_seconds: int
    label: str


_DAY_STEPS = (
    FollowUpRule(2 * DAY, "D+2"),
    FollowUpRule(4 * DAY, "D+4"),
    FollowUpRule(7 * DAY, "D+7"),
    FollowUpRule(15 * DAY, "D+15"),
)

SALES_FOLLOWUPS: Mapping[LeadStage, tuple[FollowUpRule, ...]] = MappingProxyType(
    {
        LeadStage.CAPTURED_FORM: _DAY_STEPS,
        LeadStage.CHECKOUT_STARTED: (FollowUpRule(30 * MINUTE, "+30 minutes"), *_DAY_STEPS),
    }
)

ONBOARDING_FOLLOWUPS: Mapping[LeadStage, tuple[FollowUpRule, ...]] = MappingProxyType(
    {
        LeadStage.SUBSCRIBED_ACTIVE: (
            FollowUpRule(0, "Immediate"),
            FollowUpRule(MINUTE, "+1 minute"),
            FollowUpRule(5 * MINUTE, "+5 minutes"),
        ),
    }
)


def format_delay_seconds(seconds: int) -> str:
    """Human label for an arbitrary delay."""
    if seconds == 0:
        return "Immediate"
    if seconds < MINUTE:
        return f"{seconds} seconds"
    if seconds < HOUR:
        return f"{seconds // MINUTE} minute(s)"
    if seconds < DAY:
        return f"{seconds // HOUR} hour(s)"
    return f"D+{seconds // DAY}"


class FollowUpRuleTable:
    """Read-only view over the sales and onboarding catalogs keyed by stage."""

    def __init__(self, catalogs: Mapping[RuleCatalog, Mapping[LeadStage, tuple[FollowUpRule, ...]]]) -> None:
        by_stage: dict[LeadStage, tuple[FollowUpRule, ...]] = {}
        catalog_of: dict[LeadStage, RuleCatalog] = {}
        for catalog, rules in catalogs.items():
            for stage, entries in rules.items():
                if stage in by_stage:
                    raise ValueError(f"Stage {stage.value} declared by more than one catalog")
                by_stage[stage] = tuple(entries)
                catalog_of[stage] = catalog
        self._catalogs = MappingProxyType(dict(catalogs))
        self._rules = MappingProxyType(by_stage)
        self._catalog_of = MappingProxyType(catalog_of)

    def stages(self, catalog: RuleCatalog | None = None) -> list[LeadStage]:
        if catalog is None:
            return list(self._rules)
        return list(self._catalogs.get(RuleCatalog(catalog), {}))

    def catalog_of(self, stage: LeadStage | str) -> RuleCatalog | None:
        return self._catalog_of.get(LeadStage(stage))

    def rules_for(self, stage: LeadStage | str) -> tuple[FollowUpRule, ...]:
        return self._rules.get(LeadStage(stage), ())

    def is_valid(self, stage: LeadStage | str, delay_seconds: int, catalog: RuleCatalog | None = None) -> bool:
        """True iff the stage is allowed (in ``catalog`` if given) and lists the delay."""
        try:
            resolved = LeadStage(stage)
        except ValueError:
            return False
        if resolved not in self._rules:
            return False
        if catalog is not None and self._catalog_of[resolved] != RuleCatalog(catalog):
            return False
        return any(rule.delay_seconds == delay_seconds for rule in self._rules[resolved])

    def delay_label(self, stage: LeadStage | str, delay_seconds: int) -> str:
        for rule in self.rules_for(stage):
            if rule.delay_seconds == delay_seconds:
                return rule.label
        return format_delay_seconds(delay_seconds)

    def as_dict(self) -> dict[str, dict[str, list[dict[str, int | str]]]]:
        return {
            catalog.value: {
                stage.value: [{"delay_seconds": r.delay_seconds, "label": r.label} for r in rules]
                for stage, rules in stage_rules.items()
            }
            for catalog, stage_rules in self._catalogs.items()
        }


RULE_TABLE = FollowUpRuleTable(
    {
        RuleCatalog.SALES: SALES_FOLLOWUPS,
        RuleCatalog.ONBOARDING: ONBOARDING_FOLLOWUPS,
    }
)


def generate_template_key(stage: LeadStage | str, delay_seconds: int) -> str:
    """Stable template key, e.g. ``checkout_started_1800``."""
    return f"{LeadStage(stage).value}_{int(delay_seconds)}"


def is_valid_followup(stage: LeadStage | str, delay_seconds: int) -> bool:
    return RULE_TABLE.is_valid(stage, delay_seconds)


def get_delay_label(stage: LeadStage | str, delay_seconds: int) -> str:
    return RULE_TABLE.delay_label(stage, delay_seconds)
