"""Cancellation reasons recorded on queue items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from app.models.enums import LeadStage


@dataclass(frozen=True)
class StageChanged:
    code = "stage_changed"


@dataclass(frozen=True)
class ExitedStage:
    from_stage: LeadStage
    to_stage: LeadStage

    @property
    def code(self) -> str:
        return f"exited_{LeadStage(self.from_stage).value}_to_{LeadStage(self.to_stage).value}"


@dataclass(frozen=True)
class LeadDeleted:
    code = "lead_deleted"


CancelReason = Union[StageChanged, ExitedStage, LeadDeleted]

_KNOWN_STAGES = {stage.value for stage in LeadStage}
_STAGE_VALUES = sorted(_KNOWN_STAGES, key=len, reverse=True)


def parse_cancel_reason(code: str) -> CancelReason:
    """Rebuild the reason from its stored code; unknown codes raise ValueError."""
    if code == StageChanged.code:
        return StageChanged()
    if code == LeadDeleted.code:
        return LeadDeleted()
    if code.startswith("exited_"):
        # Stage values contain underscores, so match known values instead of splitting.
        rest = code[len("exited_"):]
        for from_value in _STAGE_VALUES:
            prefix = f"{from_value}_to_"
            if rest.startswith(prefix) and rest[len(prefix):] in _KNOWN_STAGES:
                return ExitedStage(LeadStage(from_value), LeadStage(rest[len(prefix):]))
    raise ValueError(f"Unknown cancel reason: {code}")
