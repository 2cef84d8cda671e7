"""Lead lifecycle service: creation, stage moves and soft deletion."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import LogContext, build_log_event
from app.models.base import as_utc, utcnow
from app.models.enums import EventType, LeadStage
from app.models.lead import Lead
from app.models.lead_event import LeadEvent
from app.models.message_template import MessageTemplate
from app.scheduling.business_hours import BusinessHoursWindow
from app.services.base_service import BaseService
from app.services.queue_service import QueueService, ReconciliationResult
from app.utils.validators import is_valid_email, normalize_phone, sanitize_text

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "email", "phone", "source", "notes", "last_interaction_at", "silenced_until"})


def _coerce_stage(value: LeadStage | str) -> LeadStage:
    try:
        return LeadStage(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown stage: {value}") from exc


class LeadService(BaseService):
    """Service for lead CRUD; every stage move reconciles the follow-up queue."""

    def __init__(
        self,
        db: Session | None = None,
        queue: QueueService | None = None,
        window: BusinessHoursWindow | None = None,
    ) -> None:
        super().__init__(db)
        self.queue = queue or QueueService(db=self.db, window=window)

    def create_lead(self, data: dict[str, Any]) -> tuple[Lead, ReconciliationResult]:
        payload = self._clean(data)
        if not payload.get("name"):
            raise ValidationError("Lead name is required.")

        stage = _coerce_stage(data.get("stage") or LeadStage.CAPTURED_FORM)
        lead = Lead(stage=stage, **payload)
        created_at = data.get("created_at")
        if created_at is not None:
            lead.created_at = as_utc(created_at)
        lead.events.append(LeadEvent(type=EventType.LEAD_CREATED, payload={"stage": stage.value}))

        self.db.add(lead)
        self.commit()
        self.db.refresh(lead)
        logger.info(
            "lead.created",
            extra=build_log_event("lead.created", LogContext(lead_id=lead.id, stage=stage.value)),
        )

        result = self.queue.enqueue_followups(lead)
        return lead, result

    def get_lead(self, lead_id: int) -> Lead:
        lead = self.db.query(Lead).filter(Lead.id == lead_id, Lead.deleted_at.is_(None)).first()
        if lead is None:
            raise NotFoundError(f"Lead not found: {lead_id}")
        return lead

    def list_leads(self, stage: LeadStage | str | None = None) -> list[Lead]:
        query = self.db.query(Lead).filter(Lead.deleted_at.is_(None))
        if stage is not None:
            query = query.filter(Lead.stage == _coerce_stage(stage))
        return query.order_by(Lead.created_at.desc(), Lead.id.desc()).all()

    def count_by_stage(self) -> dict[str, int]:
        counts = {stage.value: 0 for stage in LeadStage}
        rows = (
            self.db.query(Lead.stage, func.count(Lead.id))
            .filter(Lead.deleted_at.is_(None))
            .group_by(Lead.stage)
            .all()
        )
        for stage, count in rows:
            counts[LeadStage(stage).value] = count
        return counts

    def update_lead(self, lead_id: int, data: dict[str, Any]) -> Lead:
        """Update contact fields. Stage and creation time are not editable here."""
        blocked = set(data) - EDITABLE_FIELDS
        if blocked:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(blocked))}")

        lead = self.get_lead(lead_id)
        for key, value in self._clean(data).items():
            setattr(lead, key, value)
        if "name" in data and not lead.name:
            raise ValidationError("Lead name is required.")
        self.commit()
        self.db.refresh(lead)
        return lead

    def change_stage(
        self,
        lead_id: int,
        new_stage: LeadStage | str,
        templates: Iterable[MessageTemplate] | None = None,
    ) -> tuple[Lead, ReconciliationResult]:
        """Persist the move and its event together, then reconcile the queue."""
        new_stage = _coerce_stage(new_stage)
        with self.queue.locks.hold(lead_id):
            lead = self.get_lead(lead_id)
            old_stage = LeadStage(lead.stage)
            if old_stage == new_stage:
                return lead, ReconciliationResult()

            transitioned_at = utcnow()
            lead.stage = new_stage
            lead.last_interaction_at = transitioned_at
            lead.events.append(
                LeadEvent(
                    type=EventType.STAGE_CHANGED,
                    payload={"from": old_stage.value, "to": new_stage.value},
                )
            )
            self.commit()
            self.db.refresh(lead)
            logger.info(
                "lead.stage_changed",
                extra=build_log_event(
                    "lead.stage_changed",
                    LogContext(lead_id=lead.id, stage=new_stage.value),
                    reason=f"{old_stage.value}->{new_stage.value}",
                ),
            )

            result = self.queue.on_stage_change(
                lead,
                old_stage,
                new_stage,
                templates=templates,
                transitioned_at=transitioned_at,
            )
        return lead, result

    def delete_lead(self, lead_id: int) -> int:
        """Soft-delete the lead and cancel everything it still has scheduled."""
        with self.queue.locks.hold(lead_id):
            lead = self.get_lead(lead_id)
            canceled = self.queue.cancel_for_deletion(lead.id, commit=False)
            lead.deleted_at = utcnow()
            lead.events.append(LeadEvent(type=EventType.LEAD_DELETED, payload={"canceled": canceled}))
            self.commit()
        logger.info(
            "lead.deleted",
            extra=build_log_event("lead.deleted", LogContext(lead_id=lead_id), canceled_count=canceled),
        )
        return canceled

    def _clean(self, data: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        if "name" in data:
            cleaned["name"] = sanitize_text(data["name"], max_len=255)
        if data.get("email") is not None:
            email = sanitize_text(data["email"], max_len=320)
            if email and not is_valid_email(email):
                raise ValidationError(f"Invalid email: {email}")
            cleaned["email"] = email or None
        if "phone" in data:
            cleaned["phone"] = normalize_phone(data["phone"])
        for key in ("source", "notes"):
            if key in data:
                cleaned[key] = sanitize_text(data[key]) or None
        for key in ("last_interaction_at", "silenced_until"):
            if key in data:
                value: datetime | None = data[key]
                cleaned[key] = as_utc(value) if value is not None else None
        return cleaned
