"""Stub dispatcher: picks the next due follow-up and marks it sent.

Nothing is delivered; the rendered message is logged so the queue can be
exercised end to end.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func

from app.core.logging import LogContext, build_log_event
from app.models.base import as_utc, utcnow
from app.models.enums import EventType, QueueStatus
from app.models.lead import Lead
from app.models.lead_event import LeadEvent
from app.models.message_template import MessageTemplate
from app.models.queue_item import QUEUE_STATUS_MACHINE, QueueItem
from app.scheduling.prediction import render_message
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)

# Minimum gap between two sends across the whole queue.
MIN_SEND_SPACING_SECONDS = 40


@dataclass
class DispatchOutcome:
    action: str
    queue_item_id: int | None = None
    lead_id: int | None = None
    template_key: str | None = None
    sent_at: datetime | None = None
    wait_seconds: int | None = None

    def as_dict(self) -> dict:
        return {
            "action": self.action,
            "queue_item_id": self.queue_item_id,
            "lead_id": self.lead_id,
            "template_key": self.template_key,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "wait_seconds": self.wait_seconds,
        }


class DispatchService(BaseService):
    def last_sent_at(self) -> datetime | None:
        value = (
            self.db.query(func.max(QueueItem.sent_at))
            .filter(QueueItem.status == QueueStatus.SENT)
            .scalar()
        )
        return as_utc(value) if value is not None else None

    def next_due(self, now: datetime) -> QueueItem | None:
        return (
            self.db.query(QueueItem)
            .filter(QueueItem.status == QueueStatus.SCHEDULED, QueueItem.scheduled_for <= now)
            .order_by(QueueItem.scheduled_for, QueueItem.id)
            .first()
        )

    def dispatch_next(self, now: datetime | None = None) -> DispatchOutcome:
        now = as_utc(now) if now is not None else utcnow()

        last = self.last_sent_at()
        if last is not None:
            elapsed = (now - last).total_seconds()
            if elapsed < MIN_SEND_SPACING_SECONDS:
                wait = math.ceil(MIN_SEND_SPACING_SECONDS - elapsed)
                logger.info(
                    "dispatch.rate_limited",
                    extra=build_log_event("dispatch.rate_limited", LogContext(), wait_seconds=wait),
                )
                return DispatchOutcome(action="rate_limited", wait_seconds=wait)

        item = self.next_due(now)
        if item is None:
            return DispatchOutcome(action="no_messages")

        QUEUE_STATUS_MACHINE.assert_transition(item.status, QueueStatus.SENT)
        item_id, lead_id, template_key = item.id, item.lead_id, item.template_key
        claimed = (
            self.db.query(QueueItem)
            .filter(QueueItem.id == item_id, QueueItem.status == QueueStatus.SCHEDULED)
            .update(
                {QueueItem.status: QueueStatus.SENT, QueueItem.sent_at: now, QueueItem.updated_at: now},
                synchronize_session=False,
            )
        )
        context = LogContext(lead_id=lead_id, template_key=template_key)
        if not claimed:
            # Canceled or sent by someone else between the read and the update.
            self.rollback()
            logger.info("dispatch.lost_race", extra=build_log_event("dispatch.lost_race", context, queue_item_id=item_id))
            return DispatchOutcome(action="no_messages")

        self.db.add(LeadEvent(lead_id=lead_id, type=EventType.FOLLOW_SENT, payload={"template_key": template_key}))
        self.commit()

        content = self._render(lead_id, template_key)
        logger.info(
            "dispatch.sent",
            extra=build_log_event("dispatch.sent", context, queue_item_id=item_id, content=content),
        )
        return DispatchOutcome(
            action="sent",
            queue_item_id=item_id,
            lead_id=lead_id,
            template_key=template_key,
            sent_at=now,
        )

    def _render(self, lead_id: int, template_key: str) -> str | None:
        template = (
            self.db.query(MessageTemplate).filter(MessageTemplate.template_key == template_key).first()
        )
        lead = self.db.get(Lead, lead_id)
        if template is None or lead is None:
            return None
        return render_message(template, lead)
