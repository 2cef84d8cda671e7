"""Queue reconciliation engine.

Keeps the persisted follow-up queue consistent with each lead's stage:
scheduled items from a stage the lead left are canceled, and the templates of
the stage it entered are enqueued at business-hours adjusted times.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock, RLock
from typing import Iterable, Iterator

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseError
from app.core.logging import LogContext, build_log_event
from app.models.base import as_utc, utcnow
from app.models.enums import LeadStage, QueueStatus
from app.models.lead import Lead
from app.models.message_template import MessageTemplate
from app.models.queue_item import QueueItem
from app.scheduling.business_hours import BusinessHoursWindow, default_window
from app.scheduling.cancel_reasons import CancelReason, ExitedStage, LeadDeleted
from app.scheduling.followup_rules import RULE_TABLE
from app.scheduling.prediction import LeadLike, LeadSnapshot, predict_follows
from app.scheduling.stages import is_protected_queue_item
from app.services.base_service import BaseService
from app.utils.ids import new_trace_id

logger = logging.getLogger(__name__)


class LeadLockRegistry:
    """Process-wide re-entrant lock per lead id.

    Reconciliations for one lead run one at a time; different leads proceed
    in parallel. Cross-process safety comes from the scheduled-item unique index.
    """

    def __init__(self) -> None:
        self._locks: dict[int, RLock] = {}
        self._guard = Lock()

    def lock_for(self, lead_id: int) -> RLock:
        with self._guard:
            lock = self._locks.get(lead_id)
            if lock is None:
                lock = RLock()
                self._locks[lead_id] = lock
            return lock

    @contextmanager
    def hold(self, lead_id: int) -> Iterator[None]:
        lock = self.lock_for(lead_id)
        with lock:
            yield


lead_locks = LeadLockRegistry()


@dataclass
class ReconciliationResult:
    canceled: int = 0
    created: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.errors

    def as_dict(self) -> dict:
        return {
            "canceled": self.canceled,
            "created": self.created,
            "skipped": self.skipped,
            "complete": self.complete,
            "errors": list(self.errors),
        }


class QueueService(BaseService):
    """Service for queue reconciliation and queue read models."""

    def __init__(
        self,
        db: Session | None = None,
        window: BusinessHoursWindow | None = None,
        locks: LeadLockRegistry | None = None,
    ) -> None:
        super().__init__(db)
        self.window = window or default_window()
        self.locks = locks or lead_locks

    # -- reconciliation -------------------------------------------------

    def on_stage_change(
        self,
        lead: Lead,
        old_stage: LeadStage | str,
        new_stage: LeadStage | str,
        templates: Iterable[MessageTemplate] | None = None,
        transitioned_at: datetime | None = None,
    ) -> ReconciliationResult:
        """Cancel stale scheduled items, then enqueue the new stage's follow-ups.

        Only items created at or before ``transitioned_at`` are candidates for
        cancellation, so a concurrent enqueue for the new stage is never undone.
        A storage failure in one step is recorded and the other step still runs.
        """
        old_stage = LeadStage(old_stage)
        new_stage = LeadStage(new_stage)
        result = ReconciliationResult()
        trace_id = new_trace_id()
        context = LogContext(lead_id=lead.id, stage=new_stage.value, trace_id=trace_id)

        if old_stage == new_stage:
            logger.info(
                "queue.reconcile_noop",
                extra=build_log_event("queue.reconcile_noop", context),
            )
            return result

        cutoff = as_utc(transitioned_at) if transitioned_at else utcnow()
        with self.locks.hold(lead.id):
            try:
                result.canceled = self.cancel_for_lead(
                    lead.id,
                    new_stage,
                    ExitedStage(old_stage, new_stage),
                    created_before=cutoff,
                    trace_id=trace_id,
                )
            except (SQLAlchemyError, DatabaseError) as exc:
                self.rollback()
                result.errors.append(f"cancel: {exc}")
                logger.error(
                    "queue.cancel_failed",
                    extra=build_log_event("queue.cancel_failed", context, reason=str(exc)),
                )

            try:
                self._enqueue(LeadSnapshot.of(lead, stage=new_stage), templates, result, trace_id)
            except (SQLAlchemyError, DatabaseError) as exc:
                self.rollback()
                result.errors.append(f"enqueue: {exc}")
                logger.error(
                    "queue.enqueue_failed",
                    extra=build_log_event("queue.enqueue_failed", context, reason=str(exc)),
                )

        self._log_result("queue.reconciled", context, result)
        return result

    def enqueue_followups(
        self,
        lead: LeadLike,
        templates: Iterable[MessageTemplate] | None = None,
    ) -> ReconciliationResult:
        """Enqueue every eligible follow-up for the lead's current stage."""
        result = ReconciliationResult()
        trace_id = new_trace_id()
        context = LogContext(lead_id=lead.id, stage=LeadStage(lead.stage).value, trace_id=trace_id)
        with self.locks.hold(lead.id):
            try:
                self._enqueue(lead, templates, result, trace_id)
            except (SQLAlchemyError, DatabaseError) as exc:
                self.rollback()
                result.errors.append(f"enqueue: {exc}")
                logger.error(
                    "queue.enqueue_failed",
                    extra=build_log_event("queue.enqueue_failed", context, reason=str(exc)),
                )
        self._log_result("queue.enqueued", context, result)
        return result

    def cancel_for_lead(
        self,
        lead_id: int,
        new_stage: LeadStage | str | None,
        reason: CancelReason,
        created_before: datetime | None = None,
        trace_id: str | None = None,
        commit: bool = True,
    ) -> int:
        """Cancel the lead's scheduled items, except ones protected in ``new_stage``.

        ``new_stage=None`` means the lead is gone and nothing is protected.
        With ``commit=False`` the caller owns the transaction.
        """
        query = self.db.query(QueueItem).filter(
            QueueItem.lead_id == lead_id,
            QueueItem.status == QueueStatus.SCHEDULED,
        )
        if created_before is not None:
            query = query.filter(QueueItem.created_at <= created_before)

        items = query.all()
        if new_stage is not None:
            items = [item for item in items if not is_protected_queue_item(item.stage, new_stage)]

        now = utcnow()
        for item in items:
            item.mark_canceled(reason.code, at=now)
        if items and commit:
            self.commit()

        logger.info(
            "queue.canceled",
            extra=build_log_event(
                "queue.canceled",
                LogContext(
                    lead_id=lead_id,
                    stage=LeadStage(new_stage).value if new_stage is not None else None,
                    trace_id=trace_id,
                ),
                canceled_count=len(items),
                reason=reason.code,
            ),
        )
        return len(items)

    def cancel_for_deletion(self, lead_id: int, commit: bool = True) -> int:
        with self.locks.hold(lead_id):
            return self.cancel_for_lead(lead_id, None, LeadDeleted(), commit=commit)

    def queue_item_exists(self, lead_id: int, template_key: str) -> bool:
        return (
            self.db.query(QueueItem.id)
            .filter(
                QueueItem.lead_id == lead_id,
                QueueItem.template_key == template_key,
                QueueItem.status == QueueStatus.SCHEDULED,
            )
            .first()
            is not None
        )

    def _active_templates(self, stage: LeadStage) -> list[MessageTemplate]:
        return (
            self.db.query(MessageTemplate)
            .filter(MessageTemplate.stage == stage, MessageTemplate.active.is_(True))
            .all()
        )

    def _enqueue(
        self,
        lead: LeadLike,
        templates: Iterable[MessageTemplate] | None,
        result: ReconciliationResult,
        trace_id: str,
    ) -> None:
        stage = LeadStage(lead.stage)
        if templates is None:
            templates = self._active_templates(stage)
        by_key: dict[str, MessageTemplate] = {}
        for template in templates:
            if not RULE_TABLE.is_valid(template.stage, template.delay_seconds):
                logger.warning(
                    "queue.template_not_canonical",
                    extra=build_log_event(
                        "queue.template_not_canonical",
                        LogContext(lead_id=lead.id, template_key=template.template_key, trace_id=trace_id),
                    ),
                )
                continue
            by_key[template.template_key] = template

        for follow in predict_follows(lead, by_key.values(), self.window):
            template = by_key[follow.template_key]
            if self.queue_item_exists(lead.id, template.template_key):
                result.skipped += 1
                continue

            item = QueueItem(
                lead_id=lead.id,
                template_key=template.template_key,
                stage=LeadStage(template.stage),
                delay_seconds=template.delay_seconds,
                scheduled_for=follow.scheduled_adjusted,
                status=QueueStatus.SCHEDULED,
            )
            try:
                with self.db.begin_nested():
                    self.db.add(item)
            except IntegrityError:
                # Another writer inserted the same scheduled item first.
                result.skipped += 1
                logger.info(
                    "queue.duplicate_skipped",
                    extra=build_log_event(
                        "queue.duplicate_skipped",
                        LogContext(lead_id=lead.id, template_key=template.template_key, trace_id=trace_id),
                    ),
                )
                continue
            result.created += 1

        self.commit()

    def _log_result(self, event: str, context: LogContext, result: ReconciliationResult) -> None:
        level = logging.INFO if result.complete else logging.WARNING
        logger.log(
            level,
            event,
            extra=build_log_event(
                event,
                context,
                canceled_count=result.canceled,
                created_count=result.created,
                skipped_count=result.skipped,
            ),
        )

    # -- read models ----------------------------------------------------

    def get_queue_for_lead(self, lead_id: int) -> list[QueueItem]:
        """Scheduled items first, then everything by fire time."""
        scheduled_first = case((QueueItem.status == QueueStatus.SCHEDULED, 0), else_=1)
        return (
            self.db.query(QueueItem)
            .filter(QueueItem.lead_id == lead_id)
            .order_by(scheduled_first, QueueItem.scheduled_for, QueueItem.id)
            .all()
        )

    def count_scheduled_for_template(self, template_key: str) -> int:
        return (
            self.db.query(func.count(QueueItem.id))
            .filter(QueueItem.template_key == template_key, QueueItem.status == QueueStatus.SCHEDULED)
            .scalar()
            or 0
        )

    def scheduled_counts_by_template(self) -> dict[str, int]:
        rows = (
            self.db.query(QueueItem.template_key, func.count(QueueItem.id))
            .filter(QueueItem.status == QueueStatus.SCHEDULED)
            .group_by(QueueItem.template_key)
            .all()
        )
        return {template_key: count for template_key, count in rows}

    def get_queue_stats(self) -> dict[str, int]:
        stats = {status.value: 0 for status in QueueStatus}
        rows = self.db.query(QueueItem.status, func.count(QueueItem.id)).group_by(QueueItem.status).all()
        for status, count in rows:
            stats[QueueStatus(status).value] = count
        stats["total"] = sum(stats.values())
        return stats
