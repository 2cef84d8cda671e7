from __future__ import annotations

import logging
from typing import Any

from app.core.exceptions import DatabaseError
from app.core.logging import LogContext, build_log_event
from app.database.db import get_db_session
from app.services.dispatch_service import DispatchService
from app.tasks.celery_app import celery_app
from app.utils.ids import new_trace_id

logger = logging.getLogger(__name__)


def run_dispatch_tick() -> dict[str, Any]:
    """One dispatcher pass: send at most one due follow-up."""
    trace_id = new_trace_id()
    with get_db_session() as session:
        try:
            outcome = DispatchService(db=session).dispatch_next()
        except DatabaseError:
            logger.exception(
                "dispatch.tick_failed",
                extra=build_log_event("dispatch.tick_failed", LogContext(trace_id=trace_id)),
            )
            raise
    logger.info(
        "dispatch.tick",
        extra=build_log_event("dispatch.tick", LogContext(trace_id=trace_id), reason=outcome.action),
    )
    return outcome.as_dict()


@celery_app.task(name="followups.dispatch")
def dispatch_followups() -> dict[str, Any]:
    return run_dispatch_tick()
