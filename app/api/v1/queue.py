"""Queue inspection and dispatch endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1._errors import http_error
from app.core.exceptions import FunnelCRMException
from app.database.db import get_db
from app.schemas.queue import DispatchResponse, ScheduledCountResponse
from app.services.dispatch_service import DispatchService
from app.services.queue_service import QueueService

router = APIRouter(prefix="/queue", tags=["queue"])


@router.get("/stats")
def queue_stats(db: Session = Depends(get_db)) -> dict:
    service = QueueService(db=db)
    return {
        "by_status": service.get_queue_stats(),
        "scheduled_by_template": service.scheduled_counts_by_template(),
    }


@router.get("/templates/{template_key}/scheduled-count", response_model=ScheduledCountResponse)
def scheduled_count(template_key: str, db: Session = Depends(get_db)) -> ScheduledCountResponse:
    count = QueueService(db=db).count_scheduled_for_template(template_key)
    return ScheduledCountResponse(template_key=template_key, scheduled=count)


@router.post("/dispatch", response_model=DispatchResponse)
def dispatch_next(db: Session = Depends(get_db)) -> DispatchResponse:
    """Run one dispatcher tick inline; the beat task does the same on a timer."""
    try:
        outcome = DispatchService(db=db).dispatch_next()
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return DispatchResponse(**outcome.as_dict())
