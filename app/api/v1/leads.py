"""Lead endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1._errors import http_error
from app.core.exceptions import FunnelCRMException
from app.database.db import get_db
from app.models.enums import LeadStage
from app.scheduling.business_hours import default_window
from app.scheduling.prediction import predict_follows
from app.schemas.common import ReconciliationResponse
from app.schemas.leads import (
    LeadCreateRequest,
    LeadDeleteResponse,
    LeadResponse,
    LeadStageUpdateRequest,
    LeadUpdateRequest,
    LeadWriteResponse,
    PredictedFollowResponse,
)
from app.schemas.queue import QueueItemResponse
from app.services.lead_service import LeadService
from app.services.queue_service import QueueService
from app.services.template_service import TemplateService

router = APIRouter(prefix="/leads", tags=["leads"])


def _write_response(lead, result) -> LeadWriteResponse:
    return LeadWriteResponse(
        lead=LeadResponse.model_validate(lead),
        queue=ReconciliationResponse(**result.as_dict()),
    )


@router.post("", response_model=LeadWriteResponse, status_code=status.HTTP_201_CREATED)
def create_lead(payload: LeadCreateRequest, db: Session = Depends(get_db)) -> LeadWriteResponse:
    try:
        lead, result = LeadService(db=db).create_lead(payload.model_dump(exclude_none=True))
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return _write_response(lead, result)


@router.get("")
def list_leads(stage: LeadStage | None = Query(default=None), db: Session = Depends(get_db)) -> dict:
    leads = LeadService(db=db).list_leads(stage=stage)
    return {
        "items": [LeadResponse.model_validate(lead).model_dump(mode="json") for lead in leads],
        "total": len(leads),
    }


@router.get("/counts")
def lead_counts(db: Session = Depends(get_db)) -> dict:
    return {"counts": LeadService(db=db).count_by_stage()}


@router.get("/{lead_id}", response_model=LeadResponse)
def get_lead(lead_id: int, db: Session = Depends(get_db)) -> LeadResponse:
    try:
        lead = LeadService(db=db).get_lead(lead_id)
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return LeadResponse.model_validate(lead)


@router.patch("/{lead_id}", response_model=LeadResponse)
def update_lead(lead_id: int, payload: LeadUpdateRequest, db: Session = Depends(get_db)) -> LeadResponse:
    try:
        lead = LeadService(db=db).update_lead(lead_id, payload.model_dump(exclude_unset=True))
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return LeadResponse.model_validate(lead)


@router.patch("/{lead_id}/stage", response_model=LeadWriteResponse)
def change_stage(lead_id: int, payload: LeadStageUpdateRequest, db: Session = Depends(get_db)) -> LeadWriteResponse:
    try:
        lead, result = LeadService(db=db).change_stage(lead_id, payload.stage)
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return _write_response(lead, result)


@router.delete("/{lead_id}", response_model=LeadDeleteResponse)
def delete_lead(lead_id: int, db: Session = Depends(get_db)) -> LeadDeleteResponse:
    try:
        canceled = LeadService(db=db).delete_lead(lead_id)
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return LeadDeleteResponse(id=lead_id, canceled=canceled)


@router.get("/{lead_id}/predicted-follows")
def predicted_follows(lead_id: int, db: Session = Depends(get_db)) -> dict:
    """Preview of when each eligible follow-up would fire; nothing is enqueued."""
    try:
        lead = LeadService(db=db).get_lead(lead_id)
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    templates = TemplateService(db=db).list_active(stage=lead.stage)
    follows = predict_follows(lead, templates, default_window())
    return {
        "lead_id": lead.id,
        "stage": LeadStage(lead.stage).value,
        "items": [PredictedFollowResponse.model_validate(follow).model_dump(mode="json") for follow in follows],
    }


@router.get("/{lead_id}/queue")
def lead_queue(lead_id: int, db: Session = Depends(get_db)) -> dict:
    try:
        LeadService(db=db).get_lead(lead_id)
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    items = QueueService(db=db).get_queue_for_lead(lead_id)
    return {"items": [QueueItemResponse.model_validate(item).model_dump(mode="json") for item in items]}
