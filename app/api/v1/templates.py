"""Template catalogue endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1._errors import http_error
from app.core.exceptions import FunnelCRMException
from app.database.db import get_db
from app.models.enums import LeadStage
from app.scheduling.followup_rules import RULE_TABLE, RuleCatalog
from app.scheduling.prediction import get_eligible_leads
from app.schemas.templates import (
    EligibleLeadsResponse,
    FollowUpRuleResponse,
    TemplateCreateRequest,
    TemplateResponse,
    TemplateUpdateRequest,
)
from app.services.lead_service import LeadService
from app.services.template_service import TemplateService

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/rules")
def list_rules(stage: LeadStage | None = Query(default=None), db: Session = Depends(get_db)) -> dict:
    if stage is None:
        return {"catalogs": RULE_TABLE.as_dict()}
    available = TemplateService(db=db).available_delays(stage)
    return {
        "stage": stage.value,
        "rules": [FollowUpRuleResponse(delay_seconds=r.delay_seconds, label=r.label).model_dump() for r in RULE_TABLE.rules_for(stage)],
        "available": [FollowUpRuleResponse(delay_seconds=r.delay_seconds, label=r.label).model_dump() for r in available],
    }


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_template(payload: TemplateCreateRequest, db: Session = Depends(get_db)) -> TemplateResponse:
    try:
        template = TemplateService(db=db).create_template(
            stage=payload.stage,
            delay_seconds=payload.delay_seconds,
            content=payload.content,
            active=payload.active,
            name=payload.name,
            catalog=payload.catalog,
        )
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return TemplateResponse.model_validate(template)


@router.get("")
def list_templates(
    catalog: RuleCatalog | None = Query(default=None),
    stage: LeadStage | None = Query(default=None),
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> dict:
    templates = TemplateService(db=db).list_templates(catalog=catalog, stage=stage, active_only=active_only)
    return {"items": [TemplateResponse.model_validate(t).model_dump(mode="json") for t in templates]}


@router.patch("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: int,
    payload: TemplateUpdateRequest,
    db: Session = Depends(get_db),
) -> TemplateResponse:
    try:
        template = TemplateService(db=db).update_template(
            template_id,
            content=payload.content,
            active=payload.active,
            name=payload.name,
        )
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    return TemplateResponse.model_validate(template)


@router.get("/{template_id}/eligible-leads", response_model=EligibleLeadsResponse)
def eligible_leads(template_id: int, db: Session = Depends(get_db)) -> EligibleLeadsResponse:
    try:
        template = TemplateService(db=db).get_template(template_id)
    except FunnelCRMException as exc:
        raise http_error(exc) from exc
    leads = get_eligible_leads(template, LeadService(db=db).list_leads(stage=template.stage))
    return EligibleLeadsResponse(
        template_key=template.template_key,
        count=len(leads),
        lead_ids=[lead.id for lead in leads],
    )
