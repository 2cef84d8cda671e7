"""Health and stage metadata endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter

from app.core.config import get_config
from app.scheduling.followup_rules import RULE_TABLE
from app.scheduling.stages import PROTECTED_QUEUE_STAGES, STAGE_INFO

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    cfg = get_config()
    return {
        "status": "ok",
        "service": cfg.APP_NAME,
        "version": cfg.APP_VERSION,
        "business_timezone": cfg.BUSINESS_TIMEZONE,
    }


@router.get("/stages")
def list_stages() -> dict:
    items = []
    for stage, info in STAGE_INFO.items():
        catalog = RULE_TABLE.catalog_of(stage)
        items.append(
            {
                "stage": stage.value,
                "label": info.label,
                "description": info.description,
                "catalog": catalog.value if catalog else None,
                "protected_queue": stage in PROTECTED_QUEUE_STAGES,
            }
        )
    return {"items": items}
