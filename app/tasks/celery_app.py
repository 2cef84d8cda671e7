"""Celery application bootstrap."""

from __future__ import annotations

import os

from celery import Celery

from app.core.config import get_config

config = get_config()

celery_app = Celery(
    "funnel_crm",
    broker=config.CELERY_BROKER_URL,
    backend=config.CELERY_RESULT_BACKEND,
    include=["app.tasks.dispatch_tasks"],
)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    beat_schedule={
        "dispatch-followups": {
            "task": "followups.dispatch",
            "schedule": float(config.DISPATCH_INTERVAL_SECONDS),
        },
    },
)

# Local/dev convenience: run tasks synchronously when requested.
if os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() in {"1", "true", "yes", "on"}:
    celery_app.conf.task_always_eager = True
