from __future__ import annotations

from contextlib import contextmanager

import app.tasks.dispatch_tasks as dispatch_tasks
from app.tasks.celery_app import celery_app


def test_beat_schedule_runs_dispatcher_task():
    entry = celery_app.conf.beat_schedule["dispatch-followups"]
    assert entry["task"] == dispatch_tasks.dispatch_followups.name == "followups.dispatch"
    assert entry["schedule"] >= 1


def test_dispatch_task_runs_one_tick(monkeypatch, session_factory):
    @contextmanager
    def _get_db_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(dispatch_tasks, "get_db_session", _get_db_session)

    result = dispatch_tasks.dispatch_followups.run()

    assert result["action"] == "no_messages"
    assert result["queue_item_id"] is None
