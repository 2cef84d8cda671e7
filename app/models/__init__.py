"""SQLAlchemy model package for the funnel schema."""

from app.models.base import Base
from app.models.enums import EventType, LeadStage, QueueStatus
from app.models.lead import Lead
from app.models.lead_event import LeadEvent
from app.models.message_template import MessageTemplate
from app.models.queue_item import QUEUE_STATUS_MACHINE, QueueItem

__all__ = [
    "Base",
    "EventType",
    "Lead",
    "LeadEvent",
    "LeadStage",
    "MessageTemplate",
    "QUEUE_STATUS_MACHINE",
    "QueueItem",
    "QueueStatus",
]
