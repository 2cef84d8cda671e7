"""Lead event model module."""

from __future__ import annotations

from sqlalchemy import JSON, Enum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base
from app.models.enums import EventType, enum_values


class LeadEvent(Base, AuditMixin):
    __tablename__ = "lead_events"
    __table_args__ = (Index("idx_lead_events_lead_type", "lead_id", "type"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lead_id: Mapped[int] = mapped_column(ForeignKey("leads.id", ondelete="RESTRICT"), nullable=False)
    type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="event_type", native_enum=False, values_callable=enum_values, length=40),
        nullable=False,
    )
    payload: Mapped[dict | None] = mapped_column(JSON)

    lead = relationship("Lead", back_populates="events")
