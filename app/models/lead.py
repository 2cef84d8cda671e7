"""Lead model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.exceptions import ValidationError
from app.models.base import AuditMixin, Base, SoftDeleteMixin, UTCDateTime, as_utc
from app.models.enums import LeadStage, enum_values


class Lead(Base, AuditMixin, SoftDeleteMixin):
    __tablename__ = "leads"
    __table_args__ = (
        Index("idx_leads_stage", "stage"),
        Index("idx_leads_phone", "phone"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320))
    phone: Mapped[str | None] = mapped_column(String(32))
    stage: Mapped[LeadStage] = mapped_column(
        Enum(LeadStage, name="lead_stage", native_enum=False, values_callable=enum_values, length=40),
        default=LeadStage.CAPTURED_FORM,
        nullable=False,
    )
    source: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)
    last_interaction_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    silenced_until: Mapped[datetime | None] = mapped_column(UTCDateTime())

    queue_items = relationship("QueueItem", back_populates="lead")
    events = relationship("LeadEvent", back_populates="lead")

    @validates("created_at")
    def _freeze_created_at(self, key: str, value: datetime) -> datetime:
        # created_at anchors every follow-up offset for the lead.
        current = self.created_at
        if current is not None and value is not None and as_utc(current) != as_utc(value):
            raise ValidationError("Lead created_at cannot change after creation.")
        return value

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<Lead id={self.id} stage={self.stage}>"
