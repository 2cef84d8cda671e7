"""Message queue item model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base, UTCDateTime, utcnow
from app.models.enums import LeadStage, QueueStatus, enum_values
from app.orchestration.state_machine import StateMachine

SCHEDULED_ONLY = text("status = 'scheduled'")

# Sent and canceled are terminal; nothing returns to scheduled.
QUEUE_STATUS_MACHINE = StateMachine(
    {
        QueueStatus.SCHEDULED: {QueueStatus.SENT, QueueStatus.CANCELED},
        QueueStatus.SENT: set(),
        QueueStatus.CANCELED: set(),
    }
)


class QueueItem(Base, AuditMixin):
    __tablename__ = "message_queue"
    __table_args__ = (
        # At most one scheduled row per (lead, template); resolved rows may repeat.
        Index(
            "uq_message_queue_lead_template_scheduled",
            "lead_id",
            "template_key",
            unique=True,
            sqlite_where=SCHEDULED_ONLY,
            postgresql_where=SCHEDULED_ONLY,
        ),
        Index("idx_message_queue_status_scheduled_for", "status", "scheduled_for"),
        Index("idx_message_queue_lead_status", "lead_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lead_id: Mapped[int] = mapped_column(ForeignKey("leads.id", ondelete="RESTRICT"), nullable=False)
    template_key: Mapped[str] = mapped_column(String(120), nullable=False)
    stage: Mapped[LeadStage] = mapped_column(
        Enum(LeadStage, name="lead_stage", native_enum=False, values_callable=enum_values, length=40),
        nullable=False,
    )
    delay_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    scheduled_for: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    status: Mapped[QueueStatus] = mapped_column(
        Enum(QueueStatus, name="queue_status", native_enum=False, values_callable=enum_values, length=20),
        default=QueueStatus.SCHEDULED,
        nullable=False,
    )
    sent_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    canceled_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    cancel_reason: Mapped[str | None] = mapped_column(String(120))

    lead = relationship("Lead", back_populates="queue_items")

    def mark_sent(self, at: datetime | None = None) -> None:
        QUEUE_STATUS_MACHINE.assert_transition(self.status, QueueStatus.SENT)
        self.status = QueueStatus.SENT
        self.sent_at = at or utcnow()

    def mark_canceled(self, reason: str, at: datetime | None = None) -> None:
        QUEUE_STATUS_MACHINE.assert_transition(self.status, QueueStatus.CANCELED)
        self.status = QueueStatus.CANCELED
        self.canceled_at = at or utcnow()
        self.cancel_reason = reason

    def __repr__(self) -> str:
        return f"<QueueItem id={self.id} lead={self.lead_id} key={self.template_key} status={self.status}>"
