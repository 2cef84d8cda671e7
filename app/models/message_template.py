"""Message template model module."""

from __future__ import annotations

from sqlalchemy import Boolean, Enum, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from app.core.exceptions import ValidationError
from app.models.base import AuditMixin, Base
from app.models.enums import LeadStage, enum_values


class MessageTemplate(Base, AuditMixin):
    __tablename__ = "message_templates"
    __table_args__ = (
        UniqueConstraint("stage", "delay_seconds", name="uq_message_templates_stage_delay"),
        UniqueConstraint("template_key", name="uq_message_templates_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    template_key: Mapped[str] = mapped_column(String(120), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    stage: Mapped[LeadStage] = mapped_column(
        Enum(LeadStage, name="lead_stage", native_enum=False, values_callable=enum_values, length=40),
        nullable=False,
    )
    delay_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @validates("template_key", "stage", "delay_seconds")
    def _freeze_binding(self, key: str, value):
        current = getattr(self, key)
        if current is not None and current != value:
            raise ValidationError(f"MessageTemplate.{key} is fixed at creation.")
        return value

    def __repr__(self) -> str:
        return f"<MessageTemplate key={self.template_key} active={self.active}>"
