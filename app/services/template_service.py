"""Template catalogue service.

Templates bind to a canonical (stage, delay) rule at creation and keep that
binding for life; only content and the active flag change afterwards.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import LogContext, build_log_event
from app.models.enums import LeadStage
from app.models.message_template import MessageTemplate
from app.scheduling.followup_rules import RULE_TABLE, FollowUpRule, RuleCatalog, generate_template_key
from app.services.base_service import BaseService
from app.utils.validators import sanitize_text

logger = logging.getLogger(__name__)


class TemplateService(BaseService):
    def create_template(
        self,
        stage: LeadStage | str,
        delay_seconds: int,
        content: str,
        active: bool = True,
        name: str | None = None,
        catalog: RuleCatalog | str | None = None,
    ) -> MessageTemplate:
        try:
            stage = LeadStage(stage)
        except ValueError as exc:
            raise ValidationError(f"Unknown stage: {stage}") from exc

        content = sanitize_text(content)
        if not content:
            raise ValidationError("Template content is required.")
        if not RULE_TABLE.is_valid(stage, delay_seconds, catalog):
            raise ValidationError(f"Invalid stage/delay combination: {stage.value}/{delay_seconds}")
        if self.combination_exists(stage, delay_seconds):
            raise ValidationError(f"A template already exists for {stage.value} at {delay_seconds}s")

        template_key = generate_template_key(stage, delay_seconds)
        template = MessageTemplate(
            template_key=template_key,
            name=sanitize_text(name, max_len=255) or RULE_TABLE.delay_label(stage, delay_seconds),
            stage=stage,
            delay_seconds=delay_seconds,
            content=content,
            active=active,
        )
        self.db.add(template)
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.rollback()
            raise ValidationError(f"Template key already exists: {template_key}") from exc
        self.commit()
        self.db.refresh(template)

        logger.info(
            "template.created",
            extra=build_log_event(
                "template.created",
                LogContext(template_key=template_key, stage=stage.value),
            ),
        )
        return template

    def get_template(self, template_id: int) -> MessageTemplate:
        template = self.db.get(MessageTemplate, template_id)
        if template is None:
            raise NotFoundError(f"Template not found: {template_id}")
        return template

    def get_by_key(self, template_key: str) -> MessageTemplate | None:
        return self.db.query(MessageTemplate).filter(MessageTemplate.template_key == template_key).first()

    def list_templates(
        self,
        catalog: RuleCatalog | str | None = None,
        stage: LeadStage | str | None = None,
        active_only: bool = False,
    ) -> list[MessageTemplate]:
        query = self.db.query(MessageTemplate)
        if catalog is not None:
            query = query.filter(MessageTemplate.stage.in_(RULE_TABLE.stages(RuleCatalog(catalog))))
        if stage is not None:
            query = query.filter(MessageTemplate.stage == LeadStage(stage))
        if active_only:
            query = query.filter(MessageTemplate.active.is_(True))
        return query.order_by(MessageTemplate.stage, MessageTemplate.delay_seconds).all()

    def list_active(self, stage: LeadStage | str | None = None) -> list[MessageTemplate]:
        return self.list_templates(stage=stage, active_only=True)

    def update_template(
        self,
        template_id: int,
        content: str | None = None,
        active: bool | None = None,
        name: str | None = None,
    ) -> MessageTemplate:
        template = self.get_template(template_id)
        if content is not None:
            content = sanitize_text(content)
            if not content:
                raise ValidationError("Template content is required.")
            template.content = content
        if active is not None:
            template.active = active
        if name is not None:
            template.name = sanitize_text(name, max_len=255) or template.name
        self.commit()
        self.db.refresh(template)
        return template

    def toggle_active(self, template_id: int) -> MessageTemplate:
        template = self.get_template(template_id)
        return self.update_template(template_id, active=not template.active)

    def combination_exists(self, stage: LeadStage | str, delay_seconds: int) -> bool:
        return (
            self.db.query(MessageTemplate.id)
            .filter(MessageTemplate.stage == LeadStage(stage), MessageTemplate.delay_seconds == delay_seconds)
            .first()
            is not None
        )

    def available_delays(self, stage: LeadStage | str) -> list[FollowUpRule]:
        """Canonical delays for the stage that have no template yet."""
        used = {
            delay
            for (delay,) in self.db.query(MessageTemplate.delay_seconds)
            .filter(MessageTemplate.stage == LeadStage(stage))
            .all()
        }
        return [rule for rule in RULE_TABLE.rules_for(stage) if rule.delay_seconds not in used]
