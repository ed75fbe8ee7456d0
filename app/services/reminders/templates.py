"""Read access to salon reminder templates."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.models import models
from app.services.reminders.occasions import parse_occasion_type

logger = logging.getLogger(__name__)


class TemplateStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_active_template(
        self, salon_id: int, occasion_type: str | models.OccasionType
    ) -> models.ReminderTemplate | None:
        """Return the salon's active template for the occasion, or ``None``.

        ``None`` is a normal outcome: the occasion type is skipped for the
        salon on this run. The CRUD layer allows one active template per
        type; should several exist, the oldest (lowest id) wins.
        """
        occasion = parse_occasion_type(occasion_type)
        template = (
            self.db.query(models.ReminderTemplate)
            .filter(
                models.ReminderTemplate.salon_id == salon_id,
                models.ReminderTemplate.type == occasion.value,
                models.ReminderTemplate.is_active.is_(True),
            )
            .order_by(models.ReminderTemplate.id)
            .first()
        )
        if template is None:
            logger.info("Salon %s: no active %s template, skipping", salon_id, occasion.value)
        return template
