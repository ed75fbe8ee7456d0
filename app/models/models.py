from __future__ import annotations

import datetime as dt
import enum

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base_class import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class OccasionType(str, enum.Enum):
    """Recurring customer occasions the reminder engine knows about."""
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"

    @property
    def customer_field(self) -> str:
        """Name of the Customer column holding this occasion's date."""
        return self.value

    @property
    def preference_flag(self) -> str:
        """Name of the Salon flag that enables reminders for this occasion."""
        return f"{self.value}_reminders"


class ReminderChannel(str, enum.Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"


class DeliveryStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"


class Salon(Base):
    """A tenant. Deactivated rather than deleted while history exists."""
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, index=True)
    # Notification preferences
    birthday_reminders: Mapped[bool] = mapped_column(default=True)
    anniversary_reminders: Mapped[bool] = mapped_column(default=True)
    whatsapp_notifications: Mapped[bool] = mapped_column(default=False)
    sms_notifications: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    customers: Mapped[list[Customer]] = relationship("Customer", back_populates="salon")  # type: ignore
    reminder_templates: Mapped[list[ReminderTemplate]] = relationship(  # type: ignore
        "ReminderTemplate", back_populates="salon"
    )

    def reminders_enabled(self, occasion_type: OccasionType) -> bool:
        return bool(getattr(self, occasion_type.preference_flag))

    @property
    def prefers_sms(self) -> bool:
        """SMS explicitly chosen over WhatsApp in the salon's notification settings."""
        return bool(self.sms_notifications) and not bool(self.whatsapp_notifications)


class Customer(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    salon_id: Mapped[int] = mapped_column(ForeignKey("salon.id"), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    birthday: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    anniversary: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    salon: Mapped[Salon] = relationship("Salon", back_populates="customers")  # type: ignore

    def occasion_date(self, occasion_type: OccasionType) -> dt.date | None:
        return getattr(self, occasion_type.customer_field)


class ReminderTemplate(Base):
    """Message body for one occasion type; ``[CustomerName]`` is substituted at send time."""
    __table_args__ = (Index("ix_remindertemplate_salon_type", "salon_id", "type"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    salon_id: Mapped[int] = mapped_column(ForeignKey("salon.id"))
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    salon: Mapped[Salon] = relationship("Salon", back_populates="reminder_templates")  # type: ignore


class ReminderLog(Base):
    """One dispatch attempt. Rows are inserted once and never updated or deleted."""
    __table_args__ = (
        Index("ix_reminderlog_occurrence", "salon_id", "customer_id", "type", "occasion_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    salon_id: Mapped[int] = mapped_column(ForeignKey("salon.id"), index=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customer.id"), index=True)
    template_id: Mapped[int] = mapped_column(ForeignKey("remindertemplate.id"), index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    occasion_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    channel: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    provider_message_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sent_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
