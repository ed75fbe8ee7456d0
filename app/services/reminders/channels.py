"""Delivery channel selection.

WhatsApp needs an E.164 number, so only ``+``-prefixed addresses go there;
everything else is sent as a plain SMS. Surrounding whitespace is dropped
before either.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from app.models.models import ReminderChannel

WHATSAPP_PREFIX = "whatsapp:"


class _HasPhone(Protocol):
    phone: str


@dataclass(frozen=True)
class ChannelChoice:
    channel: ReminderChannel
    address: str


def select_channel(recipient: _HasPhone | str, prefer_sms: bool = False) -> ChannelChoice:
    """Pick the channel and provider address for a recipient.

    ``prefer_sms`` is set when the salon turned on SMS but not WhatsApp in its
    notification settings; international numbers then go out as SMS too.
    """
    phone = recipient if isinstance(recipient, str) else recipient.phone
    phone = (phone or "").strip()
    if phone.startswith("+") and not prefer_sms:
        return ChannelChoice(ReminderChannel.WHATSAPP, WHATSAPP_PREFIX + phone)
    return ChannelChoice(ReminderChannel.SMS, phone)
