"""Outbound messaging through Twilio's Programmable Messaging API.

One HTTP call per message, no retries: a retried POST after a timeout may
well deliver the message twice. Failed sends are retried by the next daily
cycle instead (see ``DeliveryLedger.already_sent``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from app.core.config import BaseAppSettings, settings as app_settings
from app.core.exceptions import GatewayError, GatewayNotConfiguredError, GatewayTimeoutError
from app.models.models import ReminderChannel
from app.services.reminders.channels import WHATSAPP_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendResult:
    # Twilio normally returns a message SID, but a 2xx without one still means accepted.
    provider_message_id: str | None


class MessagingGateway(Protocol):
    def sender_for(self, channel: ReminderChannel) -> str:  # pragma: no cover - protocol stub
        ...

    def send(
        self, channel: ReminderChannel, from_address: str, to_address: str, body: str
    ) -> SendResult:  # pragma: no cover - protocol stub
        ...


class TwilioGateway:
    """Sends SMS and WhatsApp messages from the configured sender identities."""

    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        sms_sender: str | None,
        whatsapp_sender: str | None,
        base_url: str = "https://api.twilio.com",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.sms_sender = sms_sender
        self.whatsapp_sender = whatsapp_sender
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: BaseAppSettings | None = None) -> TwilioGateway:
        cfg = settings or app_settings
        return cls(
            account_sid=cfg.TWILIO_ACCOUNT_SID,
            auth_token=cfg.TWILIO_AUTH_TOKEN,
            sms_sender=cfg.TWILIO_PHONE_NUMBER,
            whatsapp_sender=cfg.TWILIO_WHATSAPP_NUMBER,
            base_url=cfg.TWILIO_API_BASE_URL,
            timeout=cfg.GATEWAY_TIMEOUT_SECONDS,
        )

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/2010-04-01/Accounts/{self.account_sid}/Messages.json"

    def sender_for(self, channel: ReminderChannel) -> str:
        if channel == ReminderChannel.WHATSAPP:
            if not self.whatsapp_sender:
                raise GatewayNotConfiguredError("TWILIO_WHATSAPP_NUMBER")
            return WHATSAPP_PREFIX + self.whatsapp_sender
        if not self.sms_sender:
            raise GatewayNotConfiguredError("TWILIO_PHONE_NUMBER")
        return self.sms_sender

    def send(self, channel: ReminderChannel, from_address: str, to_address: str, body: str) -> SendResult:
        if not self.account_sid or not self.auth_token:
            raise GatewayNotConfiguredError("TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN")

        payload = {"From": from_address, "To": to_address, "Body": body}
        try:
            response = self._post(payload)
        except httpx.TimeoutException as exc:
            logger.warning("Twilio %s send to %s timed out: %s", channel.value, to_address, exc)
            raise GatewayTimeoutError(self.timeout) from exc
        except httpx.HTTPError as exc:
            logger.warning("Twilio %s send to %s failed: %s", channel.value, to_address, exc)
            raise GatewayError(str(exc) or type(exc).__name__) from exc

        data = _json_or_empty(response)
        if response.is_error:
            message = data.get("message") or response.text or response.reason_phrase
            raise GatewayError(str(message), provider_code=data.get("code"), status_code=response.status_code)

        sid = data.get("sid")
        logger.info("Twilio accepted %s message to %s (sid=%s)", channel.value, to_address, sid)
        return SendResult(provider_message_id=sid or None)

    def _post(self, payload: dict[str, str]) -> httpx.Response:
        auth = (self.account_sid or "", self.auth_token or "")
        if self._client is not None:
            return self._client.post(self.messages_url, data=payload, auth=auth, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.messages_url, data=payload, auth=auth)


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
