"""WhatsApp delivery through the Twilio Messages API."""

import json
import logging
from typing import Optional

import requests

from asset_twin.errors import ExternalChannelError
from asset_twin.loader import NotificationConfig
from asset_twin.notifications.base import (
    ContentVariables,
    DeliveryResult,
    NotificationChannel,
)

logger = logging.getLogger(__name__)


class TwilioWhatsAppChannel(NotificationChannel):
    """Posts form-encoded WhatsApp messages with HTTP basic auth."""

    def __init__(
        self,
        config: NotificationConfig,
        session: Optional[requests.Session] = None,
    ):
        self.cfg = config
        self.session = session or requests.Session()

    @property
    def messages_url(self) -> str:
        return f"{self.cfg.api_base}/Accounts/{self.cfg.account_sid}/Messages.json"

    def build_payload(
        self,
        to: Optional[str] = None,
        body: Optional[str] = None,
        content_sid: Optional[str] = None,
        content_variables: Optional[ContentVariables] = None,
    ) -> dict:
        """Form fields for one message. Raises ExternalChannelError if incomplete."""
        if not self.cfg.account_sid or not self.cfg.auth_token:
            raise ExternalChannelError("Missing TWILIO_ACCOUNT_SID or TWILIO_AUTH_TOKEN")
        if not self.cfg.from_number:
            raise ExternalChannelError(
                "Missing TWILIO_WHATSAPP_FROM (or TWILIO_PHONE_NUMBER)"
            )
        recipient = to or self.cfg.recipient
        if not recipient:
            raise ExternalChannelError(
                "No WhatsApp recipient provided (set TWILIO_WHATSAPP_TO or pass to)"
            )

        payload = {
            "To": f"whatsapp:{recipient}",
            "From": f"whatsapp:{self.cfg.from_number}",
        }
        if content_sid:
            payload["ContentSid"] = content_sid
            if content_variables:
                payload["ContentVariables"] = json.dumps(content_variables)
        elif body:
            payload["Body"] = body
        else:
            raise ExternalChannelError("Either body or content_sid must be provided")
        return payload

    def send(
        self,
        to: Optional[str] = None,
        body: Optional[str] = None,
        content_sid: Optional[str] = None,
        content_variables: Optional[ContentVariables] = None,
    ) -> DeliveryResult:
        payload = self.build_payload(to, body, content_sid, content_variables)
        try:
            response = self.session.post(
                self.messages_url,
                data=payload,
                auth=(self.cfg.account_sid, self.cfg.auth_token),
                timeout=self.cfg.timeout_sec,
            )
        except requests.RequestException as e:
            raise ExternalChannelError(f"Twilio request failed: {e}") from e

        if not response.ok:
            logger.error(
                "Twilio WhatsApp send failed: %s %s %s",
                response.status_code,
                response.reason,
                response.text,
            )
        return DeliveryResult(
            ok=response.ok,
            status=response.status_code,
            status_text=response.reason or "",
            response_text=response.text,
        )
