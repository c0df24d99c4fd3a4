"""Outbound notification channels and the alert dispatcher."""

from asset_twin.notifications.base import (
    DeliveryResult,
    NotificationChannel,
    NullChannel,
)
from asset_twin.notifications.dispatcher import NotificationDispatcher
from asset_twin.notifications.twilio import TwilioWhatsAppChannel

__all__ = [
    "DeliveryResult",
    "NotificationChannel",
    "NullChannel",
    "NotificationDispatcher",
    "TwilioWhatsAppChannel",
]
