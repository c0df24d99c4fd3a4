"""Notification channel interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Union

ContentVariables = Dict[str, Union[str, int, float]]


@dataclass
class DeliveryResult:
    """Outcome reported by a channel for one send attempt."""

    ok: bool
    status: int = 0
    status_text: str = ""
    response_text: Optional[str] = None


class NotificationChannel(ABC):
    """Send-and-report capability for outbound alert messages.

    Implementations either return a DeliveryResult (including non-success
    HTTP outcomes) or raise ExternalChannelError when the message could not
    be handed to the provider at all.
    """

    @abstractmethod
    def send(
        self,
        to: Optional[str] = None,
        body: Optional[str] = None,
        content_sid: Optional[str] = None,
        content_variables: Optional[ContentVariables] = None,
    ) -> DeliveryResult:
        """Send a free-text body or a templated content reference."""
        pass


class NullChannel(NotificationChannel):
    """Channel used when notifications are disabled; never delivers."""

    def send(
        self,
        to: Optional[str] = None,
        body: Optional[str] = None,
        content_sid: Optional[str] = None,
        content_variables: Optional[ContentVariables] = None,
    ) -> DeliveryResult:
        return DeliveryResult(ok=False, status_text="Notifications disabled")
