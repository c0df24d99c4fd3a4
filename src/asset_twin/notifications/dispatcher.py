"""Best-effort alert delivery, decoupled from alert persistence."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Iterable, Optional, Set

from asset_twin.alerts import AlertEvent, format_inr
from asset_twin.errors import ExternalChannelError
from asset_twin.models import AlertType
from asset_twin.notifications.base import (
    ContentVariables,
    DeliveryResult,
    NotificationChannel,
)
from asset_twin.storage import Storage

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Sends one message per stored alert and records the outcome.

    Alerts are already persisted when they reach the dispatcher. Delivery
    runs on a small worker pool (or inline when `synchronous`), never under a
    store lock, and any failure only leaves sent_via_whatsapp False. There
    are no retries. At most `max_pending` deliveries are queued; further
    alerts are logged and left unsent until the backlog clears, as are alerts
    raised after shutdown().
    """

    def __init__(
        self,
        channel: NotificationChannel,
        store: Storage,
        recipient: Optional[str] = None,
        synchronous: bool = False,
        max_workers: int = 2,
        max_pending: int = 100,
    ):
        self.channel = channel
        self.store = store
        self.recipient = recipient
        self.synchronous = synchronous
        self.max_pending = max_pending
        self._executor: Optional[ThreadPoolExecutor] = None
        if not synchronous:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="alert-notify"
            )
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    @staticmethod
    def compose(event: AlertEvent) -> str:
        """Human-readable WhatsApp text for an alert."""
        if event.alert.alert_type != AlertType.WEAR:
            return event.alert.message
        cost = (
            f" Replacement cost: {format_inr(event.cost)}" if event.cost else ""
        )
        return (
            f"CRITICAL ALERT: {event.subject}'s {event.description} is below safe "
            f"threshold at {event.remaining_life:.1f}%. "
            f"Immediate maintenance recommended.{cost}"
        )

    def dispatch(self, event: AlertEvent) -> Optional[Future]:
        """Queue delivery of one alert. Returns the future in async mode."""
        if self._executor is None:
            self._deliver(event)
            return None

        with self._lock:
            if self._closed:
                logger.warning(
                    "Dispatcher shut down; alert %s not sent", event.alert.id
                )
                return None
            if len(self._pending) >= self.max_pending:
                logger.warning(
                    "Delivery backlog full (%d pending); alert %s not sent",
                    len(self._pending),
                    event.alert.id,
                )
                return None
            future = self._executor.submit(self._deliver, event)
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def dispatch_all(self, events: Iterable[AlertEvent]) -> None:
        for event in events:
            self.dispatch(event)

    def send_message(
        self,
        to: Optional[str] = None,
        body: Optional[str] = None,
        content_sid: Optional[str] = None,
        content_variables: Optional[ContentVariables] = None,
    ) -> DeliveryResult:
        """Send an ad hoc message and report the outcome."""
        try:
            return self.channel.send(
                to=to or self.recipient,
                body=body,
                content_sid=content_sid,
                content_variables=content_variables,
            )
        except ExternalChannelError as e:
            logger.warning("WhatsApp message not sent: %s", e)
            return DeliveryResult(ok=False, status_text=str(e))

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until queued deliveries finish (or timeout)."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait_for_pending: bool = True) -> None:
        with self._lock:
            self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=wait_for_pending)

    def _deliver(self, event: AlertEvent) -> bool:
        alert = event.alert
        try:
            result = self.send_message(body=self.compose(event))
        except Exception:
            logger.exception("Unexpected error delivering alert %s", alert.id)
            return False

        if result.ok:
            logger.info("WhatsApp alert sent for %s", event.subject)
            self.store.record_alert_delivery(alert.id, True)
        else:
            logger.warning(
                "WhatsApp alert for %s not delivered: %s %s",
                event.subject,
                result.status,
                result.status_text,
            )
        return result.ok

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
