"""Background loop that drives the engine on a fixed interval."""

import logging
import threading
from typing import Optional

from asset_twin.engine import AssetTwinEngine, CycleReport

logger = logging.getLogger(__name__)


class RealtimeScheduler:
    """Runs `engine.run_cycle()` every `interval_sec` seconds.

    start() performs one pass synchronously, then continues in a daemon
    thread. stop() cancels the pending wait but lets an in-flight pass
    finish.
    """

    def __init__(self, engine: AssetTwinEngine, interval_sec: Optional[float] = None):
        self.engine = engine
        self.interval_sec = (
            engine.config.engine.interval_sec if interval_sec is None else interval_sec
        )
        self.cycles = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._stop_event = threading.Event()

        logger.info("Starting real-time engine (every %ss)", self.interval_sec)
        self._run_once()
        self._thread = threading.Thread(
            target=self._loop,
            args=(self._stop_event,),
            daemon=True,
            name="asset-twin-scheduler",
        )
        self._thread.start()

    def stop(self) -> None:
        with self._lock:
            self._stop_event.set()
            was_running = self._running
            self._running = False
        if was_running:
            logger.info("Real-time engine stopped")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the loop thread to exit after stop()."""
        if self._thread is not None:
            self._thread.join(timeout)

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_sec):
            self._run_once()

    def _run_once(self) -> Optional[CycleReport]:
        try:
            report = self.engine.run_cycle()
        except Exception:
            logger.exception("Error in real-time processing")
            return None
        self.cycles += 1
        return report
