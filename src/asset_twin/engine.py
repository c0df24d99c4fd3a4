"""Asset twin engine: the operations exposed to the boundary layer."""

import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional

from asset_twin.alerts import AlertEvaluator
from asset_twin.degradation import DegradationSimulator
from asset_twin.errors import ConflictError, DataSourceUnavailable, NotFoundError
from asset_twin.loader import ConfigLoader, ResolvedConfig
from asset_twin.models import (
    Alert,
    AlertCreate,
    CriticalSpare,
    Machine,
    MachineCreate,
    MachineUpdate,
    MaintenanceLog,
    MaintenanceLogCreate,
    MaintenanceType,
    SpareCreate,
    SpareUpdate,
)
from asset_twin.notifications import (
    DeliveryResult,
    NotificationChannel,
    NotificationDispatcher,
    NullChannel,
    TwilioWhatsAppChannel,
)
from asset_twin.notifications.base import ContentVariables
from asset_twin.reporting import fleet_summary
from asset_twin.seeding import load_spares, spares_from_rows
from asset_twin.storage import MemoryStorage, Storage

logger = logging.getLogger(__name__)

AUTO_CONSUMPTION_NOTES = "Automated consumption - real-time usage simulation"
AUTO_CONSUMPTION_PERFORMER = "System Auto-Tracking"
AUTO_CONSUMPTION_COST_SHARE = 0.1  # of replacement cost


@dataclass
class CycleReport:
    """What one scheduler cycle did."""

    machines: int = 0
    spares: int = 0
    machine_alerts: int = 0
    spare_alerts: int = 0
    consumption_logs: List[MaintenanceLog] = field(default_factory=list)


class AssetTwinEngine:
    """Degradation simulation and threshold alerting over an entity store.

    Every mutation path (create, simulate-now, scheduler cycle) runs the
    same pipeline: store write, alert evaluation, notification dispatch.
    """

    def __init__(
        self,
        config: Optional[ResolvedConfig] = None,
        store: Optional[Storage] = None,
        channel: Optional[NotificationChannel] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the engine.

        Args:
            config: Resolved configuration (defaults when omitted)
            store: Entity store (in-memory when omitted)
            channel: Notification channel (Twilio or null, per config)
            rng: Random source for wear draws, seeding and consumption
            clock: Returns the current time
        """
        self.config = config or ResolvedConfig()
        self.clock = clock
        self.rng = rng or random.Random(self.config.engine.random_seed)
        self.store = store or MemoryStorage(clock=clock)

        self.simulator = DegradationSimulator(
            self.store, self.config.degradation, self.rng, clock
        )
        self.evaluator = AlertEvaluator(self.store, self.config.alerts)

        notify_cfg = self.config.notifications
        if channel is None:
            channel = (
                TwilioWhatsAppChannel(notify_cfg) if notify_cfg.enabled else NullChannel()
            )
        self.dispatcher = NotificationDispatcher(
            channel,
            self.store,
            recipient=notify_cfg.recipient,
            synchronous=notify_cfg.synchronous,
            max_workers=notify_cfg.max_workers,
            max_pending=notify_cfg.max_pending,
        )

        self._spares_loaded = False
        self._seed_lock = threading.Lock()

    @classmethod
    def from_config_dir(cls, config_dir: Path | str = "config", **kwargs):
        """Build an engine from config/defaults.yaml."""
        return cls(ConfigLoader(config_dir).resolve(), **kwargs)

    def close(self) -> None:
        """Wait for queued notifications and stop the delivery pool."""
        self.dispatcher.shutdown()

    # --- Machines ---

    def list_machines(self) -> List[Machine]:
        return self.store.list_machines()

    def get_machine(self, machine_id: str) -> Machine:
        machine = self.store.get_machine(machine_id)
        if machine is None:
            raise NotFoundError("Machine", machine_id)
        return machine

    def create_machine(self, data: MachineCreate) -> Machine:
        """Register a machine and alert at once if it starts below threshold."""
        machine = self.store.create_machine(data)
        event = self.evaluator.evaluate_machine(machine)
        if event:
            self.dispatcher.dispatch(event)
        return machine

    def update_machine(self, machine_id: str, data: MachineUpdate) -> Machine:
        machine = self.store.update_machine(machine_id, data)
        if machine is None:
            raise NotFoundError("Machine", machine_id)
        return machine

    def delete_machine(self, machine_id: str) -> None:
        if not self.store.delete_machine(machine_id):
            raise NotFoundError("Machine", machine_id)
        self.evaluator.forget(machine_id)

    def simulate_machines(self) -> List[Machine]:
        """Run one machine wear tick now, with alerting."""
        machines = self.simulator.tick_machines()
        self.dispatcher.dispatch_all(self.evaluator.evaluate_machines(machines))
        return machines

    # --- Critical spares ---

    def list_spares(self) -> List[CriticalSpare]:
        if self.config.seed.auto_seed and not self._spares_loaded:
            return self.seed_spares()
        return self.store.list_spares()

    def get_spare(self, spare_id: str) -> CriticalSpare:
        spare = self.store.get_spare(spare_id)
        if spare is None:
            raise NotFoundError("Critical spare", spare_id)
        return spare

    def create_spare(self, data: SpareCreate) -> CriticalSpare:
        return self.store.create_spare(data)

    def update_spare(self, spare_id: str, data: SpareUpdate) -> CriticalSpare:
        spare = self.store.update_spare(spare_id, data)
        if spare is None:
            raise NotFoundError("Critical spare", spare_id)
        return spare

    def delete_spare(self, spare_id: str) -> None:
        if not self.store.delete_spare(spare_id):
            raise NotFoundError("Critical spare", spare_id)
        self.evaluator.forget(spare_id)

    def simulate_spares(self) -> List[CriticalSpare]:
        """Run one spare wear tick now, with alerting."""
        spares = self.simulator.tick_spares()
        self.dispatcher.dispatch_all(self.evaluator.evaluate_spares(spares))
        return spares

    def seed_spares(
        self, rows: Optional[Iterable[Mapping]] = None
    ) -> List[CriticalSpare]:
        """Import critical spares once per engine.

        Reads the configured CSV unless `rows` are given. A second call
        returns the current spares unchanged. An unavailable source counts
        as zero spares and leaves seeding open for a later attempt.
        """
        with self._seed_lock:
            if self._spares_loaded:
                return self.store.list_spares()

            per_day = self.config.degradation.operating_hours_per_day
            try:
                if rows is not None:
                    payloads = spares_from_rows(rows, self.rng, self.clock, per_day)
                elif self.config.seed.csv_path:
                    payloads = load_spares(
                        self.config.seed.csv_path, self.rng, self.clock, per_day
                    )
                else:
                    raise DataSourceUnavailable("No spares dataset configured")
            except DataSourceUnavailable as e:
                logger.warning("Skipping critical spares import: %s", e)
                return self.store.list_spares()

            created = 0
            for payload in payloads:
                try:
                    self.store.create_spare(payload)
                    created += 1
                except ConflictError as e:
                    logger.warning("Skipping spare: %s", e)

            self._spares_loaded = True
            logger.info("Loaded %d critical spares into storage", created)
            return self.store.list_spares()

    @property
    def spares_loaded(self) -> bool:
        return self._spares_loaded

    # --- Alerts ---

    def list_alerts(self) -> List[Alert]:
        return self.store.list_alerts()

    def create_alert(self, data: AlertCreate) -> Alert:
        return self.store.create_alert(data)

    def send_message(
        self,
        to: Optional[str] = None,
        body: Optional[str] = None,
        content_sid: Optional[str] = None,
        content_variables: Optional[ContentVariables] = None,
    ) -> DeliveryResult:
        """Send an ad hoc WhatsApp message through the configured channel."""
        return self.dispatcher.send_message(to, body, content_sid, content_variables)

    # --- Maintenance ---

    def list_maintenance_logs(
        self, spare_id: Optional[str] = None
    ) -> List[MaintenanceLog]:
        return self.store.list_maintenance_logs(spare_id)

    def record_maintenance(self, data: MaintenanceLogCreate) -> MaintenanceLog:
        """Append a maintenance log; a replacement renews the spare."""
        log = self.store.create_maintenance_log(data)
        if data.maintenance_type == MaintenanceType.REPLACEMENT:
            logger.info(
                "Replacement recorded for spare %s (%d used)",
                data.spare_id,
                data.quantity_used,
            )
        return log

    def consume_inventory(self) -> List[MaintenanceLog]:
        """Randomly draw 1-2 units from some spares, logging each as a repair."""
        probability = self.config.engine.consumption_spare_probability
        logs = []
        for spare in self.store.list_spares():
            if self.rng.random() >= probability or spare.quantity_in_hand <= 0:
                continue
            requested = self.rng.randint(1, 2)
            result = self.store.consume_spare(spare.id, requested)
            if result is None:
                continue  # deleted meanwhile
            consumed, updated = result
            if consumed == 0:
                continue

            logs.append(
                self.store.create_maintenance_log(
                    MaintenanceLogCreate(
                        spare_id=spare.id,
                        maintenance_type=MaintenanceType.REPAIR,
                        quantity_used=consumed,
                        cost=updated.replacement_cost_inr * AUTO_CONSUMPTION_COST_SHARE,
                        notes=AUTO_CONSUMPTION_NOTES,
                        performed_by=AUTO_CONSUMPTION_PERFORMER,
                    )
                )
            )
            logger.info(
                "Consumed %d units of %s, remaining: %d",
                consumed,
                updated.item_code,
                updated.quantity_in_hand,
            )
        return logs

    # --- Cycles ---

    def run_cycle(self) -> CycleReport:
        """One full scheduler pass: machine tick, spare tick, maybe consumption."""
        machines = self.simulator.tick_machines()
        machine_events = self.evaluator.evaluate_machines(machines)
        self.dispatcher.dispatch_all(machine_events)

        spares = self.simulator.tick_spares()
        spare_events = self.evaluator.evaluate_spares(spares)
        self.dispatcher.dispatch_all(spare_events)

        report = CycleReport(
            machines=len(machines),
            spares=len(spares),
            machine_alerts=len(machine_events),
            spare_alerts=len(spare_events),
        )
        if self.rng.random() < self.config.engine.consumption_probability:
            report.consumption_logs = self.consume_inventory()

        logger.info(
            "Real-time update complete: %d machine alerts, %d spare alerts",
            report.machine_alerts,
            report.spare_alerts,
        )
        return report

    def fleet_summary(self) -> dict:
        return fleet_summary(
            self.store.list_machines(),
            self.store.list_spares(),
            self.store.list_alerts(),
            self.config.alerts.threshold,
        )
