"""In-memory entity store with one lock per collection."""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from asset_twin.errors import ConflictError
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
from asset_twin.storage.base import Storage

logger = logging.getLogger(__name__)

# Spare fields that may legitimately be cleared by an update
_NULLABLE_SPARE_FIELDS = {"last_maintenance_date", "predicted_replacement_date"}


def _changes(data, nullable=frozenset()) -> dict:
    """Fields explicitly supplied in a partial update."""
    return {
        k: v
        for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in nullable
    }


class MemoryStorage(Storage):
    """Process-lifetime store backed by dicts.

    Lock order when more than one is needed: spares, then logs. Reads hand
    out copies so callers cannot mutate stored rows.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

        self._machines: Dict[str, Machine] = {}
        self._spares: Dict[str, CriticalSpare] = {}
        self._alerts: Dict[str, Alert] = {}
        self._logs: Dict[str, MaintenanceLog] = {}

        self._machine_lock = threading.RLock()
        self._spare_lock = threading.RLock()
        self._alert_lock = threading.RLock()
        self._log_lock = threading.RLock()

    # --- Machines ---

    def list_machines(self) -> List[Machine]:
        with self._machine_lock:
            return [m.model_copy() for m in self._machines.values()]

    def get_machine(self, machine_id: str) -> Optional[Machine]:
        with self._machine_lock:
            machine = self._machines.get(machine_id)
            return machine.model_copy() if machine else None

    def create_machine(self, data: MachineCreate) -> Machine:
        now = self._clock()
        machine = Machine(
            **data.model_dump(),
            remaining_life=data.initial_life,
            created_at=now,
            updated_at=now,
        )
        with self._machine_lock:
            self._machines[machine.id] = machine
        return machine.model_copy()

    def update_machine(
        self, machine_id: str, data: MachineUpdate
    ) -> Optional[Machine]:
        with self._machine_lock:
            existing = self._machines.get(machine_id)
            if existing is None:
                return None
            updated = existing.model_copy(
                update={**_changes(data), "updated_at": self._clock()}
            )
            self._machines[machine_id] = updated
            return updated.model_copy()

    def delete_machine(self, machine_id: str) -> bool:
        with self._machine_lock:
            return self._machines.pop(machine_id, None) is not None

    def apply_machines(self, fn: Callable[[Machine], Machine]) -> List[Machine]:
        with self._machine_lock:
            now = self._clock()
            staged = {
                machine_id: fn(machine.model_copy()).model_copy(
                    update={"updated_at": now}
                )
                for machine_id, machine in self._machines.items()
            }
            # Commit only after every row succeeded
            self._machines.update(staged)
            return [m.model_copy() for m in staged.values()]

    # --- Critical spares ---

    def list_spares(self) -> List[CriticalSpare]:
        with self._spare_lock:
            return [s.model_copy() for s in self._spares.values()]

    def get_spare(self, spare_id: str) -> Optional[CriticalSpare]:
        with self._spare_lock:
            spare = self._spares.get(spare_id)
            return spare.model_copy() if spare else None

    def create_spare(self, data: SpareCreate) -> CriticalSpare:
        now = self._clock()
        spare = CriticalSpare(**data.model_dump(), created_at=now, updated_at=now)
        with self._spare_lock:
            if any(s.item_code == spare.item_code for s in self._spares.values()):
                raise ConflictError(f"Duplicate item code: {spare.item_code}")
            self._spares[spare.id] = spare
        return spare.model_copy()

    def update_spare(
        self, spare_id: str, data: SpareUpdate
    ) -> Optional[CriticalSpare]:
        with self._spare_lock:
            existing = self._spares.get(spare_id)
            if existing is None:
                return None
            updated = existing.model_copy(
                update={
                    **_changes(data, _NULLABLE_SPARE_FIELDS),
                    "updated_at": self._clock(),
                }
            )
            self._spares[spare_id] = updated
            return updated.model_copy()

    def delete_spare(self, spare_id: str) -> bool:
        with self._spare_lock:
            return self._spares.pop(spare_id, None) is not None

    def apply_spares(
        self, fn: Callable[[CriticalSpare], CriticalSpare]
    ) -> List[CriticalSpare]:
        with self._spare_lock:
            now = self._clock()
            staged = {
                spare_id: fn(spare.model_copy()).model_copy(update={"updated_at": now})
                for spare_id, spare in self._spares.items()
            }
            self._spares.update(staged)
            return [s.model_copy() for s in staged.values()]

    def consume_spare(
        self, spare_id: str, quantity: int
    ) -> Optional[Tuple[int, CriticalSpare]]:
        with self._spare_lock:
            existing = self._spares.get(spare_id)
            if existing is None:
                return None
            remaining = max(0, existing.quantity_in_hand - quantity)
            consumed = existing.quantity_in_hand - remaining
            updated = existing.model_copy(
                update={"quantity_in_hand": remaining, "updated_at": self._clock()}
            )
            self._spares[spare_id] = updated
            return consumed, updated.model_copy()

    # --- Alerts ---

    def list_alerts(self) -> List[Alert]:
        with self._alert_lock:
            # Newest insertion first among equal timestamps
            alerts = [a.model_copy() for a in reversed(list(self._alerts.values()))]
        return sorted(alerts, key=lambda a: a.created_at, reverse=True)

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._alert_lock:
            alert = self._alerts.get(alert_id)
            return alert.model_copy() if alert else None

    def create_alert(self, data: AlertCreate) -> Alert:
        alert = Alert(**data.model_dump(), created_at=self._clock())
        with self._alert_lock:
            self._alerts[alert.id] = alert
        return alert.model_copy()

    def record_alert_delivery(self, alert_id: str, sent: bool) -> Optional[Alert]:
        with self._alert_lock:
            existing = self._alerts.get(alert_id)
            if existing is None:
                return None
            updated = existing.model_copy(update={"sent_via_whatsapp": sent})
            self._alerts[alert_id] = updated
            return updated.model_copy()

    # --- Maintenance logs ---

    def list_maintenance_logs(
        self, spare_id: Optional[str] = None
    ) -> List[MaintenanceLog]:
        with self._log_lock:
            logs = [log.model_copy() for log in self._logs.values()]
        if spare_id:
            return [log for log in logs if log.spare_id == spare_id]
        return logs

    def create_maintenance_log(self, data: MaintenanceLogCreate) -> MaintenanceLog:
        with self._spare_lock, self._log_lock:
            now = self._clock()
            log = MaintenanceLog(**data.model_dump(), created_at=now)
            self._logs[log.id] = log

            if data.maintenance_type == MaintenanceType.REPLACEMENT:
                spare = self._spares.get(data.spare_id)
                if spare is None:
                    logger.warning(
                        "Replacement logged for unknown spare %s", data.spare_id
                    )
                else:
                    self._spares[spare.id] = spare.model_copy(
                        update={
                            "quantity_in_hand": max(
                                0, spare.quantity_in_hand - data.quantity_used
                            ),
                            "operating_hours": 0,
                            "wear_percentage": 0.0,
                            "last_maintenance_date": now,
                            "predicted_replacement_date": None,
                            "updated_at": now,
                        }
                    )
            return log.model_copy()

    def clear(self) -> None:
        with self._machine_lock, self._spare_lock, self._alert_lock, self._log_lock:
            self._machines.clear()
            self._spares.clear()
            self._alerts.clear()
            self._logs.clear()
