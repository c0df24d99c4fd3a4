"""Abstract storage interface for the entity store."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from asset_twin.models import (
    Alert,
    AlertCreate,
    CriticalSpare,
    Machine,
    MachineCreate,
    MachineUpdate,
    MaintenanceLog,
    MaintenanceLogCreate,
    SpareCreate,
    SpareUpdate,
)


class Storage(ABC):
    """Entity store used by the simulator, evaluator and scheduler.

    Implementations own all mutable state. Lookups of a missing id return
    None (or False for deletes) rather than raising; the engine decides how
    to surface that. Every write to one collection is serialized, and the
    replacement maintenance write is atomic with respect to its spare.
    """

    # --- Machines ---

    @abstractmethod
    def list_machines(self) -> List[Machine]:
        pass

    @abstractmethod
    def get_machine(self, machine_id: str) -> Optional[Machine]:
        pass

    @abstractmethod
    def create_machine(self, data: MachineCreate) -> Machine:
        """Store a new machine born with remaining_life = initial_life."""
        pass

    @abstractmethod
    def update_machine(
        self, machine_id: str, data: MachineUpdate
    ) -> Optional[Machine]:
        pass

    @abstractmethod
    def delete_machine(self, machine_id: str) -> bool:
        pass

    @abstractmethod
    def apply_machines(self, fn: Callable[[Machine], Machine]) -> List[Machine]:
        """Replace every machine with fn(machine) as one atomic pass.

        Returns the updated machines.
        """
        pass

    # --- Critical spares ---

    @abstractmethod
    def list_spares(self) -> List[CriticalSpare]:
        pass

    @abstractmethod
    def get_spare(self, spare_id: str) -> Optional[CriticalSpare]:
        pass

    @abstractmethod
    def create_spare(self, data: SpareCreate) -> CriticalSpare:
        """Store a new spare. Raises ConflictError on a duplicate item code."""
        pass

    @abstractmethod
    def update_spare(
        self, spare_id: str, data: SpareUpdate
    ) -> Optional[CriticalSpare]:
        pass

    @abstractmethod
    def delete_spare(self, spare_id: str) -> bool:
        pass

    @abstractmethod
    def apply_spares(
        self, fn: Callable[[CriticalSpare], CriticalSpare]
    ) -> List[CriticalSpare]:
        """Replace every spare with fn(spare) as one atomic pass."""
        pass

    @abstractmethod
    def consume_spare(
        self, spare_id: str, quantity: int
    ) -> Optional[Tuple[int, CriticalSpare]]:
        """Take up to `quantity` units from stock, floored at zero.

        Returns (units actually consumed, updated spare), or None if the
        spare does not exist.
        """
        pass

    # --- Alerts ---

    @abstractmethod
    def list_alerts(self) -> List[Alert]:
        """All alerts, newest first."""
        pass

    @abstractmethod
    def get_alert(self, alert_id: str) -> Optional[Alert]:
        pass

    @abstractmethod
    def create_alert(self, data: AlertCreate) -> Alert:
        pass

    @abstractmethod
    def record_alert_delivery(self, alert_id: str, sent: bool) -> Optional[Alert]:
        """Record the outcome of the single delivery attempt for an alert."""
        pass

    # --- Maintenance logs ---

    @abstractmethod
    def list_maintenance_logs(
        self, spare_id: Optional[str] = None
    ) -> List[MaintenanceLog]:
        pass

    @abstractmethod
    def create_maintenance_log(self, data: MaintenanceLogCreate) -> MaintenanceLog:
        """Append a log. A replacement also renews the spare's wear lifecycle."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop all entities."""
        pass
