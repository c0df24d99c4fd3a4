"""Threshold rules that turn post-tick state into Alert records."""

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from asset_twin.loader import AlertConfig
from asset_twin.models import (
    Alert,
    AlertCreate,
    AlertType,
    CriticalSpare,
    Machine,
    Severity,
)
from asset_twin.storage import Storage

logger = logging.getLogger(__name__)


def format_inr(amount: float) -> str:
    return f"₹{amount:,.2f}"


@dataclass
class AlertEvent:
    """A freshly stored alert plus what the notification needs to say."""

    alert: Alert
    subject: str  # machine name or spare item code
    description: str  # component type or item description
    remaining_life: float
    cost: float


class AlertEvaluator:
    """Evaluates machines and spares against the remaining-life and stock rules.

    In "reminder" mode every pass where a condition holds stores a new alert.
    In "edge" mode an alert is stored once per crossing: it stays suppressed
    while the condition holds and re-arms once the condition clears.
    """

    def __init__(self, store: Storage, config: Optional[AlertConfig] = None):
        self.store = store
        self.cfg = config or AlertConfig()
        self._active: Set[Tuple[str, AlertType]] = set()
        self._lock = threading.Lock()

    @property
    def edge_triggered(self) -> bool:
        return self.cfg.mode == "edge"

    # --- Machines ---

    def evaluate_machine(self, machine: Machine) -> Optional[AlertEvent]:
        critical = machine.remaining_life < self.cfg.threshold
        if not self._should_fire(machine.id, AlertType.WEAR if critical else None):
            return None

        message = (
            f"URGENT: {machine.name}'s {machine.component_type.value} at "
            f"{machine.remaining_life:.1f}% life. Replace immediately! "
            f"Cost: {format_inr(machine.replacement_cost)}"
        )
        alert = self.store.create_alert(
            AlertCreate(
                machine_id=machine.id,
                message=message,
                severity=Severity.CRITICAL,
                alert_type=AlertType.WEAR,
            )
        )
        return AlertEvent(
            alert=alert,
            subject=machine.name,
            description=machine.component_type.value,
            remaining_life=machine.remaining_life,
            cost=machine.replacement_cost,
        )

    def evaluate_machines(self, machines: Iterable[Machine]) -> List[AlertEvent]:
        events = [e for e in map(self.evaluate_machine, machines) if e]
        if events:
            logger.info("%d machine alert(s) raised", len(events))
        return events

    # --- Spares ---

    def evaluate_spare(self, spare: CriticalSpare) -> Optional[AlertEvent]:
        remaining = spare.remaining_life
        if remaining < self.cfg.threshold:
            condition: Optional[AlertType] = AlertType.WEAR
        elif spare.is_low_stock:
            condition = AlertType.STOCK
        else:
            condition = None

        if not self._should_fire(spare.id, condition):
            return None

        if condition == AlertType.WEAR:
            message = (
                f"CRITICAL: {spare.item_description} ({spare.item_code}) has "
                f"{remaining:.1f}% life remaining. Immediate replacement needed! "
                f"Cost: {format_inr(spare.replacement_cost_inr)}"
            )
            severity = Severity.CRITICAL
        else:
            message = (
                f"LOW STOCK: {spare.item_description} ({spare.item_code}) has "
                f"{spare.quantity_in_hand} units left (below reorder level of "
                f"{spare.reorder_level}). Replacement cost: "
                f"{format_inr(spare.replacement_cost_inr)}"
            )
            severity = Severity.WARNING

        alert = self.store.create_alert(
            AlertCreate(
                spare_id=spare.id,
                message=message,
                severity=severity,
                alert_type=condition,
            )
        )
        return AlertEvent(
            alert=alert,
            subject=spare.item_code,
            description=spare.item_description,
            remaining_life=remaining,
            cost=spare.replacement_cost_inr,
        )

    def evaluate_spares(self, spares: Iterable[CriticalSpare]) -> List[AlertEvent]:
        events = [e for e in map(self.evaluate_spare, spares) if e]
        if events:
            logger.info("%d spare alert(s) raised", len(events))
        return events

    def forget(self, subject_id: str) -> None:
        """Drop edge state for a deleted machine or spare."""
        with self._lock:
            self._active = {key for key in self._active if key[0] != subject_id}

    def _should_fire(self, subject_id: str, condition: Optional[AlertType]) -> bool:
        if not self.edge_triggered:
            return condition is not None

        with self._lock:
            # Re-arm every condition that no longer holds
            self._active = {
                key
                for key in self._active
                if key[0] != subject_id or key[1] == condition
            }
            if condition is None or (subject_id, condition) in self._active:
                return False
            self._active.add((subject_id, condition))
            return True
