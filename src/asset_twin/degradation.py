"""Wear advancement for machines and critical spares.

Two independent models, each applied as a full pass ("tick") over its
collection:

- Machines lose remaining life proportional to their recorded operating
  hours and load: wear = operating_hours * load_factor * wear_rate. The
  operating hours themselves are not advanced by a tick, so every tick
  reapplies the same wear amount until an administrative edit changes it.
- Spares accumulate a random number of operating hours per tick (0 to
  max_spare_hours_per_tick) and wear at 100 / expected_life_hours percent
  per hour, scaled by load. The predicted replacement date assumes a fixed
  number of operating hours per day.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from asset_twin.loader import DegradationConfig
from asset_twin.models import CriticalSpare, Machine
from asset_twin.storage import Storage

logger = logging.getLogger(__name__)


def machine_wear(machine: Machine, wear_rate: float = 0.05) -> float:
    """Remaining life after one tick (never below zero)."""
    wear_amount = machine.operating_hours * machine.load_factor * wear_rate
    return max(0.0, machine.remaining_life - wear_amount)


def predict_replacement_date(
    wear_percentage: float,
    expected_life_hours: float,
    now: datetime,
    hours_per_day: float = 8.0,
) -> Optional[datetime]:
    """Date the spare is expected to reach full wear, or None if worn out."""
    remaining_life = 100.0 - wear_percentage
    if remaining_life <= 0:
        return None
    remaining_hours = expected_life_hours * remaining_life / 100.0
    days_to_replacement = max(1.0, remaining_hours / hours_per_day)
    return now + timedelta(days=days_to_replacement)


def advance_spare(
    spare: CriticalSpare,
    additional_hours: int,
    now: datetime,
    hours_per_day: float = 8.0,
) -> CriticalSpare:
    """Apply `additional_hours` of operation to a spare."""
    hourly_wear_rate = 100.0 / spare.expected_life_hours
    additional_wear = hourly_wear_rate * additional_hours * spare.load_factor
    wear = min(100.0, spare.wear_percentage + additional_wear)
    return spare.model_copy(
        update={
            "operating_hours": spare.operating_hours + additional_hours,
            "wear_percentage": wear,
            "predicted_replacement_date": predict_replacement_date(
                wear, spare.expected_life_hours, now, hours_per_day
            ),
        }
    )


class DegradationSimulator:
    """Runs wear ticks against a store.

    Each tick executes inside the store's atomic apply, so readers never see
    a half-advanced collection.
    """

    def __init__(
        self,
        store: Storage,
        config: Optional[DegradationConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.cfg = config or DegradationConfig()
        self.rng = rng or random.Random()
        self.clock = clock

    def tick_machines(self) -> List[Machine]:
        """Advance wear on every machine; returns the updated machines."""
        rate = self.cfg.machine_wear_rate

        def _wear(machine: Machine) -> Machine:
            return machine.model_copy(
                update={"remaining_life": machine_wear(machine, rate)}
            )

        updated = self.store.apply_machines(_wear)
        logger.debug("Machine tick advanced %d machines", len(updated))
        return updated

    def tick_spares(self) -> List[CriticalSpare]:
        """Advance wear on every spare; returns the updated spares."""
        now = self.clock()
        max_hours = self.cfg.max_spare_hours_per_tick
        per_day = self.cfg.operating_hours_per_day

        def _wear(spare: CriticalSpare) -> CriticalSpare:
            hours = self.rng.randint(0, max_hours)
            return advance_spare(spare, hours, now, per_day)

        updated = self.store.apply_spares(_wear)
        logger.debug("Spare tick advanced %d spares", len(updated))
        return updated
