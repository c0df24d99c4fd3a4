"""Critical spares import from the tabular spares dataset.

Each row becomes a SpareCreate. Expected life and replacement cost are not in
the dataset, so they are derived from keywords in the item description.
Initial operating hours, load factor and wear are randomized so a freshly
seeded fleet already shows a spread of conditions.
"""

import logging
import random
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from asset_twin.degradation import predict_replacement_date
from asset_twin.errors import DataSourceUnavailable
from asset_twin.models import SpareCreate

logger = logging.getLogger(__name__)

DEFAULT_LIFE_HOURS = 8760  # 1 year
DEFAULT_COST_BAND = (5000.0, 15000.0)

# (keywords, expected life hours); first match wins
LIFE_BANDS: List[Tuple[Tuple[str, ...], int]] = [
    (("bearing",), 8760),  # 1 year
    (("gear",), 17520),  # 2 years
    (("belt", "coupling"), 4380),  # 6 months
    (("sensor", "switch"), 26280),  # 3 years (electronics)
    (("seal", "wiper"), 2190),  # 3 months
    (("motor", "pump"), 35040),  # 4 years
]

# (keywords, (low, high) INR); first match wins
COST_BANDS: List[Tuple[Tuple[str, ...], Tuple[float, float]]] = [
    (("bearing",), (5000.0, 15000.0)),
    (("gear",), (15000.0, 40000.0)),
    (("motor", "pump"), (25000.0, 75000.0)),
    (("sensor", "switch"), (3000.0, 10000.0)),
    (("seal", "belt"), (1000.0, 5000.0)),
]

COLUMNS = {
    "item_code": "Item Code",
    "item_description": "Item Description",
    "unit": "Unit",
    "min_stock": "Min Stock",
    "reorder_level": "Reorder Level",
    "quantity_in_hand": "Existing Stock",
    "machine_type": "Status",
}


def _match(description: str, bands):
    desc = description.lower()
    for keywords, value in bands:
        if any(k in desc for k in keywords):
            return value
    return None


def expected_life_hours(description: str) -> int:
    """Expected life in operating hours for a spare description."""
    return _match(description, LIFE_BANDS) or DEFAULT_LIFE_HOURS


def replacement_cost(description: str, rng: random.Random) -> float:
    """Random replacement cost (INR) within the description's cost band."""
    low, high = _match(description, COST_BANDS) or DEFAULT_COST_BAND
    return low + rng.random() * (high - low)


def _as_int(value, default: int) -> int:
    """Parse a numeric cell; blank or unparsable cells (and 0) use the default."""
    try:
        parsed = int(float(str(value).strip()))
    except (TypeError, ValueError):
        return default
    return parsed or default


def _as_str(value, default: str = "") -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return default
    text = str(value).strip()
    return text or default


def spare_from_row(
    row: Mapping,
    rng: random.Random,
    now: datetime,
    hours_per_day: float = 8.0,
) -> SpareCreate:
    """Build a SpareCreate from one dataset row."""
    description = _as_str(row.get(COLUMNS["item_description"]))
    life_hours = expected_life_hours(description)
    operating_hours = rng.randrange(5000)
    load_factor = 0.8 + rng.random() * 0.4
    wear = rng.random() * 100

    predicted = None
    if wear and operating_hours:
        predicted = predict_replacement_date(wear, life_hours, now, hours_per_day)

    return SpareCreate(
        item_code=_as_str(row.get(COLUMNS["item_code"])),
        item_description=description,
        unit=_as_str(row.get(COLUMNS["unit"])),
        min_stock=_as_int(row.get(COLUMNS["min_stock"]), 1),
        reorder_level=_as_int(row.get(COLUMNS["reorder_level"]), 2),
        quantity_in_hand=max(0, _as_int(row.get(COLUMNS["quantity_in_hand"]), 0)),
        machine_type=_as_str(row.get(COLUMNS["machine_type"]), "CNC"),
        operating_hours=operating_hours,
        load_factor=load_factor,
        wear_percentage=wear,
        expected_life_hours=life_hours,
        predicted_replacement_date=predicted,
        replacement_cost_inr=replacement_cost(description, rng),
    )


def spares_from_rows(
    rows: Iterable[Mapping],
    rng: Optional[random.Random] = None,
    clock: Callable[[], datetime] = datetime.now,
    hours_per_day: float = 8.0,
) -> List[SpareCreate]:
    """Convert rows to spares, skipping rows without an item code."""
    rng = rng or random.Random()
    now = clock()
    spares = []
    for i, row in enumerate(rows):
        if not _as_str(row.get(COLUMNS["item_code"])):
            logger.warning("Skipping spares row %d: missing item code", i)
            continue
        spares.append(spare_from_row(row, rng, now, hours_per_day))
    return spares


def read_spares_csv(path: Path | str) -> pd.DataFrame:
    """Read the spares dataset as strings. Raises DataSourceUnavailable."""
    path = Path(path)
    if not path.exists():
        raise DataSourceUnavailable(f"Spares dataset not found: {path}")
    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, ValueError) as e:
        raise DataSourceUnavailable(f"Spares dataset unreadable: {path}: {e}") from e


def load_spares(
    path: Path | str,
    rng: Optional[random.Random] = None,
    clock: Callable[[], datetime] = datetime.now,
    hours_per_day: float = 8.0,
) -> List[SpareCreate]:
    """Load spares from a CSV file."""
    df = read_spares_csv(path)
    spares = spares_from_rows(df.to_dict("records"), rng, clock, hours_per_day)
    logger.info("Loaded %d critical spares from %s", len(spares), path)
    return spares
