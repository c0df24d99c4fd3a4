"""Simulate command: run engine cycles offline and export the fleet state."""

import json
import random
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from asset_twin.engine import AssetTwinEngine
from asset_twin.loader import ConfigLoader
from asset_twin.notifications import NullChannel
from asset_twin.reporting import (
    alerts_frame,
    machines_frame,
    maintenance_frame,
    spares_frame,
)


def simulate(
    config_dir: str = "config",
    cycles: int = 10,
    output_dir: str = "output",
    export: bool = True,
    seed: Optional[int] = None,
    notify: bool = False,
) -> Tuple[Dict[str, Any], Optional[Path]]:
    """Run scheduler cycles back to back, without waiting for the interval.

    Args:
        config_dir: Path to config directory (defaults.yaml, machines.yaml)
        cycles: Number of full simulation cycles to run
        output_dir: Directory for CSV/JSON export
        export: If True, export machines, spares, alerts, logs and a summary
        seed: Random seed (overrides engine.random_seed)
        notify: If True, deliver alerts through the configured channel

    Returns:
        Tuple of (fleet summary, output_dir or None)
    """
    loader = ConfigLoader(config_dir)
    resolved = loader.resolve()
    if seed is not None:
        resolved.engine.random_seed = seed
    # Offline runs deliver inline so the export sees final delivery flags
    resolved.notifications.synchronous = True

    engine = AssetTwinEngine(
        resolved,
        channel=None if notify else NullChannel(),
        rng=random.Random(resolved.engine.random_seed),
    )
    try:
        for machine in loader.load_machines():
            engine.create_machine(machine)
        engine.seed_spares()

        print(f"Running {cycles} cycle(s)...")
        print(f"  Machines: {len(engine.list_machines())}")
        print(f"  Spares:   {len(engine.list_spares())}")

        for _ in range(cycles):
            engine.run_cycle()
    finally:
        engine.close()

    summary = engine.fleet_summary()
    summary["cycles"] = cycles
    summary["random_seed"] = resolved.engine.random_seed
    _print_summary(summary)

    if not export:
        return summary, None

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    frames = {
        "machines": machines_frame(engine.list_machines()),
        "spares": spares_frame(engine.list_spares()),
        "alerts": alerts_frame(engine.list_alerts()),
        "maintenance": maintenance_frame(engine.list_maintenance_logs()),
    }
    print(f"\nExported to {out}:")
    for name, df in frames.items():
        path = out / f"{name}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"  {path.name} ({len(df)} rows)")

    summary_path = out / f"summary_{timestamp}.json"
    with open(summary_path, "w") as f:
        json.dump(summary, f, indent=2, default=str)
    print(f"  {summary_path.name}")

    return summary, out


def _print_summary(summary: Dict[str, Any]) -> None:
    machines = summary["machines"]
    spares = summary["spares"]
    alerts = summary["alerts"]

    print("\n--- FLEET SUMMARY ---")
    print(
        f"Machines: {machines['total']} "
        f"(healthy {machines['healthy']}, warning {machines['warning']}, "
        f"critical {machines['critical']})"
    )
    print(
        f"Spares:   {spares['total']} "
        f"(green {spares['green']}, yellow {spares['yellow']}, red {spares['red']}, "
        f"low stock {spares['low_stock']})"
    )
    print(f"Alerts:   {alerts['total']} ({alerts['critical']} critical)")
    if "cost_at_risk" in machines:
        print(f"Machine replacement cost at risk: ₹{machines['cost_at_risk']:,.2f}")
    if "cost_at_risk" in spares:
        print(f"Spare replacement cost at risk:   ₹{spares['cost_at_risk']:,.2f}")
