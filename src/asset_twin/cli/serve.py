"""Serve command: run the real-time scheduler until interrupted."""

import time
from typing import Optional

from asset_twin.engine import AssetTwinEngine
from asset_twin.loader import ConfigLoader
from asset_twin.scheduler import RealtimeScheduler


def serve(
    config_dir: str = "config",
    interval_sec: Optional[float] = None,
    max_cycles: Optional[int] = None,
) -> RealtimeScheduler:
    """Load the fleet, seed spares and drive the engine in real time.

    Args:
        config_dir: Path to config directory
        interval_sec: Override engine.interval_sec
        max_cycles: Stop after this many cycles (None runs until Ctrl-C)

    Returns:
        The stopped scheduler
    """
    loader = ConfigLoader(config_dir)
    engine = AssetTwinEngine(loader.resolve())
    for machine in loader.load_machines():
        engine.create_machine(machine)
    engine.seed_spares()

    scheduler = RealtimeScheduler(engine, interval_sec)
    print(f"Serving asset twin from {config_dir} (every {scheduler.interval_sec}s)")
    print("Press Ctrl-C to stop.")

    scheduler.start()
    try:
        while scheduler.is_running:
            if max_cycles is not None and scheduler.cycles >= max_cycles:
                break
            time.sleep(0.2)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()
        scheduler.join(timeout=scheduler.interval_sec)
        engine.close()

    print(f"\nStopped after {scheduler.cycles} cycle(s).")
    return scheduler
