"""Entity store for machines, spares, alerts and maintenance logs.

The engine only talks to the abstract `Storage` interface, so a durable
backend can replace `MemoryStorage` without touching the simulator or the
alert evaluator.

Example usage:
    from asset_twin.storage import MemoryStorage

    store = MemoryStorage()
    machine = store.create_machine(payload)
    store.get_machine(machine.id)
"""

from asset_twin.storage.base import Storage
from asset_twin.storage.memory import MemoryStorage

__all__ = [
    "Storage",
    "MemoryStorage",
]
