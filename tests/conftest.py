"""Shared test fixtures for asset-twin tests."""

import random
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from asset_twin import (
    AssetTwinEngine,
    DeliveryResult,
    ExternalChannelError,
    MachineCreate,
    MemoryStorage,
    NotificationChannel,
    ResolvedConfig,
    SpareCreate,
)


class FakeClock:
    """Controllable clock; call it to get the current time."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 8, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingChannel(NotificationChannel):
    """Channel that records every message and reports success."""

    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent: List[dict] = []

    def send(self, to=None, body=None, content_sid=None, content_variables=None):
        self.sent.append(
            {
                "to": to,
                "body": body,
                "content_sid": content_sid,
                "content_variables": content_variables,
            }
        )
        return DeliveryResult(ok=self.ok, status=201 if self.ok else 400)


class FailingChannel(NotificationChannel):
    """Channel whose provider is unreachable."""

    def __init__(self):
        self.attempts = 0

    def send(self, to=None, body=None, content_sid=None, content_variables=None):
        self.attempts += 1
        raise ExternalChannelError("network unreachable")


class BlockingChannel(NotificationChannel):
    """Channel that hangs until released."""

    def __init__(self):
        self.release = threading.Event()
        self.entered = threading.Event()

    def send(self, to=None, body=None, content_sid=None, content_variables=None):
        self.entered.set()
        self.release.wait(timeout=5)
        return DeliveryResult(ok=True, status=201)


@pytest.fixture
def config_dir() -> Path:
    """Path to the project config directory."""
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def dataset_path() -> Path:
    """Path to the bundled critical spares dataset."""
    return Path(__file__).parent.parent / "data" / "critical_spares_dataset.csv"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def store(clock: FakeClock) -> MemoryStorage:
    return MemoryStorage(clock=clock)


@pytest.fixture
def resolved() -> ResolvedConfig:
    """Defaults with inline delivery and no dataset."""
    cfg = ResolvedConfig()
    cfg.notifications.synchronous = True
    cfg.seed.csv_path = None
    cfg.seed.auto_seed = False
    return cfg


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def make_engine(resolved, clock, rng, channel) -> Callable[..., AssetTwinEngine]:
    """Factory for engines sharing the test clock and random source."""
    engines = []

    def _make(
        config: Optional[ResolvedConfig] = None,
        channel_override: Optional[NotificationChannel] = None,
        **kwargs,
    ) -> AssetTwinEngine:
        engine = AssetTwinEngine(
            config or resolved,
            channel=channel_override or channel,
            rng=kwargs.pop("rng", rng),
            clock=kwargs.pop("clock", clock),
            **kwargs,
        )
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.close()


@pytest.fixture
def engine(make_engine) -> AssetTwinEngine:
    return make_engine()


@pytest.fixture
def machine_payload() -> Callable[..., MachineCreate]:
    def _payload(**overrides) -> MachineCreate:
        data = {
            "name": "VMC-01",
            "component_type": "Ball Screw",
            "initial_life": 80,
            "operating_hours": 40,
            "load_factor": 0.5,
            "replacement_cost": 85000,
        }
        data.update(overrides)
        return MachineCreate(**data)

    return _payload


@pytest.fixture
def spare_payload() -> Callable[..., SpareCreate]:
    def _payload(**overrides) -> SpareCreate:
        data = {
            "item_code": "CS-1001",
            "item_description": "Spindle Bearing 7014",
            "unit": "Nos",
            "min_stock": 2,
            "reorder_level": 3,
            "quantity_in_hand": 5,
            "machine_type": "CNC",
            "operating_hours": 1200,
            "load_factor": 1.0,
            "wear_percentage": 40.0,
            "expected_life_hours": 8760,
            "replacement_cost_inr": 12000,
        }
        data.update(overrides)
        return SpareCreate(**data)

    return _payload
