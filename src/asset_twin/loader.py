"""YAML configuration loader with environment fallbacks."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from asset_twin.models import MachineCreate


@dataclass
class EngineConfig:
    """Scheduler cadence and randomized inventory consumption."""

    interval_sec: float = 30.0
    consumption_probability: float = 0.3  # chance a cycle consumes stock
    consumption_spare_probability: float = 0.1  # chance per spare
    random_seed: Optional[int] = None


@dataclass
class DegradationConfig:
    """Wear model constants."""

    machine_wear_rate: float = 0.05
    max_spare_hours_per_tick: int = 167  # ~one week
    operating_hours_per_day: float = 8.0


@dataclass
class AlertConfig:
    """Alert thresholds and re-alerting policy."""

    threshold: float = 20.0  # remaining life %
    mode: str = "reminder"  # "reminder" | "edge"

    def __post_init__(self):
        if self.mode not in ("reminder", "edge"):
            raise ValueError(f"Unknown alert mode: {self.mode}")


@dataclass
class NotificationConfig:
    """Outbound WhatsApp channel settings (Twilio)."""

    enabled: bool = True
    synchronous: bool = False
    max_workers: int = 2
    max_pending: int = 100  # queued deliveries before alerts go unsent
    timeout_sec: float = 10.0
    recipient: Optional[str] = None
    account_sid: Optional[str] = None
    auth_token: Optional[str] = None
    from_number: Optional[str] = None
    api_base: str = "https://api.twilio.com/2010-04-01"

    @property
    def has_credentials(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)


@dataclass
class SeedConfig:
    """Critical spares import source."""

    csv_path: Optional[str] = "data/critical_spares_dataset.csv"
    auto_seed: bool = True  # seed on first spare listing


@dataclass
class ResolvedConfig:
    """Fully resolved configuration for an engine instance."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    degradation: DegradationConfig = field(default_factory=DegradationConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    seed: SeedConfig = field(default_factory=SeedConfig)


class ConfigLoader:
    """Loads config/defaults.yaml and resolves it into dataclasses."""

    def __init__(
        self,
        config_dir: Path | str = "config",
        environ: Optional[Dict[str, str]] = None,
    ):
        self.config_dir = Path(config_dir)
        self.environ = os.environ if environ is None else environ

    def resolve(self) -> ResolvedConfig:
        """Load defaults.yaml (if present) and apply environment fallbacks."""
        path = self.config_dir / "defaults.yaml"
        data = self._load_yaml(path) if path.exists() else {}

        seed_data = dict(data.get("seed", {}))
        csv_path = seed_data.get("csv_path", SeedConfig.csv_path)
        # Relative dataset paths resolve against the config dir's parent
        if csv_path and not Path(csv_path).is_absolute():
            seed_data["csv_path"] = str(self.config_dir.parent / csv_path)

        return ResolvedConfig(
            engine=EngineConfig(**data.get("engine", {})),
            degradation=DegradationConfig(**data.get("degradation", {})),
            alerts=AlertConfig(**data.get("alerts", {})),
            notifications=self._with_env(
                NotificationConfig(**data.get("notifications", {}))
            ),
            seed=SeedConfig(**seed_data),
        )

    def load_machines(self) -> List[MachineCreate]:
        """Load the initial machine fleet from config/machines.yaml."""
        path = self.config_dir / "machines.yaml"
        if not path.exists():
            return []
        data = self._load_yaml(path)
        return [MachineCreate(**m) for m in data.get("machines", [])]

    def _with_env(self, cfg: NotificationConfig) -> NotificationConfig:
        """Fill Twilio credentials left blank in YAML from the environment."""
        env = self.environ
        cfg.account_sid = cfg.account_sid or env.get("TWILIO_ACCOUNT_SID")
        cfg.auth_token = cfg.auth_token or env.get("TWILIO_AUTH_TOKEN")
        # Support legacy TWILIO_PHONE_NUMBER
        cfg.from_number = (
            cfg.from_number
            or env.get("TWILIO_WHATSAPP_FROM")
            or env.get("TWILIO_PHONE_NUMBER")
        )
        cfg.recipient = cfg.recipient or env.get("TWILIO_WHATSAPP_TO")
        return cfg

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            return yaml.safe_load(f) or {}
