"""Asset wear twin: degradation simulation and threshold alerting."""

from asset_twin.alerts import AlertEvaluator, AlertEvent
from asset_twin.cli import serve, simulate
from asset_twin.config import (
    AlertConfig,
    ConfigLoader,
    DegradationConfig,
    EngineConfig,
    NotificationConfig,
    ResolvedConfig,
    SeedConfig,
)
from asset_twin.degradation import (
    DegradationSimulator,
    advance_spare,
    machine_wear,
    predict_replacement_date,
)
from asset_twin.engine import AssetTwinEngine, CycleReport
from asset_twin.errors import (
    AssetTwinError,
    ConflictError,
    DataSourceUnavailable,
    ExternalChannelError,
    NotFoundError,
)
from asset_twin.models import (
    Alert,
    AlertCreate,
    AlertType,
    ComponentType,
    CriticalSpare,
    Machine,
    MachineCreate,
    MachineUpdate,
    MaintenanceLog,
    MaintenanceLogCreate,
    MaintenanceType,
    Severity,
    SpareCreate,
    SpareUpdate,
)
from asset_twin.notifications import (
    DeliveryResult,
    NotificationChannel,
    NotificationDispatcher,
    NullChannel,
    TwilioWhatsAppChannel,
)
from asset_twin.scheduler import RealtimeScheduler
from asset_twin.storage import MemoryStorage, Storage

__all__ = [
    # Models
    "ComponentType",
    "Severity",
    "AlertType",
    "MaintenanceType",
    "Machine",
    "MachineCreate",
    "MachineUpdate",
    "CriticalSpare",
    "SpareCreate",
    "SpareUpdate",
    "Alert",
    "AlertCreate",
    "MaintenanceLog",
    "MaintenanceLogCreate",
    # Config
    "ConfigLoader",
    "EngineConfig",
    "DegradationConfig",
    "AlertConfig",
    "NotificationConfig",
    "SeedConfig",
    "ResolvedConfig",
    # Errors
    "AssetTwinError",
    "NotFoundError",
    "ConflictError",
    "ExternalChannelError",
    "DataSourceUnavailable",
    # Storage
    "Storage",
    "MemoryStorage",
    # Simulation & alerting
    "DegradationSimulator",
    "machine_wear",
    "advance_spare",
    "predict_replacement_date",
    "AlertEvaluator",
    "AlertEvent",
    # Notifications
    "DeliveryResult",
    "NotificationChannel",
    "NullChannel",
    "NotificationDispatcher",
    "TwilioWhatsAppChannel",
    # Engine
    "AssetTwinEngine",
    "CycleReport",
    "RealtimeScheduler",
    # CLI
    "serve",
    "simulate",
]
