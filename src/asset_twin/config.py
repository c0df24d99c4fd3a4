"""Configuration schemas - re-exports from loader for convenience."""

# Re-export config types from loader
from asset_twin.loader import (
    AlertConfig,
    ConfigLoader,
    DegradationConfig,
    EngineConfig,
    NotificationConfig,
    ResolvedConfig,
    SeedConfig,
)

__all__ = [
    "ConfigLoader",
    "EngineConfig",
    "DegradationConfig",
    "AlertConfig",
    "NotificationConfig",
    "SeedConfig",
    "ResolvedConfig",
]
