"""Exception types raised by the asset twin core."""


class AssetTwinError(Exception):
    """Base class for asset twin errors."""


class NotFoundError(AssetTwinError, KeyError):
    """Requested entity id does not exist."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")

    def __str__(self) -> str:
        return self.args[0]


class ConflictError(AssetTwinError):
    """A uniqueness constraint would be violated (e.g. duplicate item code)."""


class ExternalChannelError(AssetTwinError):
    """Notification channel could not deliver a message."""


class DataSourceUnavailable(AssetTwinError):
    """Seed data source is missing or unreadable."""
