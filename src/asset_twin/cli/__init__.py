"""CLI commands for asset-twin."""

from asset_twin.cli.serve import serve
from asset_twin.cli.simulate import simulate

__all__ = [
    "serve",
    "simulate",
]
