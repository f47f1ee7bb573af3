"""
Ports - Abstract interfaces for external dependencies.

Ports define the contracts that adapters must implement.
This enables dependency inversion and easy testing.
"""

from .version_control import VersionControlPort
from .patch_tracker import PatchTrackerPort
from .config_provider import (
    ConfigProviderPort,
    AppConfig,
    TrackerConfig,
    SyncConfig,
)

__all__ = [
    "VersionControlPort",
    "PatchTrackerPort",
    "ConfigProviderPort",
    "AppConfig",
    "TrackerConfig",
    "SyncConfig",
]
