"""
Config Provider Port - Configuration values and the interface to load them.

Configuration is built once at startup and handed to every component; it is
never read from globals and never mutated afterwards.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


DEFAULT_URL = "http://localhost:9292"


@dataclass(frozen=True)
class TrackerConfig:
    """Connection settings for the tracker server."""

    url: str = DEFAULT_URL
    user: str = ""
    password: str = ""

    def __repr__(self) -> str:
        return f"TrackerConfig(url={self.url!r}, user={self.user!r}, password='***')"


@dataclass(frozen=True)
class SyncConfig:
    """Which commits are synchronized."""

    base_ref: str = "origin/master"
    head_ref: str = "HEAD"
    verbose: bool = False

    @property
    def revision_range(self) -> str:
        return f"{self.base_ref}..{self.head_ref}"


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""

    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    config_file: Optional[str] = None


class ConfigProviderPort(ABC):
    """Abstract interface for configuration sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """Load complete configuration."""
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """Return a list of problems, empty when the configuration is usable."""
        ...
