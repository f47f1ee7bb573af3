"""
Adapters - Concrete implementations of ports.

This module contains implementations for:
- Version control: git command line
- Tracker: patch tracker REST API
- Config: YAML file, environment variables
"""

from .git import GitAdapter
from .tracker import TrackerAdapter
from .config import YamlConfigProvider

__all__ = [
    "GitAdapter",
    "TrackerAdapter",
    "YamlConfigProvider",
]
