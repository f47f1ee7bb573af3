"""
Tracker Adapter - Implementation of PatchTrackerPort over HTTP.
"""

from .adapter import TrackerAdapter
from .client import TrackerApiClient

__all__ = [
    "TrackerAdapter",
    "TrackerApiClient",
]
