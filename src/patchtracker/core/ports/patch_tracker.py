"""
Patch Tracker Port - Abstract interface for the remote tracker service.

Implementations raise TransportError (or a subclass) for every failed call
and never retry.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..domain.entities import PatchStatusRecord, RecordedSet, RemotePatchSet
from ..exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    TransportError,
)


class PatchTrackerPort(ABC):
    """Client side contract of the patch tracker service."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Root URL of the tracker server."""
        ...

    # -------------------------------------------------------------------------
    # Patch-sets
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_set(
        self,
        payload: list[dict[str, Any]],
        obsoletes: Optional[str] = None,
    ) -> RecordedSet:
        """Record a patch-set, optionally superseding an older one."""
        ...

    @abstractmethod
    def fetch_set(self, set_id: str) -> RemotePatchSet:
        ...

    @abstractmethod
    def list_sets(
        self,
        filter_value: Optional[str] = None,
        filter_name: Optional[str] = None,
    ) -> list[RemotePatchSet]:
        """
        List patch-sets (unauthenticated).

        Raises:
            FatalUsageError: If a non-status filter value comes without filter_name
        """
        ...

    @abstractmethod
    def mark_obsolete(self, set_id: str) -> None:
        ...

    @abstractmethod
    def act_on_set(self, set_id: str, action: str, message: Optional[str] = None) -> None:
        ...

    # -------------------------------------------------------------------------
    # Single patches
    # -------------------------------------------------------------------------

    @abstractmethod
    def upload_patch_body(self, commit: str, body: str) -> None:
        ...

    @abstractmethod
    def download_patch_body(self, commit: str) -> str:
        ...

    @abstractmethod
    def fetch_patch_status(self, commit: str) -> PatchStatusRecord:
        """
        Raises:
            NotFoundError: If the server has no record for the commit
        """
        ...

    @abstractmethod
    def act_on_patch(
        self, tracking_url: str, action: str, message: Optional[str] = None
    ) -> None:
        """Apply an action to the patch recorded at tracking_url."""
        ...


__all__ = [
    "PatchTrackerPort",
    "TransportError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
]
