"""
Tracker Adapter - Implements PatchTrackerPort for the patch tracker server.

Translates between domain records and the server's JSON resources.
"""

import logging
from typing import Any, Optional

from ...core.domain.entities import PatchStatusRecord, RecordedSet, RemotePatchSet
from ...core.exceptions import TransportError
from ...core.ports.config_provider import TrackerConfig
from ...core.ports.patch_tracker import PatchTrackerPort
from .client import TrackerApiClient


class TrackerAdapter(PatchTrackerPort):
    """Patch tracker implementation of the PatchTrackerPort."""

    def __init__(
        self,
        config: TrackerConfig,
        client: Optional[TrackerApiClient] = None,
    ):
        """
        Initialize the tracker adapter.

        Args:
            config: Tracker connection settings
            client: Optional preconfigured API client
        """
        self.config = config
        self.logger = logging.getLogger("TrackerAdapter")
        self._client = client or TrackerApiClient(
            base_url=config.url,
            user=config.user,
            password=config.password,
        )

    @property
    def name(self) -> str:
        return "PatchTracker"

    @property
    def base_url(self) -> str:
        return self._client.base_url

    # -------------------------------------------------------------------------
    # Patch-sets
    # -------------------------------------------------------------------------

    def create_set(
        self,
        payload: list[dict[str, Any]],
        obsoletes: Optional[str] = None,
    ) -> RecordedSet:
        data = self._client.create_set(payload, obsoletes=obsoletes)
        if "id" not in data:
            raise TransportError(f"Server did not return a patch-set id: {data!r}")
        recorded = RecordedSet(id=str(data["id"]), revision=str(data.get("revision", "")))
        self.logger.info(f"Recorded patch-set #{recorded.id} rev{recorded.revision}")
        return recorded

    def fetch_set(self, set_id: str) -> RemotePatchSet:
        data = self._client.fetch_set(set_id)
        data.setdefault("id", set_id)
        return RemotePatchSet.from_dict(data)

    def list_sets(
        self,
        filter_value: Optional[str] = None,
        filter_name: Optional[str] = None,
    ) -> list[RemotePatchSet]:
        return [
            RemotePatchSet.from_dict(item)
            for item in self._client.list_sets(filter_value, filter_name)
        ]

    def mark_obsolete(self, set_id: str) -> None:
        self._client.mark_obsolete(set_id)
        self.logger.info(f"Marked patch-set #{set_id} as obsolete")

    def act_on_set(
        self, set_id: str, action: str, message: Optional[str] = None
    ) -> None:
        self._client.act_on_set(set_id, action, message)

    # -------------------------------------------------------------------------
    # Single patches
    # -------------------------------------------------------------------------

    def upload_patch_body(self, commit: str, body: str) -> None:
        self._client.upload_patch_body(commit, body)

    def download_patch_body(self, commit: str) -> str:
        return self._client.download_patch_body(commit)

    def fetch_patch_status(self, commit: str) -> PatchStatusRecord:
        return PatchStatusRecord.from_dict(
            self._client.fetch_patch_status(commit), commit=commit
        )

    def act_on_patch(
        self, tracking_url: str, action: str, message: Optional[str] = None
    ) -> None:
        self._client.post_action(tracking_url, action, message)
