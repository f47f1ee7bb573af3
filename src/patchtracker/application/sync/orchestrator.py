"""
Sync Orchestrator - Coordinates local commits with the patch tracker.

This is the main entry point for every client workflow. The orchestrator
holds no state between calls: everything it needs is re-read from git or
the tracker server.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ...core.domain.entities import CommitLog
from ...core.domain.events import (
    EventBus,
    PatchActionApplied,
    PatchSetDownloaded,
    PatchSetObsoleted,
    PatchSetRecorded,
    PatchUploaded,
)
from ...core.domain.patchset import PatchSetEncoder, encode_patch, split_patch_stream
from ...core.domain.provenance import ProvenanceCodec, tracking_url
from ...core.domain.value_objects import CommitHash, TrackerAction, short_hash
from ...core.exceptions import ProvenanceMissing, TransportError
from ...core.ports.config_provider import AppConfig
from ...core.ports.patch_tracker import PatchTrackerPort
from ...core.ports.version_control import VersionControlPort


NOT_RECORDED_MESSAGE = "This branch is not recorded yet. ($ patchtracker record)"

PathLike = Union[str, Path]


@dataclass
class WorkflowResult:
    """Result of a workflow run."""

    workflow: str
    success: bool = True

    # Units of work (commits, patches) that went through
    succeeded: int = 0

    messages: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    def add_message(self, message: str) -> None:
        self.messages.append(message)

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)
        self.success = False

    def merge(self, other: "WorkflowResult") -> None:
        """Fold the outcome of a chained workflow into this one."""
        self.messages.extend(other.messages)
        for error in other.errors:
            self.add_error(error)
        self.data[other.workflow] = other.data


class SyncOrchestrator:
    """
    Runs the client workflows against a tracker and a version control backend.

    Workflows:
    - record: commit range -> patch-set on the server
    - upload: diff bodies (with TrackedAt marker) -> server
    - download: patch-set -> local patch files, optionally applied on a new branch
    - act: ack/nack/push on a whole set or on each recorded local commit
    - status: review state of each local commit
    - apply: download and apply a single patch
    - obsolete_patchset, list_sets: single server calls
    """

    def __init__(
        self,
        tracker: PatchTrackerPort,
        vcs: VersionControlPort,
        config: AppConfig,
        event_bus: Optional[EventBus] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            tracker: Patch tracker port
            vcs: Version control port
            config: Application configuration
            event_bus: Optional event bus
            confirm: Asks the user a yes/no question; None means always "no"
        """
        self.tracker = tracker
        self.vcs = vcs
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.confirm = confirm
        self.codec = ProvenanceCodec()
        self.encoder = PatchSetEncoder()
        self.logger = logging.getLogger("SyncOrchestrator")

    @property
    def revision_range(self) -> str:
        return self.config.sync.revision_range

    @property
    def tracker_url(self) -> str:
        return self.config.tracker.url.rstrip("/")

    # -------------------------------------------------------------------------
    # Record / Upload
    # -------------------------------------------------------------------------

    def record(
        self,
        directory: PathLike,
        obsoletes: Optional[str] = None,
        upload: bool = False,
    ) -> WorkflowResult:
        """
        Record the local commit range as a new patch-set.

        Args:
            directory: Repository working directory
            obsoletes: Id of a patch-set the new one supersedes
            upload: Also upload the diff bodies afterwards
        """
        result = WorkflowResult(workflow="record")

        log = self.vcs.read_commits(self.revision_range, directory)
        if not log.commits:
            result.add_error(f"No commits to record in {self.revision_range}")
            return result

        payload = self.encoder.encode(log.commits, log.messages)
        self.logger.info(f"Recording {len(log)} commits from {self.revision_range}")

        try:
            recorded = self.tracker.create_set(payload, obsoletes=obsoletes)
        except TransportError as e:
            result.add_error(str(e))
            return result

        result.succeeded = len(log)
        result.data.update({"id": recorded.id, "revision": recorded.revision})
        result.add_message(
            f"{len(log)} patches were recorded to the tracker server"
            f" [{self.tracker_url}][#{recorded.id}][rev{recorded.revision}]"
        )
        self.event_bus.publish(PatchSetRecorded(
            set_id=recorded.id,
            revision=recorded.revision,
            num_of_patches=len(log),
            obsoletes=obsoletes,
        ))

        if upload:
            result.merge(self.upload(directory))

        return result

    def upload(self, directory: PathLike) -> WorkflowResult:
        """Upload every patch body of the range, one request per commit."""
        result = WorkflowResult(workflow="upload")
        stream = self.vcs.format_patches(self.revision_range, directory)

        uploaded = []
        for segment in split_patch_stream(stream):
            if segment.commit is None:
                self.logger.warning("Ignoring text before the first patch in format-patch output")
                continue

            url = tracking_url(self.tracker_url, segment.commit)
            body = self.codec.embed(segment.body, url)
            self.logger.info(f"[^] {segment.commit}")
            try:
                self.tracker.upload_patch_body(segment.commit, body)
            except TransportError as e:
                result.add_error(f"Upload of {segment.commit} failed. ({e})")
                continue

            uploaded.append(segment.commit)
            self.event_bus.publish(PatchUploaded(commit=segment.commit, tracking_url=url))

        result.succeeded = len(uploaded)
        result.data["uploaded"] = uploaded
        result.add_message(
            f"{len(uploaded)} patches were uploaded to tracker [{self.tracker_url}]"
        )
        return result

    # -------------------------------------------------------------------------
    # Download / Apply
    # -------------------------------------------------------------------------

    def download(
        self,
        directory: PathLike,
        set_id: str,
        branch: Optional[str] = None,
    ) -> WorkflowResult:
        """
        Download every patch of a set as `{index}-{hash}.patch`.

        With a branch name, the branch is created first and each patch is
        applied on it as soon as it is written.
        """
        result = WorkflowResult(workflow="download")
        directory = Path(directory)

        try:
            patch_set = self.tracker.fetch_set(set_id)
        except TransportError as e:
            result.add_error(str(e))
            return result

        if branch:
            result.add_message(self.vcs.create_branch(branch, directory).rstrip())

        files = []
        for index, commit in enumerate(patch_set.patches):
            try:
                body = self.tracker.download_patch_body(commit)
            except TransportError as e:
                result.add_error(f"Download of {commit} failed. ({e})")
                continue

            patch_file = self._write_patch(directory / f"{index}-{commit}.patch", body)
            files.append(str(patch_file))

            if branch:
                result.add_message(self.vcs.apply_patch(patch_file, directory).rstrip())
            else:
                result.add_message(f"[v] {patch_file.name}")

        result.succeeded = len(files)
        result.data["files"] = files
        result.add_message(f"{len(files)} patches downloaded.")
        self.event_bus.publish(PatchSetDownloaded(
            set_id=str(set_id), files=tuple(files), branch=branch,
        ))
        return result

    def apply(
        self,
        directory: PathLike,
        commit: str,
        assume_yes: bool = False,
    ) -> WorkflowResult:
        """
        Download a single patch and apply it to the current branch.

        Raises:
            FatalUsageError: If commit is not a 40 character hex hash
        """
        commit = str(CommitHash(commit))
        result = WorkflowResult(workflow="apply")
        directory = Path(directory)

        try:
            body = self.tracker.download_patch_body(commit)
        except TransportError as e:
            result.add_error(str(e))
            return result

        patch_file = self._write_patch(directory / f"{commit}.patch", body)
        result.data["file"] = str(patch_file)

        question = "Are you sure you want to apply patch to current branch?"
        if not assume_yes and not (self.confirm and self.confirm(question)):
            patch_file.unlink()
            result.data["file"] = None
            result.add_message("Aborted.")
            return result

        result.add_message(self.vcs.apply_patch(patch_file, directory).rstrip())
        result.succeeded = 1
        return result

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def act(
        self,
        action: str,
        directory: PathLike,
        set_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> WorkflowResult:
        """
        Perform ack, nack or push.

        With set_id the whole set is updated in one call. Otherwise every
        local commit carrying a TrackedAt marker is updated on its own;
        commits without the marker are reported and skipped.
        """
        action = TrackerAction.from_string(action).value
        result = WorkflowResult(workflow=action)

        if set_id:
            try:
                self.tracker.act_on_set(set_id, action, message)
            except TransportError as e:
                result.add_error(str(e))
                return result
            result.succeeded = 1
            result.add_message(f"[{action}][{set_id}] Status of all patches in set updated.")
            self.event_bus.publish(PatchActionApplied(
                action=action, target=str(set_id), whole_set=True,
            ))
            return result

        rows, messages = self._local_patch_set(directory)
        for row in rows:
            commit = row["hashes"]["commit"]
            url = self.codec.extract(messages[commit]["full_message"])
            if url is None:
                result.add_error(ProvenanceMissing(commit).message)
                continue

            try:
                self.tracker.act_on_patch(url, action, message)
            except TransportError as e:
                result.add_error(f"[{short_hash(commit)}] {e}")
                continue

            result.succeeded += 1
            result.add_message(f"[{action.upper()}][{short_hash(commit)}] {messages[commit]['msg']}")
            self.event_bus.publish(PatchActionApplied(action=action, target=url))

        return result

    def ack(self, directory: PathLike, **kwargs) -> WorkflowResult:
        return self.act(TrackerAction.ACK.value, directory, **kwargs)

    def nack(self, directory: PathLike, **kwargs) -> WorkflowResult:
        return self.act(TrackerAction.NACK.value, directory, **kwargs)

    def push(self, directory: PathLike, **kwargs) -> WorkflowResult:
        return self.act(TrackerAction.PUSH.value, directory, **kwargs)

    def obsolete_patchset(self, set_id: str) -> WorkflowResult:
        """Mark a patch-set as obsolete."""
        result = WorkflowResult(workflow="obsolete")
        try:
            self.tracker.mark_obsolete(set_id)
        except TransportError as e:
            result.add_error(str(e))
            return result

        result.succeeded = 1
        result.add_message(f"Patch set [#{set_id}] marked as obsolete.")
        self.event_bus.publish(PatchSetObsoleted(set_id=str(set_id)))
        return result

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def status(self, directory: PathLike) -> WorkflowResult:
        """
        Show the review state of every local commit.

        When not a single commit is known to the server, the branch is
        reported as not recorded instead of listing per-commit errors.
        """
        result = WorkflowResult(workflow="status")
        rows, _ = self._local_patch_set(directory)

        failures = []
        records = []
        for row in rows:
            commit = row["hashes"]["commit"]
            try:
                record = self.tracker.fetch_patch_status(commit)
            except TransportError as e:
                failures.append(f"[{short_hash(commit)}] {e}")
                continue

            records.append(record)
            result.add_message(
                f"[{short_hash(record.commit)}][{record.status.upper()}]"
                f"[rev{record.revision}] {record.message}"
            )

        result.succeeded = len(records)
        result.data["records"] = records

        if not records:
            result.add_error(NOT_RECORDED_MESSAGE)
            return result

        for failure in failures:
            result.add_error(failure)
        return result

    def list_sets(
        self,
        filter_value: Optional[str] = None,
        filter_name: Optional[str] = None,
    ) -> WorkflowResult:
        """
        List patch-sets on the server.

        Raises:
            FatalUsageError: Non-status filter value without filter_name
        """
        result = WorkflowResult(workflow="list")
        try:
            sets = self.tracker.list_sets(filter_value, filter_name)
        except TransportError as e:
            result.add_error(str(e))
            return result

        result.succeeded = len(sets)
        result.data["sets"] = sets
        for patch_set in sets:
            result.add_message(
                f"[{patch_set.id}][{patch_set.status.upper()}] {patch_set.first_patch_message}"
                f" ({patch_set.num_of_patches} patches by {patch_set.author})"
            )
        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _local_patch_set(self, directory: PathLike):
        """Re-derive the local patch-set as (ordered rows, message index)."""
        log: CommitLog = self.vcs.read_commits(self.revision_range, directory)
        return self.encoder.decode(self.encoder.encode(log.commits, log.messages))

    def _write_patch(self, path: Path, body: str) -> Path:
        if body and not body.endswith("\n"):
            body += "\n"
        path.write_bytes(encode_patch(body))
        self.logger.debug(f"Wrote {path}")
        # git runs with the repository as cwd, so hand it an absolute path
        return path.resolve()
