"""
Domain - Entities, value objects and pure transformations.
"""

from .entities import (
    Person,
    Commit,
    CommitMessage,
    CommitLog,
    RecordedSet,
    RemotePatchSet,
    PatchStatusRecord,
)
from .value_objects import (
    CommitHash,
    PatchStatus,
    TrackerAction,
    is_commit_hash,
    short_hash,
)
from .provenance import ProvenanceCodec, tracking_url
from .patchset import (
    PatchSetEncoder,
    PatchSegment,
    decode_patch,
    encode_patch,
    iter_lines,
    split_patch_stream,
)
from .events import (
    DomainEvent,
    EventBus,
    PatchSetRecorded,
    PatchUploaded,
    PatchActionApplied,
    PatchSetDownloaded,
    PatchSetObsoleted,
)

__all__ = [
    "Person",
    "Commit",
    "CommitMessage",
    "CommitLog",
    "RecordedSet",
    "RemotePatchSet",
    "PatchStatusRecord",
    "CommitHash",
    "PatchStatus",
    "TrackerAction",
    "is_commit_hash",
    "short_hash",
    "ProvenanceCodec",
    "tracking_url",
    "PatchSetEncoder",
    "PatchSegment",
    "decode_patch",
    "encode_patch",
    "iter_lines",
    "split_patch_stream",
    "DomainEvent",
    "EventBus",
    "PatchSetRecorded",
    "PatchUploaded",
    "PatchActionApplied",
    "PatchSetDownloaded",
    "PatchSetObsoleted",
]
