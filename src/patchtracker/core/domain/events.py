"""
Domain Events - Things that happened during a sync workflow.

Events are immutable records of something that occurred.
They enable loose coupling and audit trails.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__


@dataclass(frozen=True)
class PatchSetRecorded(DomainEvent):
    """Event: A commit range was recorded as a patch-set."""

    set_id: str = ""
    revision: str = ""
    num_of_patches: int = 0
    obsoletes: Optional[str] = None


@dataclass(frozen=True)
class PatchUploaded(DomainEvent):
    """Event: A diff body was uploaded for a commit."""

    commit: str = ""
    tracking_url: str = ""


@dataclass(frozen=True)
class PatchActionApplied(DomainEvent):
    """Event: An ack/nack/push was accepted by the server."""

    action: str = ""
    target: str = ""  # set id or patch tracking URL
    whole_set: bool = False


@dataclass(frozen=True)
class PatchSetDownloaded(DomainEvent):
    """Event: Patch bodies of a set were written to disk."""

    set_id: str = ""
    files: tuple = ()
    branch: Optional[str] = None


@dataclass(frozen=True)
class PatchSetObsoleted(DomainEvent):
    """Event: A patch-set was marked obsolete."""

    set_id: str = ""


class EventBus:
    """
    Simple event bus for publishing and subscribing to domain events.

    This enables loose coupling between components.
    """

    def __init__(self):
        self._handlers: dict[type, list] = {}
        self._history: list[DomainEvent] = []

    def subscribe(self, event_type: type, handler: callable) -> None:
        """Subscribe a handler to an event type."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        self._history.append(event)

        for handler in self._handlers.get(type(event), []):
            handler(event)

        # Catch-all handlers
        for handler in self._handlers.get(DomainEvent, []):
            handler(event)

    def get_history(self) -> list[DomainEvent]:
        """Get all published events."""
        return self._history.copy()

    def clear_history(self) -> None:
        """Clear event history."""
        self._history.clear()
