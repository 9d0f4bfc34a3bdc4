"""Observability hooks for the fetch client.

The client reports what it does through an injected EventSink instead of
logging inline, so callers and tests can observe behavior directly.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from src.observability.logging import get_logger


logger = get_logger(__name__)

# Event names, in emission order for a completed fetch
EVENT_REQUEST_START = "request_start"
EVENT_VALIDATOR_CHECKED = "validator_checked"
EVENT_EXPIRATION_COMPUTED = "expiration_computed"
EVENT_FETCH_COMPLETE = "fetch_complete"
EVENT_FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class FetchEvent:
    """A point-in-time observation from one execution.

    Attributes:
        name: Event name.
        url: URL being fetched (credentials redacted).
        data: Event-specific context.
    """

    name: str
    url: str
    data: dict[str, Any] = field(default_factory=dict)


class EventSink(Protocol):
    """Receives fetch events."""

    def emit(self, event: FetchEvent) -> None:
        """Handle one event."""
        ...


class StructlogEventSink:
    """Event sink that writes each event as a structured log line."""

    def __init__(self, **context: Any) -> None:
        """Initialize the sink.

        Args:
            **context: Extra context bound to every log line.
        """
        self._log = logger.bind(**context)

    def emit(self, event: FetchEvent) -> None:
        """Log the event at info level (failures at warning)."""
        if event.name == EVENT_FETCH_FAILED:
            self._log.warning(event.name, url=event.url, **event.data)
        else:
            self._log.info(event.name, url=event.url, **event.data)


class RecordingEventSink:
    """Event sink that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[FetchEvent] = []

    def emit(self, event: FetchEvent) -> None:
        """Record the event."""
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        """Get recorded event names in order."""
        return [event.name for event in self.events]

    def last(self, name: str) -> FetchEvent | None:
        """Get the most recent event with a given name."""
        for event in reversed(self.events):
            if event.name == name:
                return event
        return None
