"""Event Store - Imperative Shell.

Persistence contract for earthquake events plus an in-process backend.
The Firestore-backed store lives in firestore_client.

Every implementation must guarantee:
- upsert is the only write path and never creates a second row for an
  external id, even when called concurrently with equal ids;
- list_recent orders by occurred_at descending and sees every upsert
  that returned before it was called.
"""

import logging
import threading
from typing import Protocol

from quakewatch.core.earthquake import EarthquakeEvent


logger = logging.getLogger(__name__)


class EventStore(Protocol):
    """Persistence abstraction used by the ingestion scheduler."""

    def upsert(self, event: EarthquakeEvent) -> EarthquakeEvent:
        """Create or update the record for event.external_id."""
        ...

    def list_recent(self, limit: int) -> list[EarthquakeEvent]:
        """Most recent events by occurrence time, newest first."""
        ...

    def get(self, external_id: str) -> EarthquakeEvent | None:
        """Look up a single event."""
        ...


class InMemoryEventStore:
    """EventStore kept in a dict keyed by external id.

    Calls arrive from worker threads, so every access holds a lock.
    """

    def __init__(self) -> None:
        self._events: dict[str, EarthquakeEvent] = {}
        self._lock = threading.Lock()

    def upsert(self, event: EarthquakeEvent) -> EarthquakeEvent:
        with self._lock:
            created = event.external_id not in self._events
            self._events[event.external_id] = event

        logger.debug(
            "%s event %s",
            "Created" if created else "Updated",
            event.external_id,
        )
        return event

    def list_recent(self, limit: int) -> list[EarthquakeEvent]:
        if limit <= 0:
            return []
        with self._lock:
            events = list(self._events.values())
        events.sort(key=lambda e: e.occurred_at, reverse=True)
        return events[:limit]

    def get(self, external_id: str) -> EarthquakeEvent | None:
        with self._lock:
            return self._events.get(external_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
