"""Firestore Event Store - Imperative Shell.

This module persists earthquake events in Google Cloud Firestore, one
document per event. The document ID is derived from the feed's external
ID, so an upsert is a single merge write to a fixed document: Firestore
applies it atomically and two writers can never create two documents
for the same event.

All I/O is contained here; record encoding is in the core module.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from google.cloud import firestore

from quakewatch.core.earthquake import EarthquakeEvent
from quakewatch.core.record import event_to_record, record_to_event


logger = logging.getLogger(__name__)


# Default collection name for storing events
DEFAULT_COLLECTION = "earthquakes"

# Firestore document ID limits
MAX_DOCUMENT_ID_BYTES = 1500
RESERVED_ID = re.compile(r"__.*__", re.DOTALL)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection name
    """
    project_id: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION


def document_id(external_id: str) -> str:
    """Map an external ID to a valid Firestore document ID.

    Document IDs cannot contain '/', be '.' or '..', match the reserved
    '__.*__' pattern, or exceed 1500 bytes.
    """
    safe = external_id.replace("/", "_")
    if safe in ("", ".", "..") or RESERVED_ID.fullmatch(safe):
        raise ValueError(f"Cannot store event with id {external_id!r}")
    if len(safe.encode("utf-8")) > MAX_DOCUMENT_ID_BYTES:
        raise ValueError(
            f"Event id longer than {MAX_DOCUMENT_ID_BYTES} bytes: {external_id[:40]!r}"
        )
    return safe


class FirestoreEventStore:
    """EventStore backed by a Firestore collection.

    This is part of the imperative shell - it handles database I/O.

    Document structure:
    {
        "api_id": "us7000abcd",
        "magnitude": 4.2,
        "place": "...",
        "time": <timestamp>,
        "updated": <timestamp>,
        "detail_url": "...",
        "coordinates": "lon,lat,depth",
        "last_seen_at": <server timestamp>
    }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore store.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _collection(self) -> Any:
        """Get reference to the events collection."""
        return self.client.collection(self.config.collection)

    def upsert(self, event: EarthquakeEvent) -> EarthquakeEvent:
        """Create or update the document for an event.

        This method performs database I/O. Errors propagate to the caller.

        Args:
            event: Event to store

        Returns:
            The stored event
        """
        record = event_to_record(event)
        record["last_seen_at"] = firestore.SERVER_TIMESTAMP

        self._collection().document(document_id(event.external_id)).set(
            record,
            merge=True,
        )

        logger.debug("Upserted event %s", event.external_id)
        return event

    def list_recent(self, limit: int) -> list[EarthquakeEvent]:
        """Fetch the most recent events, newest first.

        This method performs database I/O. Malformed documents are
        skipped with a warning.

        Args:
            limit: Maximum number of events

        Returns:
            Events ordered by occurrence time descending
        """
        if limit <= 0:
            return []

        query = (
            self._collection()
            .order_by("time", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )

        events = []
        for doc in query.stream():
            try:
                events.append(record_to_event(doc.to_dict() or {}))
            except ValueError as e:
                logger.warning("Skipping malformed event document %s: %s", doc.id, e)

        logger.info("Fetched %d recent events from Firestore", len(events))
        return events

    def get(self, external_id: str) -> EarthquakeEvent | None:
        """Fetch a single event by external ID.

        Returns:
            The event, or None if missing or malformed
        """
        doc = self._collection().document(document_id(external_id)).get()

        if not doc.exists:
            return None

        try:
            return record_to_event(doc.to_dict() or {})
        except ValueError as e:
            logger.warning("Stored event %s is malformed: %s", external_id, e)
            return None
