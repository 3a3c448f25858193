"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Earthquake event parsing and filtering
- Persisted record and client payload shapes
- Great-circle distance and plate boundary proximity
- In-batch deduplication
- Session state machine and retry policy

All functions here are deterministic and have no I/O.
"""

from quakewatch.core.earthquake import EarthquakeEvent, parse_event, parse_events
from quakewatch.core.record import (
    build_feature_collection,
    event_to_payload,
    event_to_record,
    parse_coordinates,
    record_to_event,
)
from quakewatch.core.geo import (
    BoundarySegment,
    distance_km,
    nearest_distance_to_polyline,
    parse_boundaries,
)
from quakewatch.core.proximity import ProximityResult, analyze, find_near, summarize
from quakewatch.core.dedup import collapse_revisions
from quakewatch.core.session import SessionState

__all__ = [
    # Earthquake
    "EarthquakeEvent",
    "parse_event",
    "parse_events",
    # Record
    "build_feature_collection",
    "event_to_payload",
    "event_to_record",
    "parse_coordinates",
    "record_to_event",
    # Geo
    "BoundarySegment",
    "distance_km",
    "nearest_distance_to_polyline",
    "parse_boundaries",
    # Proximity
    "ProximityResult",
    "analyze",
    "find_near",
    "summarize",
    # Dedup
    "collapse_revisions",
    # Session
    "SessionState",
]
