"""Earthquake data models and parsing - Pure functions.

This module handles parsing USGS GeoJSON data into typed EarthquakeEvent
objects. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class EarthquakeEvent:
    """Immutable earthquake event model.

    Attributes:
        external_id: Unique event ID from the source feed
        magnitude: Earthquake magnitude
        place: Human-readable location description
        occurred_at: Event origin time (UTC)
        updated_at: Source-reported revision time (UTC)
        detail_url: Feed detail link for the event
        longitude: Epicenter longitude
        latitude: Epicenter latitude
        depth_km: Depth in kilometers
    """
    external_id: str
    magnitude: float
    place: str
    occurred_at: datetime
    updated_at: datetime
    detail_url: str
    longitude: float
    latitude: float
    depth_km: float

    @property
    def coordinates(self) -> tuple[float, float, float]:
        """Return (longitude, latitude, depth) tuple."""
        return (self.longitude, self.latitude, self.depth_km)


@dataclass
class ParseResult:
    """Result of parsing a feed response.

    Attributes:
        events: Valid events, newest first
        rejected: IDs (or positions) of features that failed to parse
    """
    events: list[EarthquakeEvent] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)


def _from_epoch_ms(value: Any) -> datetime:
    """Convert USGS milliseconds-since-epoch to an aware datetime."""
    return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)


def parse_event(feature: dict[str, Any]) -> EarthquakeEvent | None:
    """Parse a single GeoJSON feature into an EarthquakeEvent.

    Pure function: takes raw dict, returns typed event or None if invalid.

    Args:
        feature: GeoJSON feature dict from the USGS API

    Returns:
        EarthquakeEvent or None if parsing fails
    """
    try:
        external_id = feature.get("id")
        if not external_id:
            return None

        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates") or []

        # Exactly a (longitude, latitude, depth) triple
        if len(coords) != 3:
            return None
        longitude, latitude, depth_km = (float(c) for c in coords)
        if not all(math.isfinite(c) for c in (longitude, latitude, depth_km)):
            return None

        time_ms = props.get("time")
        magnitude = props.get("mag")
        if time_ms is None or magnitude is None:
            return None

        occurred_at = _from_epoch_ms(time_ms)
        updated_ms = props.get("updated")
        updated_at = _from_epoch_ms(updated_ms) if updated_ms is not None else occurred_at

        return EarthquakeEvent(
            external_id=str(external_id),
            magnitude=float(magnitude),
            place=props.get("place") or "Unknown location",
            occurred_at=occurred_at,
            updated_at=updated_at,
            detail_url=props.get("detail") or props.get("url") or "",
            longitude=longitude,
            latitude=latitude,
            depth_km=depth_km,
        )
    except (AttributeError, TypeError, ValueError, OverflowError):
        return None


def parse_events(geojson: dict[str, Any]) -> ParseResult:
    """Parse a USGS GeoJSON FeatureCollection.

    Pure function: invalid features are collected in ``rejected``
    instead of raising.

    Args:
        geojson: Full GeoJSON FeatureCollection from the USGS API

    Returns:
        ParseResult with valid events sorted newest first
    """
    result = ParseResult()

    for index, feature in enumerate(geojson.get("features") or []):
        event = parse_event(feature) if isinstance(feature, dict) else None
        if event is None:
            label = feature.get("id") if isinstance(feature, dict) else None
            result.rejected.append(str(label or f"#{index}"))
        else:
            result.events.append(event)

    result.events.sort(key=lambda e: e.occurred_at, reverse=True)
    return result


def filter_by_magnitude(
    events: list[EarthquakeEvent],
    min_magnitude: float | None = None,
    max_magnitude: float | None = None,
) -> list[EarthquakeEvent]:
    """Filter events by magnitude range.

    Pure function.

    Args:
        events: Events to filter
        min_magnitude: Minimum magnitude (inclusive), None for no minimum
        max_magnitude: Maximum magnitude (inclusive), None for no maximum

    Returns:
        Filtered list of events
    """
    result = events

    if min_magnitude is not None:
        result = [e for e in result if e.magnitude >= min_magnitude]

    if max_magnitude is not None:
        result = [e for e in result if e.magnitude <= max_magnitude]

    return result
