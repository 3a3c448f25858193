"""Persisted record and wire shapes - Pure functions.

An event is stored as a flat record whose coordinates are a single
``"lon,lat,depth"`` string. This module is the only place that encodes
or parses that triple, and it also builds the JSON payload pushed to
clients and the GeoJSON features used for proximity analysis.
"""

import math
from datetime import datetime, timezone
from typing import Any

from quakewatch.core.earthquake import EarthquakeEvent


def encode_coordinates(longitude: float, latitude: float, depth_km: float) -> str:
    """Serialize a coordinate triple as ``"lon,lat,depth"``."""
    return f"{longitude!r},{latitude!r},{depth_km!r}"


def parse_coordinates(value: str) -> tuple[float, float, float]:
    """Parse a ``"lon,lat,depth"`` string.

    Pure function.

    Args:
        value: Encoded coordinate string

    Returns:
        (longitude, latitude, depth) tuple

    Raises:
        ValueError: If the string does not hold exactly three finite numbers
    """
    if not isinstance(value, str):
        raise ValueError(f"Coordinates must be a string, got {type(value).__name__}")

    parts = value.split(",")
    if len(parts) != 3:
        raise ValueError(f"Expected 3 coordinate components, got {len(parts)}: {value!r}")

    numbers = tuple(float(p) for p in parts)
    if not all(math.isfinite(n) for n in numbers):
        raise ValueError(f"Non-finite coordinate in {value!r}")

    return numbers  # type: ignore[return-value]


def _as_utc(value: Any) -> datetime:
    """Coerce a stored timestamp (datetime or ISO string) to aware UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise ValueError(f"Not a timestamp: {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def event_to_record(event: EarthquakeEvent) -> dict[str, Any]:
    """Convert an event to its persisted record shape.

    Pure function.
    """
    return {
        "api_id": event.external_id,
        "magnitude": event.magnitude,
        "place": event.place,
        "time": event.occurred_at,
        "updated": event.updated_at,
        "detail_url": event.detail_url,
        "coordinates": encode_coordinates(*event.coordinates),
    }


def record_to_event(record: dict[str, Any]) -> EarthquakeEvent:
    """Rebuild an event from a persisted record.

    Pure function.

    Raises:
        ValueError: If the record is malformed
    """
    try:
        longitude, latitude, depth_km = parse_coordinates(record["coordinates"])
        return EarthquakeEvent(
            external_id=str(record["api_id"]),
            magnitude=float(record["magnitude"]),
            place=record.get("place") or "Unknown location",
            occurred_at=_as_utc(record["time"]),
            updated_at=_as_utc(record.get("updated") or record["time"]),
            detail_url=record.get("detail_url") or "",
            longitude=longitude,
            latitude=latitude,
            depth_km=depth_km,
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed record: {e}") from e


def event_to_payload(event: EarthquakeEvent) -> dict[str, Any]:
    """Build the JSON object sent to clients in a ``data-update`` push."""
    return {
        "id": event.external_id,
        "apiId": event.external_id,
        "magnitude": event.magnitude,
        "place": event.place,
        "time": event.occurred_at.isoformat(),
        "updated": event.updated_at.isoformat(),
        "detailUrl": event.detail_url,
        "coordinates": encode_coordinates(*event.coordinates),
    }


def payload_to_feature(payload: dict[str, Any]) -> dict[str, Any] | None:
    """Convert a client payload item to a GeoJSON Point feature.

    Returns None when the coordinate string is not a valid triple.
    """
    try:
        coordinates = parse_coordinates(payload.get("coordinates"))
    except ValueError:
        return None

    return {
        "type": "Feature",
        "id": payload.get("id"),
        "geometry": {
            "type": "Point",
            "coordinates": list(coordinates),
        },
        "properties": {
            "mag": payload.get("magnitude"),
            "place": payload.get("place"),
            "time": payload.get("time"),
            "updated": payload.get("updated"),
            "detailUrl": payload.get("detailUrl"),
        },
    }


def build_feature_collection(
    payloads: list[dict[str, Any]],
) -> tuple[dict[str, Any], list[str]]:
    """Build a GeoJSON FeatureCollection from client payload items.

    Pure function. Items whose coordinates are malformed are excluded.

    Args:
        payloads: Items as produced by event_to_payload

    Returns:
        Tuple of (FeatureCollection, ids of excluded items)
    """
    features = []
    excluded = []

    for payload in payloads:
        feature = payload_to_feature(payload)
        if feature is None:
            excluded.append(str(payload.get("id")))
        else:
            features.append(feature)

    return {"type": "FeatureCollection", "features": features}, excluded
