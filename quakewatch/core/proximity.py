"""Plate boundary proximity analysis - Pure functions.

Classifies earthquake features by their distance to the nearest tectonic
plate boundary. Inputs are never mutated.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

from quakewatch.core.geo import BoundarySegment, nearest_distance_to_polyline


DEFAULT_THRESHOLD_KM = 500.0


@dataclass(frozen=True)
class ProximityResult:
    """Distance classification of a single event.

    Attributes:
        event: The GeoJSON feature that was analyzed
        nearest_distance_km: Distance to the closest boundary vertex
        is_near: True if the distance is within the threshold
    """
    event: dict[str, Any]
    nearest_distance_km: float
    is_near: bool


@dataclass
class ProximitySummary:
    """Aggregate of a proximity analysis pass.

    Attributes:
        near_count: Events within the threshold
        far_count: Events beyond the threshold
        results: Per-event results in input order
    """
    near_count: int = 0
    far_count: int = 0
    results: list[ProximityResult] = field(default_factory=list)

    @property
    def near(self) -> list[ProximityResult]:
        """Only the near-boundary results."""
        return [r for r in self.results if r.is_near]


def _point_position(feature: dict[str, Any]) -> tuple[float, float] | None:
    """Extract (longitude, latitude) from a Point feature."""
    geometry = feature.get("geometry") or {}
    if geometry.get("type") != "Point":
        return None

    coords = geometry.get("coordinates") or []
    try:
        return (float(coords[0]), float(coords[1]))
    except (IndexError, TypeError, ValueError):
        return None


def nearest_boundary_distance(
    point: Sequence[float],
    boundaries: Sequence[BoundarySegment],
) -> float:
    """Minimum distance from a point to any boundary.

    Pure function.

    Returns:
        Distance in kilometers, or infinity when there are no boundaries
    """
    return min(
        (nearest_distance_to_polyline(point, b.vertices) for b in boundaries),
        default=math.inf,
    )


def find_near(
    features: Sequence[dict[str, Any]],
    boundaries: Sequence[BoundarySegment],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
) -> list[ProximityResult]:
    """Classify point features by distance to the nearest plate boundary.

    Pure function. Features that are not points are skipped.

    Args:
        features: GeoJSON features
        boundaries: Parsed plate boundaries
        threshold_km: Distance at or under which an event counts as near

    Returns:
        One ProximityResult per point feature, in input order
    """
    results = []

    for feature in features:
        position = _point_position(feature)
        if position is None:
            continue

        distance = nearest_boundary_distance(position, boundaries)
        results.append(ProximityResult(
            event=feature,
            nearest_distance_km=distance,
            is_near=distance <= threshold_km,
        ))

    return results


def summarize(results: Sequence[ProximityResult]) -> ProximitySummary:
    """Count near and far results.

    Pure function.
    """
    near_count = sum(1 for r in results if r.is_near)
    return ProximitySummary(
        near_count=near_count,
        far_count=len(results) - near_count,
        results=list(results),
    )


def analyze(
    feature_collection: dict[str, Any],
    boundaries: Sequence[BoundarySegment],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
) -> ProximitySummary:
    """Run find_near over a FeatureCollection and summarize it.

    Pure function.
    """
    features = [
        f for f in feature_collection.get("features") or []
        if isinstance(f, dict)
    ]
    return summarize(find_near(features, boundaries, threshold_km))
