"""Geographic calculations - Pure functions.

This module provides great-circle distance, nearest-boundary distance and
plate boundary parsing. All functions are pure with no side effects.

Points are ``(longitude, latitude)`` pairs in degrees, the GeoJSON order.
"""

import math
from dataclasses import dataclass
from typing import Any, Sequence


# Earth's mean radius in kilometers
EARTH_RADIUS_KM = 6371.0

Point = tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box.

    Attributes:
        min_latitude: Southern boundary
        max_latitude: Northern boundary
        min_longitude: Western boundary
        max_longitude: Eastern boundary
    """
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    def contains(self, latitude: float, longitude: float) -> bool:
        """Check if a point is within this bounding box."""
        return (
            self.min_latitude <= latitude <= self.max_latitude
            and self.min_longitude <= longitude <= self.max_longitude
        )


@dataclass(frozen=True)
class BoundarySegment:
    """One tectonic plate boundary polyline.

    Attributes:
        name: Boundary name from the dataset
        vertices: Ordered (longitude, latitude) vertices
    """
    name: str
    vertices: tuple[Point, ...]


def distance_km(a: Sequence[float], b: Sequence[float]) -> float:
    """Great-circle distance between two points using the Haversine formula.

    Pure function.

    Args:
        a: (longitude, latitude) of the first point; extra items are ignored
        b: (longitude, latitude) of the second point; extra items are ignored

    Returns:
        Distance in kilometers
    """
    lon1, lat1 = a[0], a[1]
    lon2, lat2 = b[0], b[1]

    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_KM * c


def nearest_distance_to_polyline(
    point: Sequence[float],
    vertices: Sequence[Sequence[float]],
) -> float:
    """Distance from a point to the closest vertex of a polyline.

    Pure function. Only vertices are sampled, not the interior of each
    segment, so the result is an upper bound on the true distance.

    Args:
        point: (longitude, latitude) of the point
        vertices: Polyline vertices as (longitude, latitude)

    Returns:
        Distance in kilometers, or infinity for an empty polyline
    """
    return min((distance_km(point, vertex) for vertex in vertices), default=math.inf)


def _parse_vertex(raw: Any) -> Point | None:
    """Parse one GeoJSON position, or None if it is not numeric."""
    try:
        lon, lat = float(raw[0]), float(raw[1])
    except (IndexError, TypeError, ValueError):
        return None
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return None
    return (lon, lat)


def parse_boundary(feature: dict[str, Any], index: int = 0) -> BoundarySegment | None:
    """Parse a LineString feature into a BoundarySegment.

    Pure function. Any other geometry type yields None.
    """
    geometry = feature.get("geometry") or {}
    if geometry.get("type") != "LineString":
        return None

    vertices = []
    for raw in geometry.get("coordinates") or []:
        vertex = _parse_vertex(raw)
        if vertex is None:
            return None
        vertices.append(vertex)

    if not vertices:
        return None

    props = feature.get("properties") or {}
    name = props.get("Name") or props.get("name") or feature.get("id") or f"boundary-{index}"

    return BoundarySegment(name=str(name), vertices=tuple(vertices))


def parse_boundaries(geojson: dict[str, Any]) -> list[BoundarySegment]:
    """Parse a plate boundary FeatureCollection.

    Pure function. Features that are not connected vertex sequences are
    skipped.

    Args:
        geojson: GeoJSON FeatureCollection of boundary features

    Returns:
        Parsed boundary segments in dataset order
    """
    boundaries = []

    for index, feature in enumerate(geojson.get("features") or []):
        if not isinstance(feature, dict):
            continue
        boundary = parse_boundary(feature, index)
        if boundary is not None:
            boundaries.append(boundary)

    return boundaries
