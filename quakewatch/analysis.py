"""Plate Proximity Reporting - Wires core proximity analysis to logging.

Runs the pure proximity analysis over either the stored snapshot or
a GeoJSON file and reports near-boundary events.
"""

import logging
from pathlib import Path
from typing import Sequence

from quakewatch.core.earthquake import EarthquakeEvent
from quakewatch.core.geo import BoundarySegment
from quakewatch.core.proximity import DEFAULT_THRESHOLD_KM, ProximitySummary, analyze
from quakewatch.core.record import build_feature_collection, event_to_payload
from quakewatch.shell.boundary_loader import load_boundaries, read_geojson


logger = logging.getLogger(__name__)


def report(summary: ProximitySummary, threshold_km: float) -> None:
    """Log every near-boundary event and the near/far totals."""
    for result in summary.near:
        props = result.event.get("properties") or {}
        logger.info(
            "Earthquake near plate boundary: %s M%s, %d km (%s)",
            props.get("place"),
            props.get("mag"),
            round(result.nearest_distance_km),
            result.event.get("geometry", {}).get("coordinates"),
        )

    logger.info(
        "%d earthquake(s) within %.0f km of a plate boundary, %d beyond",
        summary.near_count,
        threshold_km,
        summary.far_count,
    )


def analyze_events(
    events: Sequence[EarthquakeEvent],
    boundaries: Sequence[BoundarySegment],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
) -> ProximitySummary:
    """Classify stored events against plate boundaries.

    Events go through the same payload -> GeoJSON conversion clients use,
    so an event with an unusable coordinate triple is excluded here too.

    Args:
        events: Events, typically the latest snapshot
        boundaries: Parsed plate boundaries
        threshold_km: Near/far cut-off

    Returns:
        ProximitySummary of the analysis
    """
    collection, excluded = build_feature_collection(
        [event_to_payload(e) for e in events]
    )
    if excluded:
        logger.warning(
            "Excluded %d event(s) with invalid coordinates: %s",
            len(excluded),
            ", ".join(excluded),
        )

    summary = analyze(collection, boundaries, threshold_km)
    report(summary, threshold_km)
    return summary


def analyze_files(
    earthquakes_path: str | Path,
    boundaries_path: str | Path,
    threshold_km: float = DEFAULT_THRESHOLD_KM,
) -> ProximitySummary:
    """Classify a GeoJSON earthquake file against a boundary file.

    This function performs file I/O.

    Args:
        earthquakes_path: FeatureCollection of earthquake points
        boundaries_path: FeatureCollection of plate boundaries
        threshold_km: Near/far cut-off

    Returns:
        ProximitySummary of the analysis
    """
    earthquakes = read_geojson(earthquakes_path)
    boundaries = load_boundaries(boundaries_path)

    summary = analyze(earthquakes, boundaries, threshold_km)
    report(summary, threshold_km)
    return summary
