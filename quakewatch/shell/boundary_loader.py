"""Plate Boundary Loader - Imperative Shell.

Reads the tectonic plate boundary dataset (a GeoJSON FeatureCollection)
from disk. The dataset is reference data: load it once at startup and
share the parsed segments.
"""

import json
import logging
from pathlib import Path
from typing import Any

from quakewatch.core.geo import BoundarySegment, parse_boundaries


logger = logging.getLogger(__name__)


def read_geojson(path: str | Path) -> dict[str, Any]:
    """Read a GeoJSON document.

    This method performs file I/O.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON object
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a GeoJSON object")

    return data


def load_boundaries(path: str | Path) -> list[BoundarySegment]:
    """Load and parse plate boundaries from a GeoJSON file.

    Args:
        path: Path to the boundary FeatureCollection

    Returns:
        Parsed boundary segments
    """
    logger.info("Loading plate boundaries from %s", path)

    geojson = read_geojson(path)
    boundaries = parse_boundaries(geojson)

    total = len(geojson.get("features") or [])
    skipped = total - len(boundaries)
    if skipped:
        logger.info("Skipped %d boundary features that are not LineStrings", skipped)

    logger.info(
        "Loaded %d plate boundaries (%d vertices)",
        len(boundaries),
        sum(len(b.vertices) for b in boundaries),
    )
    return boundaries
