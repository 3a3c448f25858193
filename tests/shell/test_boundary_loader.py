"""Tests for the plate boundary loader."""

import json
from pathlib import Path

import pytest

from quakewatch.shell.boundary_loader import load_boundaries, read_geojson


BUNDLED = Path(__file__).resolve().parents[2] / "data" / "plate_boundaries.geojson"


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadBoundaries:
    """Tests for load_boundaries()."""

    def test_loads_line_strings(self, tmp_path):
        path = write_json(tmp_path / "plates.geojson", {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {"Name": "AF-EU"},
                    "geometry": {"type": "LineString", "coordinates": [[-10, 36], [-5, 36]]},
                },
                {
                    "type": "Feature",
                    "properties": {"Name": "area"},
                    "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [0, 1], [0, 0]]]},
                },
            ],
        })

        boundaries = load_boundaries(path)

        assert [b.name for b in boundaries] == ["AF-EU"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_boundaries(tmp_path / "missing.geojson")

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "broken.geojson"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            load_boundaries(path)

    def test_non_object_raises(self, tmp_path):
        path = write_json(tmp_path / "list.geojson", [1, 2, 3])

        with pytest.raises(ValueError, match="GeoJSON object"):
            read_geojson(path)

    def test_bundled_dataset(self):
        boundaries = load_boundaries(BUNDLED)

        assert len(boundaries) == 4
        assert all(len(b.vertices) >= 2 for b in boundaries)
