"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from quakewatch.cli import build_parser, main


@pytest.fixture
def files(tmp_path):
    quakes = tmp_path / "quakes.geojson"
    quakes.write_text(json.dumps({
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": "a", "properties": {"mag": 5.0, "place": "Gulf of Guinea"},
             "geometry": {"type": "Point", "coordinates": [0.0, 0.0, 10.0]}},
            {"type": "Feature", "id": "b", "properties": {"mag": 3.0, "place": "Southern Ocean"},
             "geometry": {"type": "Point", "coordinates": [100.0, -60.0, 5.0]}},
        ],
    }))
    plates = tmp_path / "plates.geojson"
    plates.write_text(json.dumps({
        "type": "FeatureCollection",
        "features": [{
            "type": "Feature",
            "properties": {"Name": "test-ridge"},
            "geometry": {"type": "LineString", "coordinates": [[0.0, 0.5], [10.0, 10.0]]},
        }],
    }))
    return quakes, plates


class TestAnalyzeCommand:
    """Tests for `quakewatch analyze`."""

    def test_prints_counts(self, files, capsys):
        quakes, plates = files

        code = main(["analyze", str(quakes), str(plates)])

        out = capsys.readouterr().out
        assert code == 0
        assert "Near plate boundary (<= 500 km): 1" in out
        assert "Beyond threshold: 1" in out
        assert "Gulf of Guinea" in out
        assert "Southern Ocean" not in out

    def test_threshold_option(self, files, capsys):
        quakes, plates = files

        main(["analyze", str(quakes), str(plates), "--threshold-km", "10"])

        assert "Near plate boundary (<= 10 km): 0" in capsys.readouterr().out

    def test_missing_file_exits_nonzero(self, files, tmp_path, capsys):
        _, plates = files

        code = main(["analyze", str(tmp_path / "missing.geojson"), str(plates)])

        assert code == 1
        assert "Error:" in capsys.readouterr().err


class TestServeCommand:
    """Tests for `quakewatch serve`."""

    @patch("uvicorn.run")
    def test_runs_uvicorn(self, mock_run):
        code = main(["serve", "--port", "9000"])

        assert code == 0
        mock_run.assert_called_once_with(
            "quakewatch.main:app",
            host="127.0.0.1",
            port=9000,
            log_level="info",
        )


def test_command_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
