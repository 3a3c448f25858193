"""Unit tests for configuration validation.

Pure function tests - no mocks needed.
"""

from quakewatch.core.config import Config, validate_bounds, validate_config
from quakewatch.core.geo import BoundingBox
from quakewatch.core.retry import RetryPolicy


def valid_config(**overrides) -> Config:
    values = {"boundaries_path": "data/plate_boundaries.geojson"}
    values.update(overrides)
    return Config(**values)


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_defaults_with_boundaries_are_clean(self):
        result = validate_config(valid_config())

        assert result.valid is True
        assert result.errors == []

    def test_missing_boundaries_is_warning(self):
        result = validate_config(Config())

        assert result.valid is True
        assert [w.field for w in result.warnings] == ["boundaries_path"]

    def test_non_positive_values_are_errors(self):
        config = valid_config(
            poll_interval_seconds=0,
            snapshot_limit=0,
            proximity_threshold_km=-1,
            fetch_timeout_seconds=0,
        )

        result = validate_config(config)

        assert result.valid is False
        fields = {e.field for e in result.critical_errors}
        assert fields == {
            "poll_interval_seconds",
            "snapshot_limit",
            "proximity_threshold_km",
            "fetch_timeout_seconds",
        }

    def test_non_positive_window_is_error(self):
        result = validate_config(valid_config(window_minutes=0))
        assert [e.field for e in result.critical_errors] == ["window_minutes"]

    def test_window_shorter_than_interval_warns(self):
        result = validate_config(valid_config(poll_interval_seconds=600, window_minutes=5))

        assert result.valid is True
        assert [w.field for w in result.warnings] == ["window_minutes"]

    def test_unknown_backend(self):
        result = validate_config(valid_config(store_backend="postgres"))

        assert result.valid is False
        assert "postgres" in result.critical_errors[0].message

    def test_missing_backend(self):
        result = validate_config(valid_config(store_backend=None))

        assert result.valid is False
        assert [e.field for e in result.critical_errors] == ["store_backend"]

    def test_firestore_without_collection(self):
        result = validate_config(valid_config(store_backend="firestore", firestore_collection=None))
        assert [e.field for e in result.critical_errors] == ["firestore_collection"]

    def test_memory_backend_ignores_collection(self):
        result = validate_config(valid_config(firestore_collection=None))
        assert result.valid is True

    def test_negative_retries(self):
        result = validate_config(valid_config(retry=RetryPolicy(max_retries=-1)))
        assert [e.field for e in result.critical_errors] == ["retry.max_retries"]

    def test_invalid_bounds(self):
        result = validate_config(valid_config(bounds=BoundingBox(40.0, 30.0, -125.0, -120.0)))
        assert result.valid is False


class TestValidateBounds:
    """Tests for validate_bounds()."""

    def test_valid(self):
        assert validate_bounds(BoundingBox(30.0, 40.0, -125.0, -120.0), "bounds") == []

    def test_out_of_range(self):
        errors = validate_bounds(BoundingBox(-95.0, 40.0, -125.0, 190.0), "bounds")
        assert {e.field for e in errors} == {"bounds.min_latitude", "bounds.max_longitude"}
