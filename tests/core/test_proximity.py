"""Unit tests for plate boundary proximity analysis."""

import copy
import math

import pytest

from quakewatch.core.geo import BoundarySegment
from quakewatch.core.proximity import (
    DEFAULT_THRESHOLD_KM,
    analyze,
    find_near,
    nearest_boundary_distance,
    summarize,
)


def point_feature(lon, lat, feature_id="eq"):
    return {
        "type": "Feature",
        "id": feature_id,
        "geometry": {"type": "Point", "coordinates": [lon, lat, 10.0]},
        "properties": {"mag": 4.5, "place": "Test"},
    }


@pytest.fixture
def boundary():
    # Vertex about 55 km north of (0, 0)
    return BoundarySegment(name="test-ridge", vertices=((0.0, 0.5), (10.0, 10.0)))


class TestFindNear:
    """Tests for find_near()."""

    def test_near_with_default_threshold(self, boundary):
        results = find_near([point_feature(0.0, 0.0)], [boundary], 500)

        assert len(results) == 1
        assert results[0].is_near is True
        assert results[0].nearest_distance_km == pytest.approx(55.6, rel=0.01)

    def test_far_with_small_threshold(self, boundary):
        results = find_near([point_feature(0.0, 0.0)], [boundary], 10)
        assert results[0].is_near is False

    def test_threshold_is_inclusive(self, boundary):
        distance = find_near([point_feature(0.0, 0.0)], [boundary])[0].nearest_distance_km
        assert find_near([point_feature(0.0, 0.0)], [boundary], distance)[0].is_near is True

    def test_default_threshold(self):
        assert DEFAULT_THRESHOLD_KM == 500.0

    def test_global_minimum_across_boundaries(self, boundary):
        far = BoundarySegment(name="far", vertices=((90.0, 45.0),))
        results = find_near([point_feature(0.0, 0.0)], [far, boundary])
        assert results[0].nearest_distance_km == pytest.approx(55.6, rel=0.01)

    def test_skips_non_point_features(self, boundary):
        line = {"geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}}
        no_geometry = {"geometry": None}
        short_point = {"geometry": {"type": "Point", "coordinates": [1.0]}}

        results = find_near(
            [line, no_geometry, short_point, point_feature(0.0, 0.0)],
            [boundary],
        )

        assert len(results) == 1

    def test_no_boundaries_means_far(self):
        results = find_near([point_feature(0.0, 0.0)], [])

        assert results[0].nearest_distance_km == math.inf
        assert results[0].is_near is False

    def test_does_not_mutate_inputs(self, boundary):
        features = [point_feature(0.0, 0.0), point_feature(50.0, 50.0, "b")]
        before = copy.deepcopy(features)

        find_near(features, [boundary])

        assert features == before

    def test_result_references_input_feature(self, boundary):
        feature = point_feature(0.0, 0.0)
        assert find_near([feature], [boundary])[0].event is feature


class TestSummaries:
    """Tests for summarize(), analyze() and nearest_boundary_distance()."""

    def test_counts(self, boundary):
        results = find_near(
            [point_feature(0.0, 0.0), point_feature(100.0, -60.0, "far")],
            [boundary],
        )

        summary = summarize(results)

        assert summary.near_count == 1
        assert summary.far_count == 1
        assert [r.event["id"] for r in summary.near] == ["eq"]

    def test_analyze_feature_collection(self, boundary):
        collection = {
            "type": "FeatureCollection",
            "features": [point_feature(0.0, 0.0), "junk"],
        }

        summary = analyze(collection, [boundary], 10)

        assert summary.near_count == 0
        assert summary.far_count == 1

    def test_nearest_boundary_distance_empty(self):
        assert nearest_boundary_distance((0.0, 0.0), []) == math.inf
