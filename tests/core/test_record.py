"""Unit tests for persisted record and client payload shapes."""

from datetime import datetime, timezone

import pytest

from quakewatch.core.earthquake import EarthquakeEvent
from quakewatch.core.record import (
    build_feature_collection,
    encode_coordinates,
    event_to_payload,
    event_to_record,
    parse_coordinates,
    payload_to_feature,
    record_to_event,
)


@pytest.fixture
def sample_event():
    return EarthquakeEvent(
        external_id="nc73912345",
        magnitude=3.4,
        place="5 km W of Cobb, CA",
        occurred_at=datetime(2024, 5, 2, 14, 0, 0, tzinfo=timezone.utc),
        updated_at=datetime(2024, 5, 2, 14, 20, 0, tzinfo=timezone.utc),
        detail_url="https://earthquake.usgs.gov/fdsnws/event/1/query?eventid=nc73912345",
        longitude=-122.78,
        latitude=38.82,
        depth_km=2.1,
    )


class TestCoordinates:
    """Tests for the "lon,lat,depth" encoding."""

    def test_encode(self):
        assert encode_coordinates(-122.78, 38.82, 2.1) == "-122.78,38.82,2.1"

    def test_parse(self):
        assert parse_coordinates("-122.78,38.82,2.1") == (-122.78, 38.82, 2.1)

    def test_parse_tolerates_whitespace(self):
        assert parse_coordinates("1.5, 2.5, 3") == (1.5, 2.5, 3.0)

    @pytest.mark.parametrize(
        "value",
        ["12.3,45.6", "1,2,3,4", "", "a,b,c", "1,2,nan", "1,,3"],
    )
    def test_parse_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_coordinates(value)

    def test_parse_rejects_non_string(self):
        with pytest.raises(ValueError):
            parse_coordinates(None)


class TestRecord:
    """Tests for event_to_record() / record_to_event()."""

    def test_record_shape(self, sample_event):
        record = event_to_record(sample_event)

        assert record["api_id"] == "nc73912345"
        assert record["coordinates"] == "-122.78,38.82,2.1"
        assert record["time"] == sample_event.occurred_at
        assert record["updated"] == sample_event.updated_at
        assert record["detail_url"] == sample_event.detail_url

    def test_record_restores_event(self, sample_event):
        assert record_to_event(event_to_record(sample_event)) == sample_event

    def test_accepts_iso_and_naive_timestamps(self, sample_event):
        record = event_to_record(sample_event)
        record["time"] = "2024-05-02T14:00:00+00:00"
        record["updated"] = datetime(2024, 5, 2, 14, 20, 0)

        event = record_to_event(record)

        assert event.occurred_at == sample_event.occurred_at
        assert event.updated_at == sample_event.updated_at

    def test_malformed_coordinates_raise(self, sample_event):
        record = event_to_record(sample_event)
        record["coordinates"] = "12.3,45.6"

        with pytest.raises(ValueError):
            record_to_event(record)

    def test_missing_field_raises_value_error(self, sample_event):
        record = event_to_record(sample_event)
        del record["api_id"]

        with pytest.raises(ValueError):
            record_to_event(record)


class TestPayload:
    """Tests for the client payload and GeoJSON conversion."""

    def test_payload_fields(self, sample_event):
        payload = event_to_payload(sample_event)

        assert payload == {
            "id": "nc73912345",
            "apiId": "nc73912345",
            "magnitude": 3.4,
            "place": "5 km W of Cobb, CA",
            "time": "2024-05-02T14:00:00+00:00",
            "updated": "2024-05-02T14:20:00+00:00",
            "detailUrl": sample_event.detail_url,
            "coordinates": "-122.78,38.82,2.1",
        }

    def test_payload_to_feature(self, sample_event):
        feature = payload_to_feature(event_to_payload(sample_event))

        assert feature["geometry"] == {
            "type": "Point",
            "coordinates": [-122.78, 38.82, 2.1],
        }
        assert feature["properties"]["mag"] == 3.4
        assert feature["properties"]["place"] == "5 km W of Cobb, CA"

    def test_feature_collection_excludes_malformed(self, sample_event):
        """A two-component coordinate string is dropped without raising."""
        good = event_to_payload(sample_event)
        bad = {**good, "id": "broken", "coordinates": "12.3,45.6"}

        collection, excluded = build_feature_collection([good, bad])

        assert collection["type"] == "FeatureCollection"
        assert [f["id"] for f in collection["features"]] == ["nc73912345"]
        assert excluded == ["broken"]

    def test_feature_collection_empty(self):
        collection, excluded = build_feature_collection([])
        assert collection == {"type": "FeatureCollection", "features": []}
        assert excluded == []
