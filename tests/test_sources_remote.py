"""
Unit tests for remote source JSON parsing: valid, invalid, and edge cases.
"""

from heading_guide.errors import (
    AddressFailure,
    AddressResolutionError,
    OrientationError,
    OrientationFailure,
    PositionError,
    PositionFailure,
)
from heading_guide.geo import GeoPoint
from heading_guide.orientation import OrientationEvent
from heading_guide.sources.base import (
    ManualHeadingEvent,
    OrientationInput,
    PositionEvent,
    ScreenRotationEvent,
    SourceFailureEvent,
    TargetEvent,
)
from heading_guide.sources.remote import RemoteSource, parse_message


class TestRemoteSourceParseLineValid:
    """Valid JSON input for remote protocol."""

    def test_position_with_course_and_speed(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line(
            '{"lat":52.5,"lon":10.1,"accuracy":4.5,"course":90,"speed":1.5,'
            '"time_iso":"2024-06-15T12:00:00Z"}'
        )
        events = source.drain()
        assert len(events) == 1
        event = events[0]
        assert isinstance(event, PositionEvent)
        assert event.fix.point == GeoPoint(52.5, 10.1, 4.5)
        assert event.fix.course == 90.0
        assert event.fix.speed_ms == 1.5
        assert event.fix.time_iso == "2024-06-15T12:00:00Z"

    def test_position_minimal_keys(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"lat":-45.0,"lon":170.0}')
        (event,) = source.drain()
        assert isinstance(event, PositionEvent)
        assert event.fix.point == GeoPoint(-45.0, 170.0)
        assert event.fix.course is None
        assert event.fix.speed_ms is None
        assert event.fix.time_iso is None

    def test_orientation_alpha(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"orientation":{"alpha":90,"beta":1,"gamma":2,"absolute":true}}')
        (event,) = source.drain()
        assert isinstance(event, OrientationInput)
        assert event.event == OrientationEvent(
            alpha=90.0, beta=1.0, gamma=2.0, absolute=True
        )

    def test_orientation_webkit_compass(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"orientation":{"webkitCompassHeading":271.5}}')
        (event,) = source.drain()
        assert isinstance(event, OrientationInput)
        assert event.event.compass_heading == 271.5

    def test_target(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"target":{"lat":48.8584,"lon":2.2945,"label":"Eiffel"}}')
        (event,) = source.drain()
        assert isinstance(event, TargetEvent)
        assert event.target.point == GeoPoint(48.8584, 2.2945)
        assert event.target.label == "Eiffel"

    def test_target_without_label_uses_coordinates(self) -> None:
        (event,) = parse_message({"target": {"lat": 1.5, "lon": 2.25}})
        assert isinstance(event, TargetEvent)
        assert event.target.label == "1.50000, 2.25000"

    def test_geocode_results(self) -> None:
        (event,) = parse_message(
            {
                "geocode": {
                    "query": "tower",
                    "results": [{"lat": "51.5", "lon": "-0.07", "display_name": "Tower"}],
                }
            }
        )
        assert isinstance(event, TargetEvent)
        assert event.target.label == "Tower"

    def test_manual_heading_and_screen_rotation(self) -> None:
        events = parse_message({"manual_heading": 45, "screen_rotation": 90})
        assert events == [ScreenRotationEvent(90.0), ManualHeadingEvent(45.0)]

    def test_screen_rotation_null(self) -> None:
        assert parse_message({"screen_rotation": None}) == [ScreenRotationEvent(None)]

    def test_combined_order(self) -> None:
        events = parse_message(
            {
                "lat": 0,
                "lon": 0,
                "orientation": {"alpha": 10},
                "screen_rotation": 0,
            }
        )
        assert [type(e) for e in events] == [
            ScreenRotationEvent,
            OrientationInput,
            PositionEvent,
        ]

    def test_numeric_strings_converted(self) -> None:
        (event,) = parse_message({"lat": "1.5", "lon": "2.5", "speed": "3"})
        assert isinstance(event, PositionEvent)
        assert event.fix.point == GeoPoint(1.5, 2.5)
        assert event.fix.speed_ms == 3.0


class TestRemoteSourceFailures:
    """Failures reported by the client become categorized errors."""

    def test_position_error_by_reason(self) -> None:
        (event,) = parse_message(
            {"error": {"source": "position", "reason": "timeout", "message": "slow"}}
        )
        assert isinstance(event, SourceFailureEvent)
        assert isinstance(event.error, PositionError)
        assert event.error.reason is PositionFailure.TIMEOUT
        assert event.error.message == "slow"

    def test_position_error_by_code(self) -> None:
        (event,) = parse_message({"error": {"source": "position", "code": 1}})
        assert isinstance(event, SourceFailureEvent)
        assert event.error.reason is PositionFailure.PERMISSION_DENIED

    def test_orientation_error(self) -> None:
        (event,) = parse_message(
            {"error": {"source": "orientation", "reason": "permission-denied"}}
        )
        assert isinstance(event, SourceFailureEvent)
        assert isinstance(event.error, OrientationError)
        assert event.error.reason is OrientationFailure.PERMISSION_DENIED

    def test_orientation_error_unknown_reason(self) -> None:
        (event,) = parse_message({"error": {"source": "orientation"}})
        assert isinstance(event, SourceFailureEvent)
        assert event.error.reason is OrientationFailure.UNSUPPORTED

    def test_geocode_transport_error(self) -> None:
        (event,) = parse_message({"geocode": {"query": "x", "error": "HTTP 503"}})
        assert isinstance(event, SourceFailureEvent)
        assert isinstance(event.error, AddressResolutionError)
        assert event.error.reason is AddressFailure.TRANSPORT_ERROR

    def test_geocode_no_match(self) -> None:
        (event,) = parse_message({"geocode": {"query": "x", "results": []}})
        assert isinstance(event, SourceFailureEvent)
        assert event.error.reason is AddressFailure.NO_MATCH

    def test_unknown_error_source_ignored(self) -> None:
        assert parse_message({"error": {"source": "printer"}}) == []


class TestRemoteSourceParseLineInvalid:
    """Invalid input for remote protocol."""

    def test_empty_line_ignored(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line("")
        assert source.drain() == []

    def test_invalid_json_ignored(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"lat": 1, "lon": 2')  # missing closing brace
        assert source.drain() == []

    def test_not_an_object_ignored(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line("[1, 2, 3]")
        assert source.drain() == []

    def test_missing_lon_ignored(self) -> None:
        assert parse_message({"lat": 52.0}) == []

    def test_out_of_range_position_ignored(self) -> None:
        assert parse_message({"lat": 95.0, "lon": 0.0}) == []

    def test_non_numeric_position_ignored(self) -> None:
        assert parse_message({"lat": "north", "lon": 0.0}) == []

    def test_nan_manual_heading_ignored(self) -> None:
        assert parse_message({"manual_heading": "nan"}) == []

    def test_boolean_manual_heading_ignored(self) -> None:
        assert parse_message({"manual_heading": True}) == []

    def test_negative_accuracy_dropped(self) -> None:
        (event,) = parse_message({"lat": 0, "lon": 0, "accuracy": -3})
        assert isinstance(event, PositionEvent)
        assert event.fix.point.accuracy_m is None

    def test_time_iso_non_string_set_to_none(self) -> None:
        (event,) = parse_message({"lat": 0, "lon": 0, "time_iso": 123})
        assert isinstance(event, PositionEvent)
        assert event.fix.time_iso is None

    def test_oversized_integers_dropped(self) -> None:
        huge = "1" + "0" * 400
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"lat":%s,"lon":1,"manual_heading":%s}' % (huge, huge))
        assert source.drain() == []

    def test_geocode_oversized_latitude_is_invalid_coordinates(self) -> None:
        huge = "1" + "0" * 400
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line(
            '{"geocode":{"query":"x","results":[{"lat":%s,"lon":"1"}]}}' % huge
        )
        source._parse_line('{"manual_heading":45}')
        events = source.drain()
        assert len(events) == 2
        assert isinstance(events[0], SourceFailureEvent)
        assert events[0].error.reason is AddressFailure.INVALID_COORDINATES
        assert events[1] == ManualHeadingEvent(45.0)

    def test_number_literal_too_long_ignored(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"lat":%s,"lon":1}' % ("9" * 5000))
        source._parse_line('{"lat":1,"lon":2}')
        events = source.drain()
        assert len(events) == 1
        assert isinstance(events[0], PositionEvent)


class TestRemoteSourceQueue:
    """Events are queued in arrival order and drained once."""

    def test_drain_before_any_parse_is_empty(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        assert source.drain() == []

    def test_events_kept_in_order(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"lat":1,"lon":2}')
        source._parse_line('{"manual_heading":10}')
        source._parse_line('{"lat":3,"lon":4}')
        events = source.drain()
        assert [type(e) for e in events] == [
            PositionEvent,
            ManualHeadingEvent,
            PositionEvent,
        ]
        assert events[2].fix.point == GeoPoint(3.0, 4.0)  # type: ignore[union-attr]

    def test_drain_clears_queue(self) -> None:
        source = RemoteSource(host="127.0.0.1", port=0)
        source._parse_line('{"manual_heading":10}')
        assert len(source.drain()) == 1
        assert source.drain() == []
