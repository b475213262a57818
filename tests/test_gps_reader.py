"""
Unit tests for gpsd packet conversion and the gpsd position source.
"""

from types import SimpleNamespace
from typing import List, Optional

import pytest

from heading_guide.errors import PositionError, PositionFailure
from heading_guide.geo import GeoPoint
from heading_guide.gps_reader import fix_from_packet, get_current_fix
from heading_guide.sources.base import PositionEvent, SourceFailureEvent
from heading_guide.sources.gpsd import GpsdPositionSource


def _packet(**kwargs: object) -> SimpleNamespace:
    fields = {
        "mode": 3,
        "lat": 52.5,
        "lon": 13.4,
        "hspeed": 1.2,
        "track": 87.5,
        "time": "2024-06-15T12:00:00.000Z",
        "error": {"x": 3.0, "y": 4.0},
    }
    fields.update(kwargs)
    return SimpleNamespace(**fields)


class _FakeGpsd:
    """Stands in for the gpsd-py3 module: returns queued packets."""

    def __init__(self, packets: List[Optional[object]]) -> None:
        self._packets = packets

    def get_current(self) -> Optional[object]:
        packet = self._packets.pop(0)
        if isinstance(packet, Exception):
            raise packet
        return packet


class TestFixFromPacketValid:
    """gpsd packets with a fix."""

    def test_full_packet(self) -> None:
        fix = fix_from_packet(_packet())
        assert fix.point == GeoPoint(52.5, 13.4, 4.0)
        assert fix.course == 87.5
        assert fix.speed_ms == 1.2
        assert fix.time_iso == "2024-06-15T12:00:00.000Z"

    def test_speed_fallback(self) -> None:
        packet = _packet(hspeed=None, speed=3.0)
        assert fix_from_packet(packet).speed_ms == 3.0

    def test_missing_course_and_speed_stay_none(self) -> None:
        packet = _packet(hspeed=None, track=None, error=None)
        fix = fix_from_packet(packet)
        assert fix.course is None
        assert fix.speed_ms is None
        assert fix.point.accuracy_m is None

    def test_epoch_time_converted(self) -> None:
        fix = fix_from_packet(_packet(time=0))
        assert fix.time_iso is None
        fix = fix_from_packet(_packet(time=1718452800))
        assert fix.time_iso == "2024-06-15T12:00:00Z"

    def test_2d_fix_accepted(self) -> None:
        assert fix_from_packet(_packet(mode=2)).point.lat == 52.5


class TestFixFromPacketInvalid:
    """Packets without a usable fix raise PositionError."""

    @pytest.mark.parametrize("mode", [0, 1, None])
    def test_no_fix_mode(self, mode: object) -> None:
        with pytest.raises(PositionError) as exc_info:
            fix_from_packet(_packet(mode=mode))
        assert exc_info.value.reason is PositionFailure.POSITION_UNAVAILABLE

    def test_missing_coordinates(self) -> None:
        with pytest.raises(PositionError):
            fix_from_packet(_packet(lat=None))

    def test_out_of_range_coordinates(self) -> None:
        with pytest.raises(PositionError):
            fix_from_packet(_packet(lat=123.0))


class TestGetCurrentFix:
    """get_current_fix wraps gpsd errors."""

    def test_not_connected(self) -> None:
        with pytest.raises(PositionError):
            get_current_fix(None)

    def test_gpsd_exception(self) -> None:
        with pytest.raises(PositionError):
            get_current_fix(_FakeGpsd([ConnectionError("gone")]))

    def test_no_packet(self) -> None:
        with pytest.raises(PositionError):
            get_current_fix(_FakeGpsd([None]))

    def test_fix(self) -> None:
        assert get_current_fix(_FakeGpsd([_packet()])).course == 87.5


class TestGpsdPositionSource:
    """Polling dedupes repeated packets and repeated failures."""

    def test_new_fix_reported(self) -> None:
        source = GpsdPositionSource(_FakeGpsd([_packet()]))
        event = source.poll()
        assert isinstance(event, PositionEvent)
        assert event.fix.point.lat == 52.5

    def test_same_timestamp_skipped(self) -> None:
        source = GpsdPositionSource(_FakeGpsd([_packet(), _packet()]))
        assert source.poll() is not None
        assert source.poll() is None

    def test_new_timestamp_reported(self) -> None:
        later = _packet(time="2024-06-15T12:00:01.000Z", lat=52.51)
        source = GpsdPositionSource(_FakeGpsd([_packet(), later]))
        source.poll()
        event = source.poll()
        assert isinstance(event, PositionEvent)
        assert event.fix.point.lat == 52.51

    def test_failure_reported_once(self) -> None:
        source = GpsdPositionSource(
            _FakeGpsd([_packet(mode=1), _packet(mode=1), _packet()])
        )
        assert isinstance(source.poll(), SourceFailureEvent)
        assert source.poll() is None
        assert isinstance(source.poll(), PositionEvent)
