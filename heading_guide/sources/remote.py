"""
Remote event source: TCP server accepting JSON from a phone or browser client.

Protocol: one JSON object per line (newline-delimited). Keys may be combined;
events from one line are queued in the order listed here.
- Screen rotation: {"screen_rotation": 0|90|180|270|null}
- Orientation: {"orientation": {"alpha":float,"beta":float,"gamma":float,
                "absolute":bool}} or {"orientation": {"webkitCompassHeading":float}}
- Position: {"lat":float,"lon":float,"accuracy":float,"course":float,
             "speed":float,"time_iso":str|null}
- Manual heading: {"manual_heading":float}
- Target: {"target": {"lat":float,"lon":float,"label":str}}
- Geocoder result: {"geocode": {"query":str,"results":[...nominatim hits]}}
  or {"geocode": {"query":str,"error":str}} for a failed request
- Failure: {"error": {"source":"position"|"orientation","code":int,
            "reason":str,"message":str}}
"""

import json
import logging
import math
import socket
import threading
from typing import List, Optional

from heading_guide.errors import (
    AddressFailure,
    AddressResolutionError,
    OrientationError,
    OrientationFailure,
    PositionError,
    PositionFailure,
    UpstreamUnavailable,
)
from heading_guide.geo import GeoPoint, Target, format_coordinates, valid_coordinates
from heading_guide.geocode import parse_search_results
from heading_guide.gps_reader import PositionFix
from heading_guide.orientation import OrientationEvent
from heading_guide.sources.base import (
    Event,
    EventSource,
    ManualHeadingEvent,
    OrientationInput,
    PositionEvent,
    ScreenRotationEvent,
    SourceFailureEvent,
    TargetEvent,
)

logger = logging.getLogger(__name__)


def _optional_float(value: object) -> Optional[float]:
    """Float value of a finite number or numeric string; None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    return result if math.isfinite(result) else None


def _parse_point(data: dict) -> Optional[GeoPoint]:
    lat = _optional_float(data.get("lat"))
    lon = _optional_float(data.get("lon"))
    if lat is None or lon is None or not valid_coordinates(lat, lon):
        return None
    accuracy = _optional_float(data.get("accuracy"))
    if accuracy is not None and accuracy < 0:
        accuracy = None
    return GeoPoint(lat=lat, lon=lon, accuracy_m=accuracy)


def _parse_failure(data: object) -> Optional[UpstreamUnavailable]:
    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if not isinstance(message, str) or not message:
        message = None
    source = data.get("source")
    reason = data.get("reason")
    if source == "position":
        try:
            failure = PositionFailure(reason)
        except ValueError:
            failure = PositionFailure.from_code(data.get("code"))
        return PositionError(failure, message)
    if source == "orientation":
        try:
            orientation_failure = OrientationFailure(reason)
        except ValueError:
            orientation_failure = OrientationFailure.UNSUPPORTED
        return OrientationError(orientation_failure, message)
    return None


def _parse_geocode(data: object) -> Optional[Event]:
    if not isinstance(data, dict):
        return None
    query = data.get("query")
    if not isinstance(query, str):
        query = ""
    error = data.get("error")
    if error is not None:
        return SourceFailureEvent(
            AddressResolutionError(AddressFailure.TRANSPORT_ERROR, str(error))
        )
    try:
        target = parse_search_results(data.get("results"), query)
    except AddressResolutionError as e:
        return SourceFailureEvent(e)
    return TargetEvent(target)


def parse_message(data: object) -> List[Event]:
    """Turn one decoded JSON message into events. Unusable parts are skipped."""
    events: List[Event] = []
    if not isinstance(data, dict):
        return events
    if "screen_rotation" in data:
        events.append(ScreenRotationEvent(_optional_float(data["screen_rotation"])))
    if "orientation" in data:
        events.append(OrientationInput(OrientationEvent.from_dict(data["orientation"])))
    if "lat" in data and "lon" in data:
        point = _parse_point(data)
        if point is not None:
            fix = PositionFix(
                point=point,
                course=_optional_float(data.get("course")),
                speed_ms=_optional_float(data.get("speed")),
                time_iso=data.get("time_iso")
                if isinstance(data.get("time_iso"), str)
                else None,
            )
            events.append(PositionEvent(fix))
        else:
            logger.debug("Remote position ignored: %r", data)
    manual = _optional_float(data.get("manual_heading"))
    if manual is not None:
        events.append(ManualHeadingEvent(manual))
    target_data = data.get("target")
    if isinstance(target_data, dict):
        point = _parse_point(target_data)
        if point is not None:
            label = target_data.get("label")
            if not isinstance(label, str) or not label:
                label = format_coordinates(point, 5)
            events.append(TargetEvent(Target(point=point, label=label)))
    if "geocode" in data:
        geocode_event = _parse_geocode(data["geocode"])
        if geocode_event is not None:
            events.append(geocode_event)
    failure = _parse_failure(data.get("error"))
    if failure is not None:
        events.append(SourceFailureEvent(failure))
    return events


class RemoteSource(EventSource):
    """
    Event source fed by a remote TCP client.

    Start the server with start(); the listener thread only parses lines and
    queues events, drain() hands them to the caller in arrival order.
    """

    def __init__(self, host: str = "0.0.0.0", port: int = 2949) -> None:
        self._host = host
        self._port = port
        self._lock = threading.Lock()
        self._events: List[Event] = []
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._shutdown = False

    def start(self) -> bool:
        """Bind and start the listener thread. Return True on success."""
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((self._host, self._port))
            self._sock.listen(1)
            self._sock.settimeout(1.0)
            self._thread = threading.Thread(target=self._accept_loop, daemon=True)
            self._thread.start()
            logger.info(
                "Remote source listening on %s:%s",
                self._host,
                self._port,
            )
            return True
        except OSError as e:
            logger.error("Remote source bind failed: %s", e)
            return False

    def stop(self) -> None:
        """Stop the listener and close the socket."""
        self._shutdown = True
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

    def _accept_loop(self) -> None:
        while not self._shutdown and self._sock:
            try:
                client, addr = self._sock.accept()
                logger.info("Remote client connected from %s", addr)
                try:
                    client.settimeout(30.0)
                    with client.makefile(mode="r", encoding="utf-8") as f:
                        for line in f:
                            if self._shutdown:
                                break
                            line = line.strip()
                            if not line:
                                continue
                            self._parse_line(line)
                except (
                    ConnectionResetError,
                    BrokenPipeError,
                    UnicodeDecodeError,
                    socket.timeout,
                ) as e:
                    logger.debug("Remote client error: %s", e)
                finally:
                    try:
                        client.close()
                    except OSError:
                        pass
                    logger.info("Remote client disconnected")
            except socket.timeout:
                continue
            except OSError:
                if not self._shutdown:
                    logger.debug("Remote accept error")
                break

    def _parse_line(self, line: str) -> None:
        try:
            data = json.loads(line)
        except (ValueError, RecursionError):
            logger.debug("Remote line is not JSON: %.80s", line)
            return
        events = parse_message(data)
        if not events:
            return
        with self._lock:
            self._events.extend(events)

    def drain(self) -> List[Event]:
        with self._lock:
            events = self._events
            self._events = []
        return events


def create_remote_source(host: str, port: int) -> Optional[RemoteSource]:
    """Create and start the remote source. Returns None on bind failure."""
    source = RemoteSource(host=host, port=port)
    if source.start():
        return source
    return None
