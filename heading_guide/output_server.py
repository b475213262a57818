"""
TCP server that streams guidance snapshots to clients, one JSON object per line.
"""

import json
import logging
import socket
import threading
from typing import List, Optional

from heading_guide.geo import GeoPoint
from heading_guide.guidance import format_distance
from heading_guide.navigator import NavigationSnapshot

logger = logging.getLogger(__name__)


def _point_dict(point: Optional[GeoPoint]) -> Optional[dict]:
    if point is None:
        return None
    return {"lat": point.lat, "lon": point.lon, "accuracy": point.accuracy_m}


def snapshot_to_dict(snapshot: NavigationSnapshot) -> dict:
    """Plain JSON-suitable view of a snapshot."""
    guidance = snapshot.guidance
    instruction = guidance.instruction
    target = None
    if snapshot.target is not None:
        target = _point_dict(snapshot.target.point) or {}
        target["label"] = snapshot.target.label
    return {
        "heading": snapshot.heading.value,
        "heading_source": snapshot.heading.source.value,
        "position": _point_dict(snapshot.position),
        "target": target,
        "has_guidance": guidance.has_guidance,
        "distance_m": guidance.distance_m,
        "distance_text": format_distance(guidance.distance_m),
        "bearing_to_target": guidance.bearing_to_target,
        "relative_bearing": guidance.relative_bearing,
        "instruction": instruction.direction.value if instruction else None,
        "instruction_text": instruction.text if instruction else None,
        "status": snapshot.status,
        "status_is_error": snapshot.status_is_error,
    }



class GuidanceTcpServer:
    """
    TCP server that streams navigation snapshots as JSON lines.

    The latest snapshot is kept and sent to each client as soon as it
    connects, so a new client does not wait for the next update.
    Thread-safe: call send_snapshot() from any thread.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 2950) -> None:
        self._host = host
        self._port = port
        self._sock: Optional[socket.socket] = None
        self._clients: List[socket.socket] = []
        self._latest: Optional[bytes] = None
        self._lock = threading.Lock()

    @staticmethod
    def encode(snapshot: NavigationSnapshot) -> bytes:
        """One newline-terminated UTF-8 JSON line."""
        line = json.dumps(snapshot_to_dict(snapshot), ensure_ascii=False) + "\n"
        return line.encode("utf-8")

    @property
    def latest(self) -> Optional[bytes]:
        """Encoded line of the last snapshot sent, if any."""
        with self._lock:
            return self._latest

    def start(self) -> bool:
        """Bind and listen; return True on success."""
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((self._host, self._port))
            self._sock.listen(4)
            self._sock.setblocking(False)
            logger.info(
                "Guidance TCP server listening on %s:%s", self._host, self._port
            )
            return True
        except OSError as e:
            logger.error("Guidance server bind failed: %s", e)
            return False

    def stop(self) -> None:
        """Close server and all client connections."""
        with self._lock:
            for c in self._clients:
                try:
                    c.close()
                except OSError:
                    pass
            self._clients.clear()
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None

    def accept_new(self) -> None:
        """Accept a pending connection and replay the latest snapshot to it."""
        if not self._sock:
            return
        try:
            client, _ = self._sock.accept()
        except BlockingIOError:
            return
        except OSError as e:
            logger.debug("accept error: %s", e)
            return
        with self._lock:
            if self._latest is not None:
                try:
                    client.sendall(self._latest)
                except OSError as e:
                    logger.debug("Guidance client dropped on connect: %s", e)
                    client.close()
                    return
            self._clients.append(client)
            total = len(self._clients)
        logger.info("Guidance client connected (total %d)", total)

    def send_snapshot(self, snapshot: NavigationSnapshot) -> None:
        """Send snapshot to all connected clients; dead clients are dropped."""
        data = self.encode(snapshot)
        with self._lock:
            self._latest = data
            dead = []
            for c in self._clients:
                try:
                    c.sendall(data)
                except OSError:
                    dead.append(c)
            for c in dead:
                self._clients.remove(c)
        if dead:
            logger.info("Dropped %d guidance client(s)", len(dead))

    def get_socket(self) -> Optional[socket.socket]:
        """Return the server socket for select()."""
        return self._sock
