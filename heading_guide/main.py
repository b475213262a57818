"""
Main loop: feed events from pluggable sources into the Navigator, stream guidance.
"""

import logging
import select
import signal
import sys
import time
from typing import Optional

from heading_guide.config import Config, parse_args
from heading_guide.geo import GeoPoint, Target, format_coordinates
from heading_guide.navigator import NavigationSnapshot, Navigator, describe
from heading_guide.output_server import GuidanceTcpServer
from heading_guide.sources import create_gpsd_source, create_remote_source
from heading_guide.sources.base import PositionSource

logger = logging.getLogger(__name__)

_shutdown = False


def _signal_handler(signum: int, frame: Optional[object]) -> None:
    global _shutdown
    _shutdown = True


def _initial_target(config: Config) -> Optional[Target]:
    if config.target_lat is None or config.target_lon is None:
        return None
    point = GeoPoint(lat=config.target_lat, lon=config.target_lon)
    label = config.target_label or format_coordinates(point, 5)
    return Target(point=point, label=label)


def run(config: Config) -> int:  # noqa: C901
    """
    Run the daemon: remote events (+ gpsd) in, guidance JSON lines out on TCP.

    Returns exit code (0 = success).
    """
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    log_level = logging.DEBUG if config.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    remote_source = create_remote_source(config.remote_host, config.remote_port)
    if not remote_source:
        logger.error("Remote source bind failed")
        return 1

    position_source: Optional[PositionSource] = None
    if config.position_source in ("gpsd", "auto"):
        position_source = create_gpsd_source(config.gpsd_host, config.gpsd_port)
        if position_source is None:
            if config.position_source == "gpsd":
                logger.error("gpsd not reachable. Use --position-source=remote.")
                remote_source.stop()
                return 1
            logger.info("Auto: gpsd not reachable, positions from remote client")

    try:
        navigator = Navigator(config)
    except ValueError as e:
        logger.error("%s", e)
        remote_source.stop()
        return 1

    server = GuidanceTcpServer(host=config.guidance_host, port=config.guidance_port)
    if not server.start():
        remote_source.stop()
        return 1

    def on_update(snapshot: NavigationSnapshot) -> None:
        server.send_snapshot(snapshot)
        logger.debug("%s", describe(snapshot))

    navigator.add_listener(on_update)
    target = _initial_target(config)
    if target is not None:
        navigator.set_target(target)

    poll_interval = 1.0 / config.poll_rate_hz
    output_interval = 1.0 / config.output_rate_hz
    last_poll_time = 0.0
    last_output_time = 0.0

    try:
        while not _shutdown:
            now = time.monotonic()

            if server.get_socket():
                r, _, _ = select.select(
                    [server.get_socket()],
                    [],
                    [],
                    min(poll_interval, output_interval, 0.1),
                )
                if r:
                    server.accept_new()

            for event in remote_source.drain():
                navigator.dispatch(event)

            if position_source and (now - last_poll_time) >= poll_interval:
                last_poll_time = now
                event = position_source.poll()
                if event is not None:
                    navigator.dispatch(event)

            if (now - last_output_time) >= output_interval:
                last_output_time = now
                snapshot = navigator.snapshot()
                server.send_snapshot(snapshot)
                logger.info("%s", describe(snapshot))

    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
        remote_source.stop()

    return 0


def main() -> None:
    """Entry point for the heading-guide script."""
    config = parse_args()
    sys.exit(run(config))


if __name__ == "__main__":
    main()
