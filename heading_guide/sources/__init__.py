"""
Pluggable event sources.

- gpsd: position fixes from a local gpsd
- remote: TCP server accepting JSON events from a phone or browser client
"""

from heading_guide.sources.base import EventSource, PositionSource
from heading_guide.sources.gpsd import GpsdPositionSource, create_gpsd_source
from heading_guide.sources.remote import RemoteSource, create_remote_source

__all__ = [
    "EventSource",
    "GpsdPositionSource",
    "PositionSource",
    "RemoteSource",
    "create_gpsd_source",
    "create_remote_source",
]
