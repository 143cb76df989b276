"""Stream transport for the ESPHome native API."""

from .frames import Frame, FrameTransport, build_frame
from .tcp import open_tcp_connection

__all__ = [
    "Frame",
    "FrameTransport",
    "build_frame",
    "open_tcp_connection",
]
