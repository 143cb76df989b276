"""Pytest configuration and fixtures for esphome_link tests."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest_asyncio
from google.protobuf.message import Message

from esphome_link import api_proto
from esphome_link.messages import MessageType
from esphome_link.session import EspHomeSession
from esphome_link.transport import Frame, build_frame
from esphome_link.varint import decode_varint


class FakeStreamWriter:
    """In-memory stand-in for asyncio.StreamWriter.

    Every write() is handed to on_write, so a fake node can answer requests
    as they are sent.
    """

    def __init__(self, on_write: Any = None) -> None:
        self.data = bytearray()
        self.closed = False
        self._on_write = on_write

    def write(self, data: bytes) -> None:
        if self.closed:
            raise ConnectionResetError("Writer is closed")
        self.data.extend(data)
        if self._on_write is not None:
            self._on_write(data)

    async def drain(self) -> None:
        return None

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None

    def is_closing(self) -> bool:
        return self.closed


def encode(msg_type: int, message: Message | None = None) -> bytes:
    """Build wire bytes for one frame carrying a protobuf message."""
    payload = message.SerializeToString() if message is not None else b""
    return build_frame(msg_type, payload)


def parse_frames(data: bytes) -> list[Frame]:
    """Split raw written bytes back into frames."""
    frames = []
    offset = 0
    while offset < len(data):
        assert data[offset] == 0x00, f"bad preamble at {offset}"
        length, offset = decode_varint(data, offset + 1)
        msg_type, offset = decode_varint(data, offset)
        frames.append(Frame(msg_type, bytes(data[offset : offset + length])))
        offset += length
    return frames


def make_reader(*chunks: bytes, eof: bool = False) -> asyncio.StreamReader:
    """Create a StreamReader pre-fed with chunks. Call inside a running loop."""
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    if eof:
        reader.feed_eof()
    return reader


def hello_response(name: str = "test-node") -> bytes:
    return encode(
        MessageType.HELLO_RESPONSE,
        api_proto.HelloResponse(
            api_version_major=1,
            api_version_minor=10,
            server_info=f"{name} (esphome v2024.6.0)",
            name=name,
        ),
    )


def auth_response(invalid_password: bool = False) -> bytes:
    return encode(
        MessageType.AUTHENTICATION_RESPONSE,
        api_proto.AuthenticationResponse(invalid_password=invalid_password),
    )


def switch_info(key: int, name: str, object_id: str = "") -> bytes:
    return encode(
        MessageType.LIST_ENTITIES_SWITCH_RESPONSE,
        api_proto.ListEntitiesSwitchResponse(
            key=key, name=name, object_id=object_id or name.lower().replace(" ", "_")
        ),
    )


def sensor_info(
    key: int, name: str, unit: str = "", accuracy_decimals: int = 1
) -> bytes:
    return encode(
        MessageType.LIST_ENTITIES_SENSOR_RESPONSE,
        api_proto.ListEntitiesSensorResponse(
            key=key,
            name=name,
            object_id=name.lower().replace(" ", "_"),
            unit_of_measurement=unit,
            accuracy_decimals=accuracy_decimals,
        ),
    )


def binary_sensor_info(key: int, name: str, device_class: str = "") -> bytes:
    return encode(
        MessageType.LIST_ENTITIES_BINARY_SENSOR_RESPONSE,
        api_proto.ListEntitiesBinarySensorResponse(
            key=key,
            name=name,
            object_id=name.lower().replace(" ", "_"),
            device_class=device_class,
        ),
    )


def list_done() -> bytes:
    return encode(MessageType.LIST_ENTITIES_DONE_RESPONSE)


def switch_state(key: int, state: bool) -> bytes:
    return encode(
        MessageType.SWITCH_STATE_RESPONSE,
        api_proto.SwitchStateResponse(key=key, state=state),
    )


def sensor_state(key: int, state: float, missing_state: bool = False) -> bytes:
    return encode(
        MessageType.SENSOR_STATE_RESPONSE,
        api_proto.SensorStateResponse(
            key=key, state=state, missing_state=missing_state
        ),
    )


def binary_sensor_state(key: int, state: bool, missing_state: bool = False) -> bytes:
    return encode(
        MessageType.BINARY_SENSOR_STATE_RESPONSE,
        api_proto.BinarySensorStateResponse(
            key=key, state=state, missing_state=missing_state
        ),
    )


# Reply marker: end the stream instead of feeding bytes.
HANG_UP = b""


class FakeNode:
    """Scripted node on the far side of an in-memory stream pair.

    Replies registered with reply() are fed to the reader the first time a
    frame of the matching request type is written. HANG_UP in a reply
    closes the stream at that point.
    """

    def __init__(self) -> None:
        self.reader = asyncio.StreamReader()
        self.writer = FakeStreamWriter(self._on_write)
        self.sent: list[Frame] = []
        self._replies: dict[int, list[bytes]] = {}

    @property
    def sent_types(self) -> list[int]:
        return [frame.type for frame in self.sent]

    def reply(self, request_type: int, *frames: bytes) -> None:
        """Feed frames once a request of request_type is sent."""
        self._replies.setdefault(int(request_type), []).extend(frames)

    def feed(self, *frames: bytes) -> None:
        for frame in frames:
            self.reader.feed_data(frame)

    def hang_up(self) -> None:
        self.reader.feed_eof()

    def _on_write(self, data: bytes) -> None:
        for frame in parse_frames(data):
            self.sent.append(frame)
            for chunk in self._replies.pop(frame.type, []):
                if chunk == HANG_UP:
                    self.reader.feed_eof()
                else:
                    self.reader.feed_data(chunk)


@pytest_asyncio.fixture
async def fake_node() -> FakeNode:
    """Fake node with no scripted replies."""
    return FakeNode()


def patch_connect(node: FakeNode) -> Any:
    """Route the session's TCP connect to a fake node."""
    return patch(
        "esphome_link.session.open_tcp_connection",
        AsyncMock(return_value=(node.reader, node.writer)),
    )


async def open_session(
    node: FakeNode, *, authenticate: bool = True, **kwargs: Any
) -> EspHomeSession:
    """Connect a session to a fake node and return it Ready.

    With authenticate=False the node stays silent after the auth request
    and the session relies on the silent-success wait.
    """
    node.reply(MessageType.HELLO_REQUEST, hello_response())
    if authenticate:
        node.reply(MessageType.AUTHENTICATION_REQUEST, auth_response())

    kwargs.setdefault("auth_wait", 0.05)
    kwargs.setdefault("disconnect_timeout", 0.1)
    kwargs.setdefault("handshake_timeout", 0.5)
    session = EspHomeSession("192.168.0.26", **kwargs)
    with patch_connect(node):
        await session.connect()
    return session
