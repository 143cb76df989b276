"""Protocol Buffer serialization for native API frame payloads.

The framing layer treats payloads as opaque bytes. This module is the only
place that turns them into message objects and back.
"""

from __future__ import annotations

from typing import Any, TypeVar

from google.protobuf.message import DecodeError, Message

from . import api_proto
from .errors import EspHomeDecodeError

API_VERSION_MAJOR = 1
API_VERSION_MINOR = 13

MessageT = TypeVar("MessageT", bound=Message)


def serialize_message(message: Message) -> bytes:
    """Serialize protobuf message to binary.

    Args:
        message: Protobuf message

    Returns:
        Binary-serialized message
    """
    return message.SerializeToString()


def deserialize_message(message_class: type[MessageT], data: bytes) -> MessageT:
    """Deserialize binary data to protobuf message.

    Args:
        message_class: Message class the payload is declared as
        data: Binary message data

    Returns:
        Parsed protobuf message

    Raises:
        EspHomeDecodeError: If data is invalid
    """
    message = message_class()
    try:
        message.ParseFromString(data)
    except DecodeError as err:
        raise EspHomeDecodeError(
            f"Invalid {message_class.DESCRIPTOR.name} payload ({len(data)} bytes)"
        ) from err
    return message


def build_hello_request(
    client_info: str,
    *,
    api_version_major: int = API_VERSION_MAJOR,
    api_version_minor: int = API_VERSION_MINOR,
) -> Any:
    """Build hello request announcing client identity and API version."""
    return api_proto.HelloRequest(
        client_info=client_info,
        api_version_major=api_version_major,
        api_version_minor=api_version_minor,
    )


def build_auth_request(password: str = "") -> Any:
    """Build authentication request (empty password when none configured)."""
    return api_proto.AuthenticationRequest(password=password)


def build_switch_command(key: int, state: bool) -> Any:
    """Build switch command for the entity with the given key."""
    return api_proto.SwitchCommandRequest(key=key, state=state)
