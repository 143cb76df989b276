"""Asyncio client for the ESPHome native API."""

__version__ = "0.1.0"

from .config import ClientConfig, ConfigLoadError, NodeConfig, load_config, parse_config
from .display import format_state
from .entities import (
    CAPABILITIES,
    Entity,
    EntityCapability,
    EntityKind,
    EntitySnapshot,
    build_command,
)
from .errors import (
    EspHomeAuthError,
    EspHomeBadPreamble,
    EspHomeClientError,
    EspHomeCommandError,
    EspHomeConnectionClosed,
    EspHomeConnectionError,
    EspHomeDecodeError,
    EspHomeInvalidCredential,
    EspHomeNothingToSync,
    EspHomeNotReady,
    EspHomeProtocolError,
    EspHomeSessionClosed,
    EspHomeStateError,
    EspHomeTimeout,
    EspHomeUnexpectedMessage,
    EspHomeVarintOverflow,
)
from .messages import DEFAULT_MESSAGE_TYPES, MessageType, MessageTypes
from .registry import DiscoveryResult, EntityRegistry
from .service import EspHomeDeviceService, EspHomeNode
from .session import DeviceInfo, EspHomeSession, ServerInfo, SessionState
from .sync import SyncOrchestrator, SyncReport
from .transport import Frame, FrameTransport, open_tcp_connection
from .varint import decode_varint, encode_varint

__all__ = [
    "CAPABILITIES",
    "DEFAULT_MESSAGE_TYPES",
    "ClientConfig",
    "ConfigLoadError",
    "DeviceInfo",
    "DiscoveryResult",
    "Entity",
    "EntityCapability",
    "EntityKind",
    "EntityRegistry",
    "EntitySnapshot",
    "EspHomeAuthError",
    "EspHomeBadPreamble",
    "EspHomeClientError",
    "EspHomeCommandError",
    "EspHomeConnectionClosed",
    "EspHomeConnectionError",
    "EspHomeDecodeError",
    "EspHomeDeviceService",
    "EspHomeInvalidCredential",
    "EspHomeNode",
    "EspHomeNothingToSync",
    "EspHomeNotReady",
    "EspHomeProtocolError",
    "EspHomeSession",
    "EspHomeSessionClosed",
    "EspHomeStateError",
    "EspHomeTimeout",
    "EspHomeUnexpectedMessage",
    "EspHomeVarintOverflow",
    "Frame",
    "FrameTransport",
    "MessageType",
    "MessageTypes",
    "NodeConfig",
    "ServerInfo",
    "SessionState",
    "SyncOrchestrator",
    "SyncReport",
    "__version__",
    "build_command",
    "decode_varint",
    "encode_varint",
    "format_state",
    "load_config",
    "open_tcp_connection",
    "parse_config",
]
