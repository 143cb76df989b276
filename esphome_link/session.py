"""Session state machine for one native API connection.

This module drives a single TCP connection through:
- Connecting: open the stream
- Handshaking: hello exchange
- Authenticating: password exchange (the node may stay silent on success)
- Ready: entity operations allowed
- Disconnecting / Closed: orderly teardown

Entity discovery, state sync and commands live in the registry and the
sync orchestrator; they go through this session's send/receive primitives,
which refuse to run before the session is Ready.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from types import TracebackType

from google.protobuf.message import Message

from . import api_proto
from .errors import (
    EspHomeClientError,
    EspHomeConnectionClosed,
    EspHomeConnectionError,
    EspHomeInvalidCredential,
    EspHomeNotReady,
    EspHomeProtocolError,
    EspHomeSessionClosed,
    EspHomeStateError,
    EspHomeTimeout,
    EspHomeUnexpectedMessage,
)
from .messages import DEFAULT_MESSAGE_TYPES, MessageTypes, describe_message_type
from .protobuf_util import (
    build_auth_request,
    build_hello_request,
    deserialize_message,
    serialize_message,
)
from .transport import Frame, FrameTransport, open_tcp_connection

_LOGGER = logging.getLogger(__name__)

DEFAULT_PORT = 6053
DEFAULT_CLIENT_INFO = "esphome-link"


class SessionState(Enum):
    """Connection states, in the order a session walks through them."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    DISCONNECTING = "disconnecting"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class ServerInfo:
    """Identity reported by the node in its hello response."""

    server_info: str
    name: str
    api_version_major: int
    api_version_minor: int


@dataclass(frozen=True, slots=True)
class DeviceInfo:
    """Device details reported by the node."""

    name: str
    friendly_name: str
    mac_address: str
    esphome_version: str
    compilation_time: str
    model: str
    manufacturer: str
    project_name: str
    project_version: str
    uses_password: bool
    has_deep_sleep: bool


class EspHomeSession:
    """State machine for one native API connection.

    Usage:
        session = EspHomeSession("192.168.0.26", password="secret")
        await session.connect()
        registry = EntityRegistry(session.message_types)
        await registry.discover(session)
        await session.close()
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        password: str = "",
        client_info: str = DEFAULT_CLIENT_INFO,
        connect_timeout: float = 10.0,
        handshake_timeout: float = 10.0,
        auth_wait: float = 1.0,
        disconnect_timeout: float = 5.0,
        message_types: MessageTypes = DEFAULT_MESSAGE_TYPES,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize session.

        Args:
            host: Node hostname or IP
            port: Node API port
            password: API password, empty when the node has none
            client_info: Client identity sent in the hello request
            connect_timeout: TCP connect timeout (seconds)
            handshake_timeout: Wait for hello and request/response exchanges (seconds)
            auth_wait: Silence after the auth request that counts as success (seconds)
            disconnect_timeout: Wait for the disconnect response (seconds)
            message_types: Message type id table
            logger: Logger for session events
        """
        self.host = host
        self.port = port

        self._password = password
        self._client_info = client_info
        self._connect_timeout = connect_timeout
        self._handshake_timeout = handshake_timeout
        self._auth_wait = auth_wait
        self._disconnect_timeout = disconnect_timeout
        self._message_types = message_types
        self._logger = logger or _LOGGER

        self._state = SessionState.DISCONNECTED
        self._transport: FrameTransport | None = None
        self._server_info: ServerInfo | None = None
        self._state_callback: Callable[[SessionState], None] | None = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def label(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    @property
    def server_info(self) -> ServerInfo | None:
        """Hello response of the node, once the handshake completed."""
        return self._server_info

    @property
    def message_types(self) -> MessageTypes:
        return self._message_types

    def on_state_changed(self, callback: Callable[[SessionState], None]) -> None:
        """Register callback for connection state changes."""
        self._state_callback = callback

    # -------------------------------------------------------------------------
    # Public API: Connection Management
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection, handshake and authenticate.

        On success the session is Ready. A connect failure leaves the session
        Disconnected; any failure after the stream opened closes it.

        Raises:
            EspHomeTimeout: If the TCP connect or the hello exchange timed out.
            EspHomeConnectionError: If the connection failed or was closed.
            EspHomeProtocolError: If the node broke the handshake sequence.
            EspHomeInvalidCredential: If the node rejected the password.
            EspHomeStateError: If the session is not Disconnected.
        """
        if self._state is SessionState.CLOSED:
            raise EspHomeSessionClosed("Session is closed")
        if self._state is not SessionState.DISCONNECTED:
            raise EspHomeStateError(f"Cannot connect while {self._state.value}")

        self._set_state(SessionState.CONNECTING)
        self._logger.info("[%s] Connecting", self.label)

        try:
            reader, writer = await open_tcp_connection(
                self.host, self.port, timeout=self._connect_timeout
            )
        except EspHomeConnectionError as err:
            self._logger.warning("[%s] Connection failed: %s", self.label, err)
            self._set_state(SessionState.DISCONNECTED)
            raise

        self._transport = FrameTransport(
            reader, writer, label=self.label, logger=self._logger
        )

        try:
            await self._handshake()
            await self._authenticate()
        except EspHomeClientError as err:
            await self._fail(err)
            raise

        self._set_state(SessionState.READY)

    async def close(self) -> None:
        """Tear the session down.

        From Ready, a disconnect request is sent and the disconnect response
        awaited up to the disconnect timeout; a timeout or error there is
        logged and teardown continues. The stream is always closed. Calling
        close() on a closed session does nothing.
        """
        if self._state is SessionState.CLOSED:
            return

        if self._state is SessionState.READY:
            self._set_state(SessionState.DISCONNECTING)
            try:
                await self._send(
                    self._message_types.disconnect_request,
                    api_proto.DisconnectRequest(),
                )
                self._logger.debug("[%s] → DisconnectRequest", self.label)
                await asyncio.wait_for(
                    self._await_disconnect_response(),
                    timeout=self._disconnect_timeout,
                )
                self._logger.debug("[%s] ← DisconnectResponse", self.label)
            except TimeoutError:
                self._logger.warning("[%s] Disconnect timeout", self.label)
            except EspHomeClientError as err:
                self._logger.warning("[%s] Disconnect error: %s", self.label, err)

        await self._shutdown()
        self._logger.info("[%s] Connection closed", self.label)

    async def __aenter__(self) -> EspHomeSession:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Public API: Frame primitives (Ready only)
    # -------------------------------------------------------------------------

    def require_ready(self) -> None:
        """Raise unless entity operations are allowed.

        Raises:
            EspHomeSessionClosed: If the session is closed.
            EspHomeNotReady: If the session has not reached Ready.
        """
        if self._state is SessionState.CLOSED:
            raise EspHomeSessionClosed("Session is closed")
        if self._state is not SessionState.READY:
            raise EspHomeNotReady(f"Session is {self._state.value}, not ready")

    async def send_message(self, msg_type: int, message: Message) -> None:
        """Serialize and send one message. Fatal errors close the session."""
        self.require_ready()
        try:
            await self._send(msg_type, message)
        except (EspHomeConnectionError, EspHomeProtocolError) as err:
            await self._fail(err)
            raise

    async def receive_frame(self) -> Frame:
        """Receive the next frame. Fatal errors close the session."""
        self.require_ready()
        try:
            return await self._require_transport().receive_frame()
        except (EspHomeConnectionError, EspHomeProtocolError) as err:
            await self._fail(err)
            raise

    async def wait_readable(self, timeout: float) -> bool:
        """Wait up to timeout for incoming data; see FrameTransport.wait_readable."""
        self.require_ready()
        try:
            return await self._require_transport().wait_readable(timeout)
        except EspHomeConnectionError as err:
            await self._fail(err)
            raise

    async def handle_control_frame(self, frame: Frame) -> bool:
        """Answer keepalive and peer-disconnect frames.

        Returns:
            True if the frame was a control frame and has been handled.

        Raises:
            EspHomeConnectionClosed: If the node asked to disconnect; the
                session is closed by then.
        """
        types = self._message_types

        if frame.type == types.ping_request:
            self._logger.debug("[%s] ← PingRequest", self.label)
            await self.send_message(types.ping_response, api_proto.PingResponse())
            return True

        if frame.type == types.disconnect_request:
            self._logger.info("[%s] Node requested disconnect", self.label)
            try:
                await self._send(
                    types.disconnect_response, api_proto.DisconnectResponse()
                )
            except EspHomeConnectionError as err:
                self._logger.debug(
                    "[%s] Could not answer disconnect: %s", self.label, err
                )
            await self._shutdown()
            raise EspHomeConnectionClosed("Node requested disconnect")

        return False

    async def device_info(self) -> DeviceInfo:
        """Request the node's device information.

        Frames of other types that arrive before the response are kept, in
        order, for the next receive.

        Raises:
            EspHomeTimeout: If no response arrived within the handshake
                timeout; the session is closed by then.
        """
        self.require_ready()
        await self.send_message(
            self._message_types.device_info_request, api_proto.DeviceInfoRequest()
        )

        deferred: list[Frame] = []
        try:
            frame = await asyncio.wait_for(
                self._await_frame(self._message_types.device_info_response, deferred),
                timeout=self._handshake_timeout,
            )
        except TimeoutError as err:
            timeout = EspHomeTimeout("Timed out waiting for device info")
            await self._fail(timeout)
            raise timeout from err
        finally:
            transport = self._transport
            if transport is not None:
                for pending in deferred:
                    transport.push_back(pending)

        info = deserialize_message(api_proto.DeviceInfoResponse, frame.payload)
        return DeviceInfo(
            name=info.name,
            friendly_name=info.friendly_name,
            mac_address=info.mac_address,
            esphome_version=info.esphome_version,
            compilation_time=info.compilation_time,
            model=info.model,
            manufacturer=info.manufacturer,
            project_name=info.project_name,
            project_version=info.project_version,
            uses_password=info.uses_password,
            has_deep_sleep=info.has_deep_sleep,
        )

    # -------------------------------------------------------------------------
    # Internal: Connection State Machine
    # -------------------------------------------------------------------------

    def _set_state(self, state: SessionState) -> None:
        """Update connection state and notify callback."""
        if self._state is not state:
            self._logger.debug(
                "[%s] State: %s → %s", self.label, self._state.value, state.value
            )
            self._state = state
            if self._state_callback:
                self._state_callback(state)

    def _require_transport(self) -> FrameTransport:
        if self._transport is None:
            raise EspHomeNotReady("Session has no open stream")
        return self._transport

    async def _send(self, msg_type: int, message: Message) -> None:
        await self._require_transport().send_frame(
            msg_type, serialize_message(message)
        )

    async def _handshake(self) -> None:
        """Send hello and require a hello response as the next frame."""
        self._set_state(SessionState.HANDSHAKING)
        types = self._message_types

        await self._send(types.hello_request, build_hello_request(self._client_info))
        self._logger.debug("[%s] → HelloRequest", self.label)

        try:
            frame = await asyncio.wait_for(
                self._require_transport().receive_frame(),
                timeout=self._handshake_timeout,
            )
        except TimeoutError as err:
            raise EspHomeTimeout("Timed out waiting for hello response") from err

        if frame.type != types.hello_response:
            raise EspHomeUnexpectedMessage(types.hello_response, frame.type)

        hello = deserialize_message(api_proto.HelloResponse, frame.payload)
        self._server_info = ServerInfo(
            server_info=hello.server_info,
            name=hello.name,
            api_version_major=hello.api_version_major,
            api_version_minor=hello.api_version_minor,
        )
        self._logger.debug(
            "[%s] ← HelloResponse (server: %s, API %d.%d, name: %s)",
            self.label,
            hello.server_info,
            hello.api_version_major,
            hello.api_version_minor,
            hello.name,
        )

    async def _authenticate(self) -> None:
        """Send the auth request and accept a success response or silence."""
        self._set_state(SessionState.AUTHENTICATING)
        types = self._message_types
        transport = self._require_transport()

        await self._send(
            types.authentication_request, build_auth_request(self._password)
        )
        self._logger.debug("[%s] → AuthenticationRequest", self.label)

        if not await transport.wait_readable(self._auth_wait):
            self._logger.info(
                "[%s] Authenticated (no response within %.1fs)",
                self.label,
                self._auth_wait,
            )
            return

        try:
            frame = await asyncio.wait_for(
                transport.receive_frame(), timeout=self._handshake_timeout
            )
        except TimeoutError as err:
            raise EspHomeTimeout(
                "Timed out waiting for authentication response"
            ) from err

        if frame.type == types.authentication_response:
            response = deserialize_message(
                api_proto.AuthenticationResponse, frame.payload
            )
            if response.invalid_password:
                raise EspHomeInvalidCredential(
                    "Authentication failed: invalid password"
                )
            self._logger.info("[%s] Authenticated", self.label)
            return

        self._logger.warning(
            "[%s] Expected AuthenticationResponse (%d) but got %s; treating as success",
            self.label,
            types.authentication_response,
            describe_message_type(frame.type),
        )
        transport.push_back(frame)

    async def _await_frame(self, msg_type: int, deferred: list[Frame]) -> Frame:
        """Read until a frame of msg_type arrives, collecting the others."""
        while True:
            frame = await self.receive_frame()
            if frame.type == msg_type:
                return frame
            if not await self.handle_control_frame(frame):
                deferred.append(frame)

    async def _await_disconnect_response(self) -> None:
        transport = self._require_transport()
        while True:
            frame = await transport.receive_frame()
            if frame.type == self._message_types.disconnect_response:
                return
            self._logger.debug(
                "[%s] Ignoring %s while disconnecting",
                self.label,
                describe_message_type(frame.type),
            )

    async def _fail(self, err: BaseException) -> None:
        """Close the stream after a fatal error."""
        self._logger.error("[%s] Session failed: %s", self.label, err)
        await self._shutdown()

    async def _shutdown(self) -> None:
        if self._transport is not None:
            await self._transport.close()
        self._set_state(SessionState.CLOSED)

    def __repr__(self) -> str:
        return f"EspHomeSession({self.label}, state={self._state.value})"
