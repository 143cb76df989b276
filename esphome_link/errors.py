"""Client error types for ESPHome native API sessions."""

from __future__ import annotations


class EspHomeClientError(Exception):
    """Base error for ESPHome client failures."""


# -----------------------------------------------------------------------------
# Connection errors: always fatal to the session
# -----------------------------------------------------------------------------


class EspHomeConnectionError(EspHomeClientError):
    """Network connection to the node failed."""


class EspHomeTimeout(EspHomeConnectionError):
    """Timeout while connecting to or waiting on the node."""


class EspHomeConnectionClosed(EspHomeConnectionError):
    """The node closed the connection (stream yielded no bytes)."""


# -----------------------------------------------------------------------------
# Protocol errors: fatal, no resynchronization
# -----------------------------------------------------------------------------


class EspHomeProtocolError(EspHomeClientError):
    """The byte stream violated the framing or sequencing rules."""


class EspHomeBadPreamble(EspHomeProtocolError):
    """A frame did not start with the zero preamble byte."""

    def __init__(self, preamble: int, context: bytes) -> None:
        self.preamble = preamble
        self.context = context
        super().__init__(
            f"Invalid preamble: expected 0x00, got 0x{preamble:02X}. "
            f"Next {len(context)} bytes: {context.hex(' ') if context else 'none'}"
        )


class EspHomeUnexpectedMessage(EspHomeProtocolError):
    """A frame of the wrong type arrived during a fixed exchange."""

    def __init__(self, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(f"Expected message type {expected}, got {received}")


class EspHomeVarintOverflow(EspHomeProtocolError):
    """A varint did not terminate within 5 bytes or exceeds 32 bits."""


class EspHomeDecodeError(EspHomeProtocolError):
    """A frame payload could not be parsed by its message schema."""


# -----------------------------------------------------------------------------
# Authentication errors
# -----------------------------------------------------------------------------


class EspHomeAuthError(EspHomeClientError):
    """Authentication with the node failed."""


class EspHomeInvalidCredential(EspHomeAuthError):
    """The node rejected the configured password."""


# -----------------------------------------------------------------------------
# State errors: caller programming errors, session stays usable
# -----------------------------------------------------------------------------


class EspHomeStateError(EspHomeClientError):
    """Operation not valid in the current session state."""


class EspHomeNotReady(EspHomeStateError):
    """Entity operation attempted before the session reached Ready."""


class EspHomeSessionClosed(EspHomeStateError):
    """Operation attempted on a closed session."""


class EspHomeNothingToSync(EspHomeStateError):
    """Sync requested while no entity has been discovered."""


class EspHomeCommandError(EspHomeClientError):
    """Command rejected before sending: entity is read-only or value invalid."""
