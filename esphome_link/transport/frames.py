"""Frame transport for the ESPHome native API plaintext protocol.

Frame layout::

    +----------+----------------+--------------+------------------+
    | Preamble | Length         | Type         | Payload          |
    | 0x00     | varint         | varint       | Length bytes     |
    +----------+----------------+--------------+------------------+

- Length counts only the payload bytes, not the type varint.
- Any framing corruption is fatal to the session; there is no resync.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass

from ..errors import EspHomeBadPreamble, EspHomeConnectionClosed
from ..varint import encode_varint, read_varint

_LOGGER = logging.getLogger(__name__)

PREAMBLE = 0x00
READ_CHUNK_SIZE = 4096
PREAMBLE_CONTEXT_BYTES = 16
PREAMBLE_CONTEXT_WAIT = 0.05
CLOSE_TIMEOUT = 2.0


@dataclass(frozen=True, slots=True)
class Frame:
    """One complete protocol message: type id plus raw payload."""

    type: int
    payload: bytes

    def __repr__(self) -> str:
        return (
            f"Frame(type={self.type}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def build_frame(msg_type: int, payload: bytes = b"") -> bytes:
    """Encode a frame into its wire representation."""
    header = bytes([PREAMBLE]) + encode_varint(len(payload)) + encode_varint(msg_type)
    return header + payload


class FrameTransport:
    """Reads and writes complete frames over an asyncio stream pair.

    The transport owns the stream exclusively. Reads and writes are each
    serialized by a lock, so at most one read and one write are in flight.
    Bytes pulled off the stream while probing for readability are kept in
    an internal buffer and consumed by the next frame read.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        label: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._label = label
        self._logger = logger or _LOGGER

        self._buffer = bytearray()
        self._pending: deque[Frame] = deque()
        self._eof = False
        self._closed = False

        self._read_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def is_closed(self) -> bool:
        """True once close() has been called."""
        return self._closed

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def send_frame(self, msg_type: int, payload: bytes = b"") -> None:
        """Write one frame and flush it.

        Raises:
            EspHomeConnectionClosed: If the stream is closed or broken.
        """
        if self._closed:
            raise EspHomeConnectionClosed("Transport is closed")

        data = build_frame(msg_type, payload)
        async with self._write_lock:
            try:
                self._writer.write(data)
                await self._writer.drain()
            except OSError as err:
                raise EspHomeConnectionClosed(f"Write failed: {err}") from err

        self._logger.debug(
            "[%s] → frame type=%d (%d bytes)", self._label, msg_type, len(payload)
        )

    async def receive_frame(self) -> Frame:
        """Block until one full frame is available and return it.

        Raises:
            EspHomeConnectionClosed: If the peer closed the stream.
            EspHomeBadPreamble: If the first byte is not 0x00.
            EspHomeVarintOverflow: If a length or type varint is malformed.
        """
        if self._pending:
            return self._pending.popleft()

        async with self._read_lock:
            preamble = await self._read_byte()
            if preamble != PREAMBLE:
                raise EspHomeBadPreamble(preamble, await self._read_context())

            length = await read_varint(self._read_byte)
            msg_type = await read_varint(self._read_byte)
            payload = await self._read_exactly(length)

        self._logger.debug(
            "[%s] ← frame type=%d (%d bytes)", self._label, msg_type, length
        )
        return Frame(msg_type, payload)

    def push_back(self, frame: Frame) -> None:
        """Queue an already received frame to be returned by the next read.

        Frames pushed back are returned in the order they were pushed, ahead
        of anything still on the stream.
        """
        self._pending.append(frame)

    async def wait_readable(self, timeout: float) -> bool:
        """Wait until data (or end of stream) is available, up to timeout.

        Returns:
            True if a subsequent receive_frame() will not wait for the first
            byte, False if the timeout expired with nothing to read.
        """
        if self._pending or self._buffer or self._eof:
            return True

        async with self._read_lock:
            try:
                chunk = await asyncio.wait_for(
                    self._reader.read(READ_CHUNK_SIZE), timeout=timeout
                )
            except TimeoutError:
                return False
            except OSError as err:
                raise EspHomeConnectionClosed(f"Read failed: {err}") from err

        if chunk:
            self._buffer.extend(chunk)
        else:
            self._eof = True
        return True

    async def close(self) -> None:
        """Close the underlying stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        self._writer.close()
        try:
            await asyncio.wait_for(self._writer.wait_closed(), timeout=CLOSE_TIMEOUT)
        except TimeoutError:
            self._logger.warning("[%s] Stream close timed out", self._label)
        except OSError as err:
            self._logger.debug("[%s] Stream close error: %s", self._label, err)

    # -------------------------------------------------------------------------
    # Internal: byte reads
    # -------------------------------------------------------------------------

    async def _read_exactly(self, count: int) -> bytes:
        if count == 0:
            return b""

        taken = bytes(self._buffer[:count])
        del self._buffer[:count]
        if len(taken) == count:
            return taken

        if self._eof:
            raise EspHomeConnectionClosed("Connection closed by remote host")

        try:
            rest = await self._reader.readexactly(count - len(taken))
        except asyncio.IncompleteReadError as err:
            self._eof = True
            raise EspHomeConnectionClosed("Connection closed by remote host") from err
        except OSError as err:
            raise EspHomeConnectionClosed(f"Read failed: {err}") from err
        return taken + rest

    async def _read_byte(self) -> int:
        return (await self._read_exactly(1))[0]

    async def _read_context(self) -> bytes:
        """Grab the next few bytes after a bad preamble for diagnostics."""
        context = bytes(self._buffer[:PREAMBLE_CONTEXT_BYTES])
        del self._buffer[:PREAMBLE_CONTEXT_BYTES]
        if context or self._eof:
            return context

        try:
            return await asyncio.wait_for(
                self._reader.read(PREAMBLE_CONTEXT_BYTES),
                timeout=PREAMBLE_CONTEXT_WAIT,
            )
        except (TimeoutError, OSError):
            return b""
