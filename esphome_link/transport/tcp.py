"""TCP helpers for ESPHome native API transport."""

from __future__ import annotations

import asyncio

from ..errors import EspHomeConnectionError, EspHomeTimeout


async def open_tcp_connection(
    host: str,
    port: int,
    *,
    timeout: float = 10.0,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a TCP connection to a node.

    Args:
        host: Target host
        port: Target port (the native API listens on 6053 by default)
        timeout: Connection timeout in seconds
    """
    try:
        return await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise EspHomeTimeout(f"Connection to {host}:{port} timed out") from err
    except OSError as err:
        raise EspHomeConnectionError(
            f"Connection to {host}:{port} failed: {err}"
        ) from err
