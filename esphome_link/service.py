"""Multi-node service: one session per configured node, refreshed on demand.

Each node owns its own session, registry and orchestrator, so nodes run
concurrently with no shared mutable state. A failed node is retried with
exponential backoff on later refreshes.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from .config import ClientConfig, NodeConfig
from .entities import EntitySnapshot
from .errors import EspHomeClientError, EspHomeCommandError, EspHomeNotReady
from .registry import DiscoveryResult, EntityRegistry
from .session import EspHomeSession
from .sync import SyncOrchestrator

_LOGGER = logging.getLogger(__name__)


class EspHomeNode:
    """Keeps one node connected, discovered and in sync."""

    def __init__(
        self,
        config: NodeConfig,
        *,
        retry_base_delay: float = 5.0,
        retry_max_delay: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize node.

        Args:
            config: Node connection settings
            retry_base_delay: Base reconnect delay (seconds)
            retry_max_delay: Maximum reconnect delay (seconds)
            clock: Monotonic time source for the backoff window
            logger: Logger for node events
        """
        self.config = config
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        self._clock = clock
        self._logger = logger or _LOGGER

        self._registry = EntityRegistry(
            config.message_types, label=config.name, logger=self._logger
        )
        self._session: EspHomeSession | None = None
        self._orchestrator: SyncOrchestrator | None = None
        self._discovery: DiscoveryResult | None = None

        self._retry_attempts = 0
        self._next_attempt_at = 0.0

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def connected(self) -> bool:
        return self._session is not None and self._session.is_ready

    @property
    def registry(self) -> EntityRegistry:
        return self._registry

    @property
    def discovery(self) -> DiscoveryResult | None:
        """Result of the last entity listing."""
        return self._discovery

    @property
    def retry_attempts(self) -> int:
        return self._retry_attempts

    def snapshots(self) -> list[EntitySnapshot]:
        return self._registry.snapshots()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def start(self) -> bool:
        """Connect, list entities and run the first sync.

        Returns:
            True if the node is connected and synced, False if the attempt
            failed or the backoff window is still open.
        """
        if self._clock() < self._next_attempt_at:
            self._logger.debug("[%s] Reconnect deferred (backoff)", self.name)
            return False

        if self._session is not None:
            await self._session.close()

        self._registry.clear()
        session = self._create_session()
        self._session = session
        self._orchestrator = SyncOrchestrator(
            session,
            self._registry,
            drain_timeout=self.config.drain_timeout,
            logger=self._logger,
        )

        try:
            await session.connect()
            self._discovery = await self._orchestrator.discover()
            if len(self._registry):
                await self._orchestrator.sync(self.config.sync_timeout)
        except EspHomeClientError as err:
            await self._handle_failure(err)
            return False

        self._retry_attempts = 0
        self._logger.info(
            "[%s] Connected with %d entities", self.name, len(self._registry)
        )
        return True

    async def refresh(self) -> bool:
        """Sync entity states, reconnecting first if the session was lost."""
        if not self.connected or self._orchestrator is None:
            return await self.start()

        if not len(self._registry):
            return True

        try:
            await self._orchestrator.sync(self.config.sync_timeout)
        except EspHomeClientError as err:
            await self._handle_failure(err)
            return False
        return True

    async def set_entity_state(self, key: int, value: Any) -> None:
        """Command the entity with the given key.

        Raises:
            EspHomeNotReady: If the node is not connected.
            EspHomeCommandError: If no entity has that key, or it is read-only.
        """
        if not self.connected or self._orchestrator is None:
            raise EspHomeNotReady(f"Node {self.name} is not connected")

        entity = self._registry.get(key)
        if entity is None:
            raise EspHomeCommandError(f"Node {self.name} has no entity with key {key}")
        await self._orchestrator.set_entity_state(entity, value)

    async def stop(self) -> None:
        """Close the session."""
        if self._session is not None:
            await self._session.close()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _create_session(self) -> EspHomeSession:
        return EspHomeSession(
            self.config.host,
            self.config.port,
            password=self.config.password,
            client_info=self.config.client_info,
            connect_timeout=self.config.connect_timeout,
            message_types=self.config.message_types,
            logger=self._logger,
        )

    async def _handle_failure(self, err: EspHomeClientError) -> None:
        """Close the session and open the backoff window."""
        if self._session is not None:
            await self._session.close()

        delay = min(
            self._retry_base_delay * (2**self._retry_attempts),
            self._retry_max_delay,
        )
        self._retry_attempts += 1
        self._next_attempt_at = self._clock() + delay

        self._logger.warning(
            "[%s] %s; retry in %.0fs (attempt %d)",
            self.name,
            err,
            delay,
            self._retry_attempts,
        )


class EspHomeDeviceService:
    """Runs every configured node concurrently.

    Usage:
        service = EspHomeDeviceService(load_config("nodes.yaml"))
        service.on_devices_updated(my_handler)
        await service.start_all()
        await service.refresh_all()
        await service.stop_all()
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or _LOGGER
        self._nodes = [EspHomeNode(node, logger=self._logger) for node in config.nodes]
        self._updated_callback: Callable[[], None] | None = None

    @property
    def nodes(self) -> list[EspHomeNode]:
        return list(self._nodes)

    def on_devices_updated(self, callback: Callable[[], None]) -> None:
        """Register callback fired after each start or refresh pass."""
        self._updated_callback = callback

    async def start_all(self) -> list[bool]:
        """Connect all nodes concurrently."""
        self._logger.info("Starting %d node(s)", len(self._nodes))
        results = await asyncio.gather(
            *(node.start() for node in self._nodes), return_exceptions=True
        )
        self._notify()
        return self._collect("starting", results)

    async def refresh_all(self) -> list[bool]:
        """Refresh all nodes concurrently."""
        results = await asyncio.gather(
            *(node.refresh() for node in self._nodes), return_exceptions=True
        )
        self._notify()
        return self._collect("refreshing", results)

    async def stop_all(self) -> None:
        """Close all sessions."""
        self._logger.info("Stopping %d node(s)", len(self._nodes))
        results = await asyncio.gather(
            *(node.stop() for node in self._nodes), return_exceptions=True
        )
        for node, result in zip(self._nodes, results, strict=True):
            if isinstance(result, Exception):
                self._logger.error("[%s] Error stopping node: %s", node.name, result)

    def _collect(self, action: str, results: list[Any]) -> list[bool]:
        """Turn gather results into per-node success flags, logging errors."""
        flags = []
        for node, result in zip(self._nodes, results, strict=True):
            if isinstance(result, Exception):
                self._logger.error("[%s] Error %s node: %s", node.name, action, result)
                flags.append(False)
            else:
                flags.append(bool(result))
        return flags

    def _notify(self) -> None:
        if self._updated_callback:
            try:
                self._updated_callback()
            except Exception as err:
                self._logger.exception("Devices updated callback error: %s", err)
