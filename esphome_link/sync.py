"""Discovery, state synchronization and commands over a ready session.

Sync is polling based: the orchestrator waits for readability in short
slices until a deadline, applying every state frame it reads. Expiry of the
deadline is the normal end of a sync, not an error.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from . import api_proto
from .entities import Entity, build_command
from .errors import EspHomeNothingToSync
from .registry import DiscoveryResult, EntityRegistry
from .session import EspHomeSession
from .transport import Frame

_LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.05
DEFAULT_DRAIN_TIMEOUT = 0.5


@dataclass
class SyncReport:
    """Counters for one sync or drain pass.

    Attributes:
        frames: Frames read from the node.
        applied: State frames that updated an entity.
        ignored: Frames that matched no entity (unknown key or type).
    """

    frames: int = 0
    applied: int = 0
    ignored: int = 0

    def __add__(self, other: SyncReport) -> SyncReport:
        return SyncReport(
            frames=self.frames + other.frames,
            applied=self.applied + other.applied,
            ignored=self.ignored + other.ignored,
        )


class SyncOrchestrator:
    """Drives discovery, state refresh and commands for one session.

    Usage:
        orchestrator = SyncOrchestrator(session)
        await orchestrator.discover()
        await orchestrator.sync(timeout=1.0)
        await orchestrator.set_entity_state(entity, True)
    """

    def __init__(
        self,
        session: EspHomeSession,
        registry: EntityRegistry | None = None,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            session: Session the orchestrator works on
            registry: Registry to fill; a new one is created when omitted
            poll_interval: Readability poll slice (seconds)
            drain_timeout: Length of the drain pass after a sync (seconds)
            logger: Logger for sync events
        """
        self._session = session
        self._logger = logger or _LOGGER
        self._registry = (
            registry
            if registry is not None
            else EntityRegistry(
                session.message_types, label=session.label, logger=self._logger
            )
        )
        self._poll_interval = poll_interval
        self._drain_timeout = drain_timeout

    @property
    def session(self) -> EspHomeSession:
        return self._session

    @property
    def registry(self) -> EntityRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def discover(self) -> DiscoveryResult:
        """List the node's entities into the registry."""
        return await self._registry.discover(self._session)

    async def sync(self, timeout: float) -> SyncReport:
        """Subscribe to states and apply state frames for up to timeout seconds.

        A drain pass of the configured drain timeout follows, so trailing
        frames are absorbed before the caller moves on.

        Raises:
            EspHomeNotReady: If the session is not ready.
            EspHomeNothingToSync: If no entity has been discovered.
            EspHomeConnectionError: If the connection failed; the session is
                closed by then.
        """
        self._session.require_ready()
        if not len(self._registry):
            raise EspHomeNothingToSync("No entities discovered")

        await self._session.send_message(
            self._session.message_types.subscribe_states_request,
            api_proto.SubscribeStatesRequest(),
        )
        self._logger.debug("[%s] → SubscribeStatesRequest", self._session.label)

        report = await self._dispatch_until(timeout)
        report += await self.drain(self._drain_timeout)
        self._logger.debug(
            "[%s] Sync done: %d frames, %d applied, %d ignored",
            self._session.label,
            report.frames,
            report.applied,
            report.ignored,
        )
        return report

    async def drain(self, timeout: float) -> SyncReport:
        """Consume pending frames for up to timeout seconds, applying states."""
        self._session.require_ready()
        return await self._dispatch_until(timeout)

    async def set_entity_state(self, entity: Entity, value: Any) -> None:
        """Send a command setting a writable entity to value.

        Raises:
            EspHomeCommandError: If the entity is read-only or the value has
                the wrong type. Nothing is sent.
            EspHomeNotReady: If the session is not ready.
        """
        msg_type, command = build_command(entity, value, self._session.message_types)
        self._session.require_ready()

        await self._session.send_message(msg_type, command)
        self._logger.debug(
            "[%s] → %s command: '%s' → %s",
            self._session.label,
            entity.kind.value,
            entity.name,
            value,
        )

    # -------------------------------------------------------------------------
    # Internal: Dispatch loop
    # -------------------------------------------------------------------------

    async def _dispatch_until(self, timeout: float) -> SyncReport:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        report = SyncReport()

        while (remaining := deadline - loop.time()) > 0:
            wait = min(self._poll_interval, remaining)
            if not await self._session.wait_readable(wait):
                continue
            frame = await self._session.receive_frame()
            report.frames += 1
            await self._dispatch(frame, report)

        return report

    async def _dispatch(self, frame: Frame, report: SyncReport) -> None:
        if await self._session.handle_control_frame(frame):
            return

        if self._registry.apply_state_frame(frame.type, frame.payload) is None:
            report.ignored += 1
        else:
            report.applied += 1
