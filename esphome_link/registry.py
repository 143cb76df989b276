"""Entity registry and state dispatch for one session.

The registry is append-only while listing entities and mutated in place by
state frames afterwards. Frames are matched to entities by `key` only.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from . import api_proto
from .entities import Entity, EntityKind, EntitySnapshot
from .errors import EspHomeConnectionClosed, EspHomeDecodeError
from .messages import DEFAULT_MESSAGE_TYPES, MessageTypes, describe_message_type
from .protobuf_util import deserialize_message

if TYPE_CHECKING:
    from .session import EspHomeSession

_LOGGER = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """Outcome of one entity listing.

    Attributes:
        entities: Entities discovered, in listing order.
        complete: True only if the list-done frame was observed. False when
            the connection closed mid-listing.
        skipped: Number of listing frames of unsupported entity kinds.
    """

    entities: list[Entity] = field(default_factory=list)
    complete: bool = False
    skipped: int = 0


# -----------------------------------------------------------------------------
# Decoders
# -----------------------------------------------------------------------------


def _decode_switch_info(payload: bytes) -> Entity:
    info = deserialize_message(api_proto.ListEntitiesSwitchResponse, payload)
    return Entity(
        kind=EntityKind.SWITCH,
        key=info.key,
        name=info.name,
        object_id=info.object_id,
        unique_id=info.unique_id,
        device_class=info.device_class,
        icon=info.icon,
    )


def _decode_sensor_info(payload: bytes) -> Entity:
    info = deserialize_message(api_proto.ListEntitiesSensorResponse, payload)
    return Entity(
        kind=EntityKind.SENSOR,
        key=info.key,
        name=info.name,
        object_id=info.object_id,
        unique_id=info.unique_id,
        device_class=info.device_class,
        icon=info.icon,
        unit_of_measurement=info.unit_of_measurement,
        accuracy_decimals=info.accuracy_decimals,
    )


def _decode_binary_sensor_info(payload: bytes) -> Entity:
    info = deserialize_message(api_proto.ListEntitiesBinarySensorResponse, payload)
    return Entity(
        kind=EntityKind.BINARY_SENSOR,
        key=info.key,
        name=info.name,
        object_id=info.object_id,
        unique_id=info.unique_id,
        device_class=info.device_class,
        icon=info.icon,
    )


def _decode_switch_state(payload: bytes) -> tuple[int, bool | None]:
    state = deserialize_message(api_proto.SwitchStateResponse, payload)
    return state.key, state.state


def _decode_sensor_state(payload: bytes) -> tuple[int, float | None]:
    state = deserialize_message(api_proto.SensorStateResponse, payload)
    return state.key, None if state.missing_state else state.state


def _decode_binary_sensor_state(payload: bytes) -> tuple[int, bool | None]:
    state = deserialize_message(api_proto.BinarySensorStateResponse, payload)
    return state.key, None if state.missing_state else state.state


StateDecoder = Callable[[bytes], tuple[int, Any]]


class EntityRegistry:
    """Ordered collection of entities discovered on one session."""

    def __init__(
        self,
        message_types: MessageTypes = DEFAULT_MESSAGE_TYPES,
        *,
        label: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._message_types = message_types
        self._label = label
        self._logger = logger or _LOGGER
        self._entities: list[Entity] = []

        self._info_decoders: dict[int, Callable[[bytes], Entity]] = {
            message_types.list_entities_switch: _decode_switch_info,
            message_types.list_entities_sensor: _decode_sensor_info,
            message_types.list_entities_binary_sensor: _decode_binary_sensor_info,
        }
        self._state_decoders: dict[int, tuple[EntityKind, StateDecoder]] = {
            message_types.switch_state: (EntityKind.SWITCH, _decode_switch_state),
            message_types.sensor_state: (EntityKind.SENSOR, _decode_sensor_state),
            message_types.binary_sensor_state: (
                EntityKind.BINARY_SENSOR,
                _decode_binary_sensor_state,
            ),
        }

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    @property
    def entities(self) -> list[Entity]:
        return list(self._entities)

    def get(self, key: int) -> Entity | None:
        """Find an entity by key."""
        for entity in self._entities:
            if entity.key == key:
                return entity
        return None

    def add(self, entity: Entity) -> None:
        """Append an entity, replacing an earlier one with the same key."""
        for index, existing in enumerate(self._entities):
            if existing.key == entity.key:
                self._logger.warning(
                    "[%s] Duplicate entity key %d ('%s' replaces '%s')",
                    self._label,
                    entity.key,
                    entity.name,
                    existing.name,
                )
                self._entities[index] = entity
                return
        self._entities.append(entity)

    def clear(self) -> None:
        self._entities.clear()

    def snapshots(self) -> list[EntitySnapshot]:
        return [entity.snapshot() for entity in self._entities]

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    async def discover(self, session: EspHomeSession) -> DiscoveryResult:
        """List the node's entities into this registry.

        Sends a list-entities request and consumes frames until the list-done
        frame. Unsupported entity kinds are counted and skipped. If the
        connection closes mid-listing the partial result is returned with
        `complete=False`; the session is closed by then.

        Raises:
            EspHomeNotReady: If the session is not ready.
            EspHomeSessionClosed: If the session is closed.
        """
        session.require_ready()
        self.clear()

        await session.send_message(
            self._message_types.list_entities_request,
            api_proto.ListEntitiesRequest(),
        )
        self._logger.debug("[%s] → ListEntitiesRequest", self._label)

        result = DiscoveryResult()
        while True:
            try:
                frame = await session.receive_frame()
                if await session.handle_control_frame(frame):
                    continue
            except EspHomeConnectionClosed as err:
                self._logger.error(
                    "[%s] Connection closed during entity listing: %s",
                    self._label,
                    err,
                )
                break

            if frame.type == self._message_types.list_entities_done:
                result.complete = True
                self._logger.debug(
                    "[%s] ← ListEntitiesDone (%d entities)",
                    self._label,
                    len(self._entities),
                )
                break

            decoder = self._info_decoders.get(frame.type)
            if decoder is None:
                result.skipped += 1
                self._logger.debug(
                    "[%s] Ignoring entity type %s (%d bytes)",
                    self._label,
                    describe_message_type(frame.type),
                    len(frame.payload),
                )
                continue

            try:
                entity = decoder(frame.payload)
            except EspHomeDecodeError as err:
                result.skipped += 1
                self._logger.error("[%s] %s", self._label, err)
                continue

            self.add(entity)
            self._logger.debug(
                "[%s] ← Found %s: '%s' (key: %d)",
                self._label,
                entity.kind.value,
                entity.name,
                entity.key,
            )

        if not self._entities:
            self._logger.warning("[%s] No entities found", self._label)

        result.entities = self.entities
        return result

    # -------------------------------------------------------------------------
    # State dispatch
    # -------------------------------------------------------------------------

    def is_state_frame(self, msg_type: int) -> bool:
        return msg_type in self._state_decoders

    def apply_state_frame(self, msg_type: int, payload: bytes) -> Entity | None:
        """Apply a state frame to the matching entity.

        Unknown frame types, unknown keys and keys belonging to an entity of
        another kind are ignored.

        Returns:
            The updated entity, or None if nothing matched.
        """
        match = self._state_decoders.get(msg_type)
        if match is None:
            return None
        kind, decoder = match

        try:
            key, value = decoder(payload)
        except EspHomeDecodeError as err:
            self._logger.error("[%s] %s", self._label, err)
            return None

        entity = self.get(key)
        if entity is None or entity.kind is not kind:
            return None

        if value is None:
            entity.clear_value()
        else:
            entity.set_value(value)

        self._logger.debug(
            "[%s] ← %s state: '%s' is %s",
            self._label,
            kind.value,
            entity.name,
            entity.display_value,
        )
        return entity
