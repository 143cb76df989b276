"""Entity model for nodes discovered over the native API.

Entities are a tagged union: one `Entity` record whose `kind` selects the
value type and the fixed capability set. New variants are added as a new
`EntityKind` plus decoders in the registry, not as subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .display import format_state
from .errors import EspHomeCommandError
from .messages import MessageTypes
from .protobuf_util import build_switch_command


class EntityKind(Enum):
    """Supported entity variants."""

    SWITCH = "switch"
    SENSOR = "sensor"
    BINARY_SENSOR = "binary_sensor"


class EntityCapability(Enum):
    """Operations an entity variant supports."""

    READ = "read"
    WRITE = "write"
    SUBSCRIBE = "subscribe"


CAPABILITIES: dict[EntityKind, frozenset[EntityCapability]] = {
    EntityKind.SWITCH: frozenset(
        {EntityCapability.READ, EntityCapability.WRITE, EntityCapability.SUBSCRIBE}
    ),
    EntityKind.SENSOR: frozenset({EntityCapability.READ, EntityCapability.SUBSCRIBE}),
    EntityKind.BINARY_SENSOR: frozenset(
        {EntityCapability.READ, EntityCapability.SUBSCRIBE}
    ),
}


@dataclass(frozen=True, slots=True)
class EntitySnapshot:
    """Immutable view of an entity handed to consumers."""

    kind: EntityKind
    key: int
    name: str
    object_id: str
    value: bool | float | None
    has_value: bool
    display_value: str


@dataclass(slots=True)
class Entity:
    """A switch, sensor or binary sensor exposed by a node.

    Attributes:
        kind: Variant tag.
        key: Unique 32-bit identifier, stable for the session.
        name: Display name.
        object_id: Node-side object id.
        value: Current value (bool for switches and binary sensors, float
            for sensors). None until observed.
        has_value: True once a state frame set the value; distinguishes
            "never observed" from "observed false/zero".
    """

    kind: EntityKind
    key: int
    name: str
    object_id: str
    unique_id: str = ""
    device_class: str = ""
    icon: str = ""
    unit_of_measurement: str = ""
    accuracy_decimals: int = 1
    value: bool | float | None = None
    has_value: bool = False

    @property
    def capabilities(self) -> frozenset[EntityCapability]:
        return CAPABILITIES[self.kind]

    def supports(self, capability: EntityCapability) -> bool:
        """Check whether this entity's variant supports an operation."""
        return capability in CAPABILITIES[self.kind]

    @property
    def display_value(self) -> str:
        return format_state(
            self.kind.value,
            self.value,
            self.has_value,
            device_class=self.device_class,
            unit_of_measurement=self.unit_of_measurement,
            accuracy_decimals=self.accuracy_decimals,
        )

    def set_value(self, value: bool | float) -> None:
        self.value = value
        self.has_value = True

    def clear_value(self) -> None:
        self.value = None
        self.has_value = False

    def snapshot(self) -> EntitySnapshot:
        return EntitySnapshot(
            kind=self.kind,
            key=self.key,
            name=self.name,
            object_id=self.object_id,
            value=self.value,
            has_value=self.has_value,
            display_value=self.display_value,
        )


def build_command(
    entity: Entity, value: Any, message_types: MessageTypes
) -> tuple[int, Any]:
    """Build the command frame content that sets an entity to a value.

    Returns:
        Tuple of (message type id, protobuf message).

    Raises:
        EspHomeCommandError: If the entity is read-only or the value has the
            wrong type for its variant.
    """
    if not entity.supports(EntityCapability.WRITE):
        raise EspHomeCommandError(
            f"Entity '{entity.name}' ({entity.kind.value}) is read-only"
        )

    if entity.kind is EntityKind.SWITCH:
        if not isinstance(value, bool):
            raise EspHomeCommandError(
                f"Switch '{entity.name}' needs a bool, got {type(value).__name__}"
            )
        return message_types.switch_command, build_switch_command(entity.key, value)

    raise EspHomeCommandError(f"No command defined for {entity.kind.value}")
