"""Tests for the entity model, capabilities and display text."""

import pytest

from esphome_link import api_proto
from esphome_link.display import UNKNOWN, format_state
from esphome_link.entities import (
    CAPABILITIES,
    Entity,
    EntityCapability,
    EntityKind,
    build_command,
)
from esphome_link.errors import EspHomeCommandError
from esphome_link.messages import DEFAULT_MESSAGE_TYPES, MessageType


class TestCapabilities:
    """Tests for the capability table."""

    def test_switch_is_writable(self):
        entity = Entity(EntityKind.SWITCH, 3, "Lamp", "lamp")
        assert entity.supports(EntityCapability.WRITE)
        assert entity.capabilities == CAPABILITIES[EntityKind.SWITCH]

    @pytest.mark.parametrize("kind", [EntityKind.SENSOR, EntityKind.BINARY_SENSOR])
    def test_sensors_are_read_only(self, kind):
        entity = Entity(kind, 7, "Probe", "probe")
        assert entity.supports(EntityCapability.READ)
        assert entity.supports(EntityCapability.SUBSCRIBE)
        assert not entity.supports(EntityCapability.WRITE)

    def test_every_kind_has_capabilities(self):
        assert set(CAPABILITIES) == set(EntityKind)


class TestEntityValue:
    """Tests for value tracking."""

    def test_new_entity_has_no_value(self):
        entity = Entity(EntityKind.SWITCH, 3, "Lamp", "lamp")
        assert entity.value is None
        assert not entity.has_value
        assert entity.display_value == UNKNOWN

    def test_set_and_clear(self):
        entity = Entity(EntityKind.SWITCH, 3, "Lamp", "lamp")
        entity.set_value(False)
        assert entity.has_value
        entity.clear_value()
        assert not entity.has_value
        assert entity.value is None

    def test_snapshot_is_detached(self):
        """Test later updates do not change an earlier snapshot."""
        entity = Entity(EntityKind.SWITCH, 3, "Lamp", "lamp")
        entity.set_value(True)
        snapshot = entity.snapshot()
        entity.set_value(False)

        assert snapshot.value is True
        assert snapshot.display_value == "ON"


class TestBuildCommand:
    """Tests for build_command()."""

    def test_switch_command(self):
        entity = Entity(EntityKind.SWITCH, 3, "Lamp", "lamp")

        msg_type, message = build_command(entity, True, DEFAULT_MESSAGE_TYPES)

        assert msg_type == MessageType.SWITCH_COMMAND_REQUEST
        assert isinstance(message, api_proto.SwitchCommandRequest)
        assert message.key == 3
        assert message.state is True

    def test_switch_command_uses_configured_type(self):
        types = DEFAULT_MESSAGE_TYPES.with_overrides({"switch_command": 99})
        msg_type, _ = build_command(
            Entity(EntityKind.SWITCH, 3, "Lamp", "lamp"), False, types
        )
        assert msg_type == 99

    @pytest.mark.parametrize("kind", [EntityKind.SENSOR, EntityKind.BINARY_SENSOR])
    def test_read_only_rejected(self, kind):
        entity = Entity(kind, 7, "Probe", "probe")
        with pytest.raises(EspHomeCommandError, match="read-only"):
            build_command(entity, True, DEFAULT_MESSAGE_TYPES)

    @pytest.mark.parametrize("value", [1, "on", None, 0.0])
    def test_switch_needs_bool(self, value):
        entity = Entity(EntityKind.SWITCH, 3, "Lamp", "lamp")
        with pytest.raises(EspHomeCommandError, match="needs a bool"):
            build_command(entity, value, DEFAULT_MESSAGE_TYPES)


class TestFormatState:
    """Tests for format_state()."""

    def test_unknown_until_observed(self):
        assert format_state(EntityKind.SENSOR.value, 0.0, False) == UNKNOWN
        assert format_state(EntityKind.SWITCH.value, None, True) == UNKNOWN

    @pytest.mark.parametrize(
        ("value", "decimals", "unit", "expected"),
        [
            (21.456, 1, "°C", "21.5 °C"),
            (21.456, 2, "°C", "21.46 °C"),
            (1013.0, 0, "hPa", "1013 hPa"),
            (0.5, 3, "", "0.500"),
            (3.7, -1, "", "4"),
        ],
    )
    def test_sensor(self, value, decimals, unit, expected):
        assert (
            format_state(
                EntityKind.SENSOR.value,
                value,
                True,
                unit_of_measurement=unit,
                accuracy_decimals=decimals,
            )
            == expected
        )

    @pytest.mark.parametrize(
        ("device_class", "on_text", "off_text"),
        [
            ("motion", "MOTION", "NO MOTION"),
            ("door", "OPEN", "CLOSED"),
            ("window", "OPEN", "CLOSED"),
            ("occupancy", "OCCUPIED", "CLEAR"),
            ("safety", "UNSAFE", "SAFE"),
            ("connectivity", "CONNECTED", "DISCONNECTED"),
            ("Motion", "MOTION", "NO MOTION"),
            ("", "ON", "OFF"),
            ("moisture", "ON", "OFF"),
        ],
    )
    def test_binary_sensor(self, device_class, on_text, off_text):
        kind = EntityKind.BINARY_SENSOR.value
        assert format_state(kind, True, True, device_class=device_class) == on_text
        assert format_state(kind, False, True, device_class=device_class) == off_text

    def test_switch_ignores_device_class(self):
        text = format_state(EntityKind.SWITCH.value, True, True, device_class="door")
        assert text == "ON"
