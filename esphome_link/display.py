"""Human-readable projection of entity values.

Pure functions keyed on the entity kind name (`"switch"`, `"sensor"`,
`"binary_sensor"`); nothing here touches the entity model.
"""

from __future__ import annotations

UNKNOWN = "UNKNOWN"

# device class -> (text when true, text when false)
BINARY_SENSOR_WORDING: dict[str, tuple[str, str]] = {
    "motion": ("MOTION", "NO MOTION"),
    "door": ("OPEN", "CLOSED"),
    "window": ("OPEN", "CLOSED"),
    "occupancy": ("OCCUPIED", "CLEAR"),
    "safety": ("UNSAFE", "SAFE"),
    "connectivity": ("CONNECTED", "DISCONNECTED"),
}
DEFAULT_WORDING = ("ON", "OFF")


def format_state(
    kind: str,
    value: bool | float | None,
    has_value: bool,
    *,
    device_class: str = "",
    unit_of_measurement: str = "",
    accuracy_decimals: int = 1,
) -> str:
    """Render an entity value as text.

    Args:
        kind: Entity kind name
        value: Current value
        has_value: Whether a value was ever observed
        device_class: Device class hint (binary sensors)
        unit_of_measurement: Unit suffix (sensors)
        accuracy_decimals: Number of decimals shown (sensors)
    """
    if not has_value or value is None:
        return UNKNOWN

    if kind == "sensor":
        text = f"{float(value):.{max(accuracy_decimals, 0)}f}"
        return f"{text} {unit_of_measurement}" if unit_of_measurement else text

    if kind == "binary_sensor":
        on_text, off_text = BINARY_SENSOR_WORDING.get(
            device_class.lower(), DEFAULT_WORDING
        )
    else:
        on_text, off_text = DEFAULT_WORDING
    return on_text if value else off_text
