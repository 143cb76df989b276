"""Message type identifiers for the ESPHome native API.

`MessageType` is the full catalog of ids published by the device firmware,
used for diagnostics. `MessageTypes` is the table the client actually acts
on; it is passed explicitly to the session, registry and orchestrator so a
peer with a different numbering can be handled by configuration.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class MessageType(IntEnum):
    """Native API message type ids."""

    HELLO_REQUEST = 1
    HELLO_RESPONSE = 2
    AUTHENTICATION_REQUEST = 3
    AUTHENTICATION_RESPONSE = 4
    DISCONNECT_REQUEST = 5
    DISCONNECT_RESPONSE = 6
    PING_REQUEST = 7
    PING_RESPONSE = 8
    DEVICE_INFO_REQUEST = 9
    DEVICE_INFO_RESPONSE = 10

    LIST_ENTITIES_REQUEST = 11
    LIST_ENTITIES_BINARY_SENSOR_RESPONSE = 12
    LIST_ENTITIES_COVER_RESPONSE = 13
    LIST_ENTITIES_FAN_RESPONSE = 14
    LIST_ENTITIES_LIGHT_RESPONSE = 15
    LIST_ENTITIES_SENSOR_RESPONSE = 16
    LIST_ENTITIES_SWITCH_RESPONSE = 17
    LIST_ENTITIES_TEXT_SENSOR_RESPONSE = 18
    LIST_ENTITIES_DONE_RESPONSE = 19
    SUBSCRIBE_STATES_REQUEST = 20
    BINARY_SENSOR_STATE_RESPONSE = 21
    COVER_STATE_RESPONSE = 22
    FAN_STATE_RESPONSE = 23
    LIGHT_STATE_RESPONSE = 24
    SENSOR_STATE_RESPONSE = 25
    SWITCH_STATE_RESPONSE = 26
    TEXT_SENSOR_STATE_RESPONSE = 27
    SUBSCRIBE_LOGS_REQUEST = 28
    SUBSCRIBE_LOGS_RESPONSE = 29

    COVER_COMMAND_REQUEST = 30
    FAN_COMMAND_REQUEST = 31
    LIGHT_COMMAND_REQUEST = 32
    SWITCH_COMMAND_REQUEST = 33
    SUBSCRIBE_HOMEASSISTANT_SERVICES_REQUEST = 34
    HOMEASSISTANT_SERVICE_RESPONSE = 35
    GET_TIME_REQUEST = 36
    GET_TIME_RESPONSE = 37
    SUBSCRIBE_HOME_ASSISTANT_STATES_REQUEST = 38
    SUBSCRIBE_HOME_ASSISTANT_STATE_RESPONSE = 39
    HOME_ASSISTANT_STATE_RESPONSE = 40
    LIST_ENTITIES_SERVICES_RESPONSE = 41
    EXECUTE_SERVICE_REQUEST = 42

    LIST_ENTITIES_CAMERA_RESPONSE = 43
    CAMERA_IMAGE_RESPONSE = 44
    CAMERA_IMAGE_REQUEST = 45
    LIST_ENTITIES_CLIMATE_RESPONSE = 46
    CLIMATE_STATE_RESPONSE = 47
    CLIMATE_COMMAND_REQUEST = 48
    LIST_ENTITIES_NUMBER_RESPONSE = 49
    NUMBER_STATE_RESPONSE = 50
    NUMBER_COMMAND_REQUEST = 51
    LIST_ENTITIES_SELECT_RESPONSE = 52
    SELECT_STATE_RESPONSE = 53
    SELECT_COMMAND_REQUEST = 54
    LIST_ENTITIES_SIREN_RESPONSE = 55
    SIREN_STATE_RESPONSE = 56
    SIREN_COMMAND_REQUEST = 57
    LIST_ENTITIES_LOCK_RESPONSE = 58
    LOCK_STATE_RESPONSE = 59
    LOCK_COMMAND_REQUEST = 60
    LIST_ENTITIES_BUTTON_RESPONSE = 61
    BUTTON_COMMAND_REQUEST = 62
    LIST_ENTITIES_MEDIA_PLAYER_RESPONSE = 63
    MEDIA_PLAYER_STATE_RESPONSE = 64
    MEDIA_PLAYER_COMMAND_REQUEST = 65

    BLUETOOTH_PROXY_SUBSCRIBE_REQUEST = 66
    BLUETOOTH_PROXY_SUBSCRIBE_RESPONSE = 67
    BLUETOOTH_DEVICE_REQUEST = 68
    BLUETOOTH_DEVICE_CONNECTION_RESPONSE = 69
    BLUETOOTH_GATT_GET_SERVICES_REQUEST = 70
    BLUETOOTH_GATT_GET_SERVICES_RESPONSE = 71
    BLUETOOTH_GATT_GET_SERVICES_DONE_RESPONSE = 72
    BLUETOOTH_GATT_READ_REQUEST = 73
    BLUETOOTH_GATT_READ_RESPONSE = 74
    BLUETOOTH_GATT_WRITE_REQUEST = 75
    BLUETOOTH_GATT_WRITE_RESPONSE = 76
    BLUETOOTH_GATT_NOTIFY_REQUEST = 77
    BLUETOOTH_GATT_NOTIFY_RESPONSE = 78
    BLUETOOTH_GATT_NOTIFY_DATA_RESPONSE = 79
    BLUETOOTH_LE_ADVERTISEMENT_RESPONSE = 80
    BLUETOOTH_DEVICE_PAIRING_RESPONSE = 81
    BLUETOOTH_DEVICE_UNPAIRING_RESPONSE = 82
    BLUETOOTH_DEVICE_CLEAR_CACHE_RESPONSE = 83
    BLUETOOTH_GATT_GET_SERVICE_REQUEST = 84
    BLUETOOTH_GATT_GET_SERVICE_RESPONSE = 85
    BLUETOOTH_DEVICE_CONNECTION_STATE_RESPONSE = 86
    BLUETOOTH_GATT_ERROR_RESPONSE = 87
    BLUETOOTH_GATT_WRITE_DESCRIPTOR_REQUEST = 88

    VOICE_ASSISTANT_REQUEST = 89
    VOICE_ASSISTANT_RESPONSE = 90
    VOICE_ASSISTANT_EVENT_RESPONSE = 91
    VOICE_ASSISTANT_AUDIO_SETTINGS = 92
    BLUETOOTH_DEVICE_REQUEST_RESPONSE = 93
    LIST_ENTITIES_ALARM_CONTROL_PANEL_RESPONSE = 94
    ALARM_CONTROL_PANEL_STATE_RESPONSE = 95
    ALARM_CONTROL_PANEL_COMMAND_REQUEST = 96
    LIST_ENTITIES_TEXT_RESPONSE = 97
    TEXT_STATE_RESPONSE = 98
    TEXT_COMMAND_REQUEST = 99
    LIST_ENTITIES_DATE_RESPONSE = 100
    DATE_STATE_RESPONSE = 101
    DATE_COMMAND_REQUEST = 102
    LIST_ENTITIES_TIME_RESPONSE = 103
    TIME_STATE_RESPONSE = 104
    TIME_COMMAND_REQUEST = 105
    VOICE_ASSISTANT_EVENT_DATA = 106
    LIST_ENTITIES_EVENT_RESPONSE = 107
    EVENT_RESPONSE = 108
    LIST_ENTITIES_VALVE_RESPONSE = 109
    VALVE_STATE_RESPONSE = 110
    VALVE_COMMAND_REQUEST = 111
    LIST_ENTITIES_DATE_TIME_RESPONSE = 112
    DATE_TIME_STATE_RESPONSE = 113
    DATE_TIME_COMMAND_REQUEST = 114
    VOICE_ASSISTANT_AUDIO_SETTINGS_REQUEST = 115
    LIST_ENTITIES_UPDATE_RESPONSE = 116
    UPDATE_STATE_RESPONSE = 117
    UPDATE_COMMAND_REQUEST = 118
    VOICE_ASSISTANT_TIMER_EVENT_RESPONSE = 119
    VOICE_ASSISTANT_ANNOUNCE_REQUEST = 120
    VOICE_ASSISTANT_ANNOUNCE_RESPONSE = 121
    VOICE_ASSISTANT_WAKE_WORD_REQUEST = 122
    VOICE_ASSISTANT_WAKE_WORD_RESPONSE = 123
    CONNECT_REQUEST = 124
    CONNECT_RESPONSE = 125
    BLUETOOTH_CONNECTIONS_FREE_REQUEST = 126
    BLUETOOTH_CONNECTIONS_FREE_RESPONSE = 127
    UNSUBSCRIBE_BLUETOOTH_LE_ADVERTISEMENTS_REQUEST = 128
    BLUETOOTH_LE_RAW_ADVERTISEMENTS_RESPONSE = 129
    BLUETOOTH_GATT_NOTIFY_DATA_REQUEST = 130


def describe_message_type(msg_type: int) -> str:
    """Return the catalog name for a type id, or a placeholder for unknown ids."""
    try:
        return MessageType(msg_type).name
    except ValueError:
        return f"UNKNOWN_{msg_type}"


@dataclass(frozen=True, slots=True)
class MessageTypes:
    """Type ids the client sends and recognizes.

    Defaults are the standard numbering. Entity listing and state ids vary
    between firmware generations, so they are always read from an instance
    of this table rather than hard-coded.
    """

    hello_request: int = MessageType.HELLO_REQUEST
    hello_response: int = MessageType.HELLO_RESPONSE
    authentication_request: int = MessageType.AUTHENTICATION_REQUEST
    authentication_response: int = MessageType.AUTHENTICATION_RESPONSE
    disconnect_request: int = MessageType.DISCONNECT_REQUEST
    disconnect_response: int = MessageType.DISCONNECT_RESPONSE
    ping_request: int = MessageType.PING_REQUEST
    ping_response: int = MessageType.PING_RESPONSE
    device_info_request: int = MessageType.DEVICE_INFO_REQUEST
    device_info_response: int = MessageType.DEVICE_INFO_RESPONSE

    list_entities_request: int = MessageType.LIST_ENTITIES_REQUEST
    list_entities_binary_sensor: int = MessageType.LIST_ENTITIES_BINARY_SENSOR_RESPONSE
    list_entities_sensor: int = MessageType.LIST_ENTITIES_SENSOR_RESPONSE
    list_entities_switch: int = MessageType.LIST_ENTITIES_SWITCH_RESPONSE
    list_entities_done: int = MessageType.LIST_ENTITIES_DONE_RESPONSE

    subscribe_states_request: int = MessageType.SUBSCRIBE_STATES_REQUEST
    binary_sensor_state: int = MessageType.BINARY_SENSOR_STATE_RESPONSE
    sensor_state: int = MessageType.SENSOR_STATE_RESPONSE
    switch_state: int = MessageType.SWITCH_STATE_RESPONSE
    switch_command: int = MessageType.SWITCH_COMMAND_REQUEST

    def with_overrides(self, overrides: Mapping[str, Any]) -> MessageTypes:
        """Return a copy with some ids replaced.

        Raises:
            ValueError: If a key is not a field of this table or a value is
                not a non-negative integer.
        """
        known = {field.name for field in dataclasses.fields(self)}
        values: dict[str, int] = {}
        for name, value in overrides.items():
            if name not in known:
                raise ValueError(f"Unknown message type name: {name}")
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(
                    f"Message type id for {name} must be a non-negative int"
                )
            values[name] = value
        return dataclasses.replace(self, **values)


DEFAULT_MESSAGE_TYPES = MessageTypes()
