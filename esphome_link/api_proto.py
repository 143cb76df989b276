"""Protocol Buffer schema for the native API messages this client uses.

The schema is declared as a FileDescriptorProto and loaded into a private
descriptor pool, so message classes are available without running protoc.
Field numbers and types match the device firmware's api.proto; enum fields
are declared as int32, which has the same wire encoding.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto

_PACKAGE = "esphome_link.api"

_STRING = _F.TYPE_STRING
_BOOL = _F.TYPE_BOOL
_UINT32 = _F.TYPE_UINT32
_INT32 = _F.TYPE_INT32
_FIXED32 = _F.TYPE_FIXED32
_FLOAT = _F.TYPE_FLOAT

# message name -> ((field name, field number, field type), ...)
_SCHEMA: dict[str, tuple[tuple[str, int, int], ...]] = {
    "HelloRequest": (
        ("client_info", 1, _STRING),
        ("api_version_major", 2, _UINT32),
        ("api_version_minor", 3, _UINT32),
    ),
    "HelloResponse": (
        ("api_version_major", 1, _UINT32),
        ("api_version_minor", 2, _UINT32),
        ("server_info", 3, _STRING),
        ("name", 4, _STRING),
    ),
    "AuthenticationRequest": (("password", 1, _STRING),),
    "AuthenticationResponse": (("invalid_password", 1, _BOOL),),
    "DisconnectRequest": (),
    "DisconnectResponse": (),
    "PingRequest": (),
    "PingResponse": (),
    "DeviceInfoRequest": (),
    "DeviceInfoResponse": (
        ("uses_password", 1, _BOOL),
        ("name", 2, _STRING),
        ("mac_address", 3, _STRING),
        ("esphome_version", 4, _STRING),
        ("compilation_time", 5, _STRING),
        ("model", 6, _STRING),
        ("has_deep_sleep", 7, _BOOL),
        ("project_name", 8, _STRING),
        ("project_version", 9, _STRING),
        ("webserver_port", 10, _UINT32),
        ("manufacturer", 12, _STRING),
        ("friendly_name", 13, _STRING),
        ("suggested_area", 16, _STRING),
    ),
    "ListEntitiesRequest": (),
    "ListEntitiesDoneResponse": (),
    "ListEntitiesBinarySensorResponse": (
        ("object_id", 1, _STRING),
        ("key", 2, _FIXED32),
        ("name", 3, _STRING),
        ("unique_id", 4, _STRING),
        ("device_class", 5, _STRING),
        ("is_status_binary_sensor", 6, _BOOL),
        ("disabled_by_default", 7, _BOOL),
        ("icon", 8, _STRING),
        ("entity_category", 9, _INT32),
    ),
    "ListEntitiesSensorResponse": (
        ("object_id", 1, _STRING),
        ("key", 2, _FIXED32),
        ("name", 3, _STRING),
        ("unique_id", 4, _STRING),
        ("icon", 5, _STRING),
        ("unit_of_measurement", 6, _STRING),
        ("accuracy_decimals", 7, _INT32),
        ("force_update", 8, _BOOL),
        ("device_class", 9, _STRING),
        ("state_class", 10, _INT32),
        ("disabled_by_default", 12, _BOOL),
        ("entity_category", 13, _INT32),
    ),
    "ListEntitiesSwitchResponse": (
        ("object_id", 1, _STRING),
        ("key", 2, _FIXED32),
        ("name", 3, _STRING),
        ("unique_id", 4, _STRING),
        ("icon", 5, _STRING),
        ("assumed_state", 6, _BOOL),
        ("disabled_by_default", 7, _BOOL),
        ("entity_category", 8, _INT32),
        ("device_class", 9, _STRING),
    ),
    "SubscribeStatesRequest": (),
    "BinarySensorStateResponse": (
        ("key", 1, _FIXED32),
        ("state", 2, _BOOL),
        ("missing_state", 3, _BOOL),
    ),
    "SensorStateResponse": (
        ("key", 1, _FIXED32),
        ("state", 2, _FLOAT),
        ("missing_state", 3, _BOOL),
    ),
    "SwitchStateResponse": (
        ("key", 1, _FIXED32),
        ("state", 2, _BOOL),
    ),
    "SwitchCommandRequest": (
        ("key", 1, _FIXED32),
        ("state", 2, _BOOL),
    ),
}


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="esphome_link/api.proto",
        package=_PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in _SCHEMA.items():
        message = file_proto.message_type.add(name=message_name)
        for field_name, number, field_type in fields:
            message.field.add(
                name=field_name,
                number=number,
                type=field_type,
                label=_F.LABEL_OPTIONAL,
            )
    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str) -> type:
    return message_factory.GetMessageClass(
        _POOL.FindMessageTypeByName(f"{_PACKAGE}.{name}")
    )


HelloRequest = _message_class("HelloRequest")
HelloResponse = _message_class("HelloResponse")
AuthenticationRequest = _message_class("AuthenticationRequest")
AuthenticationResponse = _message_class("AuthenticationResponse")
DisconnectRequest = _message_class("DisconnectRequest")
DisconnectResponse = _message_class("DisconnectResponse")
PingRequest = _message_class("PingRequest")
PingResponse = _message_class("PingResponse")
DeviceInfoRequest = _message_class("DeviceInfoRequest")
DeviceInfoResponse = _message_class("DeviceInfoResponse")
ListEntitiesRequest = _message_class("ListEntitiesRequest")
ListEntitiesDoneResponse = _message_class("ListEntitiesDoneResponse")
ListEntitiesBinarySensorResponse = _message_class("ListEntitiesBinarySensorResponse")
ListEntitiesSensorResponse = _message_class("ListEntitiesSensorResponse")
ListEntitiesSwitchResponse = _message_class("ListEntitiesSwitchResponse")
SubscribeStatesRequest = _message_class("SubscribeStatesRequest")
BinarySensorStateResponse = _message_class("BinarySensorStateResponse")
SensorStateResponse = _message_class("SensorStateResponse")
SwitchStateResponse = _message_class("SwitchStateResponse")
SwitchCommandRequest = _message_class("SwitchCommandRequest")
