"""Node list loading from YAML configuration.

Example::

    client_info: esphome-link
    nodes:
      - name: garage
        host: 192.168.0.26
        port: 6053
        password: ""
        connect_timeout: 10
        sync_timeout: 1.0
        drain_timeout: 0.5
        message_types:
          list_entities_sensor: 16
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .messages import DEFAULT_MESSAGE_TYPES, MessageTypes
from .session import DEFAULT_CLIENT_INFO, DEFAULT_PORT


class ConfigLoadError(Exception):
    """Error loading or validating a configuration file."""


@dataclass(frozen=True)
class NodeConfig:
    """Connection settings for one node.

    Attributes:
        name: Label used in logs; defaults to the host.
        host: Node hostname or IP.
        port: Native API port.
        password: API password, empty when the node has none.
        client_info: Client identity sent in the hello request.
        connect_timeout: TCP connect timeout (seconds).
        sync_timeout: Length of each state sync (seconds).
        drain_timeout: Length of the drain pass after each sync (seconds).
        message_types: Message type table for this node.
    """

    name: str
    host: str
    port: int = DEFAULT_PORT
    password: str = ""
    client_info: str = DEFAULT_CLIENT_INFO
    connect_timeout: float = 10.0
    sync_timeout: float = 1.0
    drain_timeout: float = 0.5
    message_types: MessageTypes = DEFAULT_MESSAGE_TYPES


@dataclass(frozen=True)
class ClientConfig:
    """All configured nodes."""

    nodes: tuple[NodeConfig, ...] = field(default_factory=tuple)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise ConfigLoadError(f"File not found: {path}")
    with path.open() as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise ConfigLoadError(f"Invalid YAML in {path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Top level of {path} must be a mapping")
    return data


def _number(data: dict[str, Any], key: str, default: float, where: str) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigLoadError(f"{where}: {key} must be a positive number")
    return float(value)


def parse_node(data: dict[str, Any], *, client_info: str, index: int = 0) -> NodeConfig:
    """Parse one node entry.

    Raises:
        ConfigLoadError: If host is missing or a field has the wrong type.
    """
    where = f"nodes[{index}]"
    if not isinstance(data, dict):
        raise ConfigLoadError(f"{where} must be a mapping")

    host = data.get("host")
    if not host or not isinstance(host, str):
        raise ConfigLoadError(f"{where}: host is required")

    port = data.get("port", DEFAULT_PORT)
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigLoadError(f"{where}: port must be an integer in 1-65535")

    password = data.get("password") or ""
    if not isinstance(password, str):
        raise ConfigLoadError(f"{where}: password must be a string")

    message_types = DEFAULT_MESSAGE_TYPES
    if overrides := data.get("message_types"):
        if not isinstance(overrides, dict):
            raise ConfigLoadError(f"{where}: message_types must be a mapping")
        try:
            message_types = DEFAULT_MESSAGE_TYPES.with_overrides(overrides)
        except ValueError as err:
            raise ConfigLoadError(f"{where}: {err}") from err

    return NodeConfig(
        name=str(data.get("name") or host),
        host=host,
        port=port,
        password=password,
        client_info=str(data.get("client_info", client_info)),
        connect_timeout=_number(data, "connect_timeout", 10.0, where),
        sync_timeout=_number(data, "sync_timeout", 1.0, where),
        drain_timeout=_number(data, "drain_timeout", 0.5, where),
        message_types=message_types,
    )


def parse_config(data: dict[str, Any]) -> ClientConfig:
    """Build a ClientConfig from already loaded YAML data."""
    client_info = str(data.get("client_info", DEFAULT_CLIENT_INFO))
    nodes_data = data.get("nodes", [])
    if not isinstance(nodes_data, list):
        raise ConfigLoadError("nodes must be a list")

    return ClientConfig(
        nodes=tuple(
            parse_node(node_data, client_info=client_info, index=index)
            for index, node_data in enumerate(nodes_data)
        )
    )


def load_config(path: Path | str) -> ClientConfig:
    """Load the node list from a YAML file.

    Args:
        path: Path to the configuration file.

    Returns:
        Parsed ClientConfig.

    Raises:
        ConfigLoadError: If the file is missing or invalid.
    """
    return parse_config(_load_yaml(Path(path)))
