"""Tests for YAML node configuration."""

import pytest

from esphome_link.config import ConfigLoadError, load_config, parse_config
from esphome_link.messages import DEFAULT_MESSAGE_TYPES


def write(tmp_path, text):
    path = tmp_path / "nodes.yaml"
    path.write_text(text)
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_full_config(self, tmp_path):
        path = write(
            tmp_path,
            """
client_info: greenhouse
nodes:
  - name: garage
    host: 192.168.0.26
    password: secret
    sync_timeout: 2
    message_types:
      list_entities_sensor: 24
  - host: 192.168.0.27
    port: 6054
""",
        )

        config = load_config(path)

        garage, other = config.nodes
        assert garage.name == "garage"
        assert garage.host == "192.168.0.26"
        assert garage.port == 6053
        assert garage.password == "secret"
        assert garage.client_info == "greenhouse"
        assert garage.sync_timeout == 2.0
        assert garage.message_types.list_entities_sensor == 24
        assert garage.message_types.switch_state == DEFAULT_MESSAGE_TYPES.switch_state

        assert other.name == "192.168.0.27"
        assert other.port == 6054
        assert other.password == ""
        assert other.message_types is DEFAULT_MESSAGE_TYPES

    def test_empty_file(self, tmp_path):
        assert load_config(write(tmp_path, "")).nodes == ()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="File not found"):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="Invalid YAML"):
            load_config(write(tmp_path, "nodes: [unclosed"))

    def test_top_level_not_mapping(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="must be a mapping"):
            load_config(write(tmp_path, "- host: a\n"))


class TestParseConfig:
    """Tests for field validation."""

    def test_nodes_must_be_list(self):
        with pytest.raises(ConfigLoadError, match="nodes must be a list"):
            parse_config({"nodes": {"host": "a"}})

    def test_host_required(self):
        with pytest.raises(ConfigLoadError, match=r"nodes\[0\]: host is required"):
            parse_config({"nodes": [{"name": "garage"}]})

    @pytest.mark.parametrize("port", [0, 70000, "6053", True])
    def test_bad_port(self, port):
        with pytest.raises(ConfigLoadError, match="port must be an integer"):
            parse_config({"nodes": [{"host": "a", "port": port}]})

    def test_bad_password(self):
        with pytest.raises(ConfigLoadError, match="password must be a string"):
            parse_config({"nodes": [{"host": "a", "password": 1234}]})

    @pytest.mark.parametrize(
        "key", ["connect_timeout", "sync_timeout", "drain_timeout"]
    )
    def test_timeouts_must_be_positive(self, key):
        with pytest.raises(ConfigLoadError, match=f"{key} must be a positive number"):
            parse_config({"nodes": [{"host": "a", key: 0}]})

    def test_bad_message_type_override(self):
        with pytest.raises(ConfigLoadError, match=r"nodes\[1\]: Unknown message type"):
            parse_config(
                {
                    "nodes": [
                        {"host": "a"},
                        {"host": "b", "message_types": {"light_state": 24}},
                    ]
                }
            )

    def test_message_types_must_be_mapping(self):
        with pytest.raises(ConfigLoadError, match="message_types must be a mapping"):
            parse_config({"nodes": [{"host": "a", "message_types": [24]}]})
