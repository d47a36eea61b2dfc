"""Tests for configuration loading and validation."""

import logging

import pytest
import yaml

from config_loader import (
    DEFAULT_PRINTER_IPS,
    TimezoneFormatter,
    get_sample_config,
    load_config,
)
from discovery.probe import ConnectivityProbe, HttpHeadProbe, TcpConnectProbe, create_prober


def write_config(tmp_path, data) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self):
        """Should fill every section from defaults."""
        config = load_config(None)

        discovery = config["discovery"]
        assert discovery["ports"] == [80, 631, 443, 8080, 9100, 8000]
        assert discovery["batch_size"] == 10
        assert discovery["address_timeout"] == 3
        assert discovery["default_address"] == "192.168.1.1"
        assert discovery["local_address"] is None
        assert discovery["default_ips"] == DEFAULT_PRINTER_IPS
        assert config["favorites"]["directory"] == "data"
        assert config["api"]["port"] == 8000
        assert config["logging"]["level"] == "INFO"

    def test_yaml_overrides_keep_other_defaults(self, tmp_path):
        """Should merge file values over defaults."""
        path = write_config(tmp_path, {
            "discovery": {"batch_size": 5, "local_address": "10.0.0.7"},
            "favorites": {"directory": str(tmp_path / "favs")},
        })

        config = load_config(path)

        assert config["discovery"]["batch_size"] == 5
        assert config["discovery"]["local_address"] == "10.0.0.7"
        assert config["discovery"]["ports"] == [80, 631, 443, 8080, 9100, 8000]
        assert config["favorites"]["directory"] == str(tmp_path / "favs")

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = load_config(str(path))

        assert config["discovery"]["batch_size"] == 10

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    @pytest.mark.parametrize("discovery", [
        {"ports": [0]},
        {"ports": [70000]},
        {"ports": []},
        {"batch_size": 0},
        {"connect_timeout": 0},
        {"batch_delay": -1},
        {"probe_strategies": ["icmp"]},
        {"local_address": "not-an-ip"},
        {"priority_octets": [300]},
    ])
    def test_invalid_discovery_values_raise(self, tmp_path, discovery):
        path = write_config(tmp_path, {"discovery": discovery})

        with pytest.raises(ValueError):
            load_config(path)

    def test_sample_config_is_valid(self, tmp_path):
        """Should accept the documented sample."""
        path = write_config(tmp_path, get_sample_config())

        config = load_config(path)

        assert config["discovery"]["probe_strategies"] == ["tcp", "http"]

    def test_repository_config_is_valid(self):
        from pathlib import Path

        path = Path(__file__).resolve().parent.parent / "config" / "config.yaml"
        config = load_config(str(path))

        assert config["discovery"]["discover_on_startup"] is True


class TestCreateProber:
    """Tests for building the probe chain from config."""

    def test_tiers_follow_configured_order(self):
        prober = create_prober({"probe_strategies": ["http", "tcp"],
                                "connect_timeout": 2, "request_timeout": 0.5})

        assert isinstance(prober, ConnectivityProbe)
        assert [type(t) for t in prober.tiers] == [HttpHeadProbe, TcpConnectProbe]
        assert prober.tiers[0].timeout == 0.5
        assert prober.tiers[1].timeout == 2

    def test_default_is_tcp_then_http(self):
        prober = create_prober({})

        assert [type(t) for t in prober.tiers] == [TcpConnectProbe, HttpHeadProbe]


class TestTimezoneFormatter:
    def test_unknown_timezone_falls_back_to_utc(self):
        formatter = TimezoneFormatter("%(asctime)s %(message)s", "Mars/Olympus")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

        assert formatter.formatTime(record).endswith("UTC")
