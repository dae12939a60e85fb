# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from typing import Any

import pytest


@pytest.fixture
def sample_rgbw2mqtt_config() -> dict[str, Any]:
    """Return a minimal valid config dict for rgbw2mqtt."""
    return {
        "mqtt": {
            "host": "localhost",
            "port": 1883,
            "qos": 0,
            "username": "testuser",
            "password": "testpass",
            "tls_enabled": False,
            "prefix": "rgbw2mqtt",
            "discovery_prefix": "homeassistant",
        },
        "shelly": {
            "hosts": ["192.168.1.50"],
            "device_interval": 30,
            "device_list_interval": 300,
            "timeout": 10,
        },
        "debug": False,
        "timezone": "UTC",
        "config_from": "test",
        "config_path": "/tmp",
        "version": "0.0.0-test",
    }


@pytest.fixture
def rgbw_status() -> dict[str, Any]:
    """Shelly.GetStatus result of a Plus RGBW PM in rgbw profile."""
    return {
        "sys": {"uptime": 1234},
        "wifi": {"sta_ip": "192.168.1.50"},
        "rgbw:0": {
            "id": 0,
            "source": "init",
            "output": True,
            "rgb": [255, 0, 0],
            "brightness": 80,
            "white": 20,
            "apower": 4.2,
        },
    }


@pytest.fixture
def lights_status() -> dict[str, Any]:
    """Shelly.GetStatus result of a Plus RGBW PM in light profile."""
    return {
        f"light:{index}": {"id": index, "output": index % 2 == 0, "brightness": 10 * (index + 1)}
        for index in range(4)
    }


@pytest.fixture
def device_info() -> dict[str, Any]:
    return {
        "id": "shellyplusrgbwpm-a0a3b3c4d5e6",
        "model": "SNDC-0D4P10WW",
        "gen": 2,
        "name": "Kitchen Strip",
        "app": "PlusRGBWPM",
    }
