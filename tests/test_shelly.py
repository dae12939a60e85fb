# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from rgbw2mqtt.characteristics import ON
from rgbw2mqtt.device.delegate import DeviceDelegate
from rgbw2mqtt.device.rpc import DeviceRpcError
from rgbw2mqtt.mixins.helpers import HelpersMixin
from rgbw2mqtt.mixins.mqtt import MqttMixin
from rgbw2mqtt.mixins.shelly import ShellyMixin


class FakeShelly(HelpersMixin, ShellyMixin, MqttMixin):
    def __init__(self, hosts: list[str] | None = None) -> None:
        self.service = "rgbw2mqtt"
        self.service_name = "rgbw2mqtt service"
        self.qos = 0
        self.config = {"version": "v0.1.0-test"}
        self.logger = MagicMock()
        self.session = MagicMock()
        self.hosts = hosts or ["192.168.1.50"]
        self.device_interval = 30
        self.device_list_interval = 300
        self.discovery_complete = True
        self.devices: dict[str, Any] = {}
        self.states: dict[str, Any] = {}

        self.mqtt_helper = MagicMock()
        self.mqtt_helper.service_slug = "rgbw2mqtt"
        self.mqtt_helper.dev_unique_id = MagicMock(side_effect=lambda d, e: f"rgbw2mqtt_{d}_{e}")
        self.mqtt_helper.device_slug = MagicMock(side_effect=lambda d: f"rgbw2mqtt_{d}")
        self.mqtt_helper.stat_t = MagicMock(side_effect=lambda *args: "/".join(["rgbw2mqtt"] + list(args)))
        self.mqtt_helper.avty_t = MagicMock(side_effect=lambda *args: "/".join(["rgbw2mqtt"] + list(args) + ["availability"]))
        self.mqtt_helper.cmd_t = MagicMock(side_effect=lambda *args: "/".join(["rgbw2mqtt"] + list(args) + ["set"]))

        self.bind_ability = MagicMock()
        self.publish_device_discovery = AsyncMock()
        self.publish_device_availability = AsyncMock()
        self.publish_device_state = AsyncMock()
        self.rediscover_all = AsyncMock()


def _rpc_client(info: dict[str, Any] | Exception, status: dict[str, Any] | Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.host = "192.168.1.50"
    client.get_device_info = AsyncMock(side_effect=info if isinstance(info, Exception) else None, return_value=info)
    client.get_status = AsyncMock(side_effect=status if isinstance(status, Exception) else None, return_value=status)
    client.call = AsyncMock(return_value={})
    return client


# ===========================================================================
# TestBuildDevice
# ===========================================================================
class TestBuildDevice:
    @pytest.mark.asyncio
    async def test_new_device_is_wired_and_discovered(self, device_info, rgbw_status) -> None:
        fake = FakeShelly()
        client = _rpc_client(device_info, rgbw_status)

        with patch("rgbw2mqtt.mixins.shelly.ShellyRpcClient", return_value=client):
            device_id = await fake.build_device("192.168.1.50")

        assert device_id == "shellyplusrgbwpm-a0a3b3c4d5e6"
        assert isinstance(fake.devices[device_id], DeviceDelegate)
        assert fake.states[device_id]["internal"] == {
            "host": "192.168.1.50",
            "model": "SNDC-0D4P10WW",
            "name": "Kitchen Strip",
            "online": True,
        }
        fake.bind_ability.assert_called_once()
        fake.publish_device_discovery.assert_awaited_once_with(device_id)
        fake.publish_device_availability.assert_awaited_once_with(device_id, online=True)
        fake.publish_device_state.assert_awaited_once_with(device_id)

        # abilities were initialized from the status
        ability = fake.devices[device_id].abilities[0]
        assert ability.service.get_characteristic(ON).value is True

    @pytest.mark.asyncio
    async def test_already_discovered_skips_discovery(self, device_info, rgbw_status) -> None:
        fake = FakeShelly()
        fake.states["shellyplusrgbwpm-a0a3b3c4d5e6"] = {"internal": {"discovered": True}}

        with patch("rgbw2mqtt.mixins.shelly.ShellyRpcClient", return_value=_rpc_client(device_info, rgbw_status)):
            await fake.build_device("192.168.1.50")

        fake.publish_device_discovery.assert_not_awaited()
        fake.publish_device_availability.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_known_device_is_only_refreshed(self, device_info, rgbw_status) -> None:
        fake = FakeShelly()
        existing = MagicMock()
        fake.devices["shellyplusrgbwpm-a0a3b3c4d5e6"] = existing
        fake.refresh_device_states = AsyncMock()

        with patch("rgbw2mqtt.mixins.shelly.ShellyRpcClient", return_value=_rpc_client(device_info, rgbw_status)):
            device_id = await fake.build_device("192.168.1.50")

        assert fake.devices[device_id] is existing
        fake.refresh_device_states.assert_awaited_once_with(device_id)
        fake.bind_ability.assert_not_called()

    @pytest.mark.asyncio
    async def test_unreachable_host_returns_empty(self) -> None:
        fake = FakeShelly()
        client = _rpc_client(DeviceRpcError("192.168.1.50", "Shelly.GetDeviceInfo", "timed out"))

        with patch("rgbw2mqtt.mixins.shelly.ShellyRpcClient", return_value=client):
            assert await fake.build_device("192.168.1.50") == ""

        assert fake.devices == {}
        fake.logger.warning.assert_called()

    @pytest.mark.asyncio
    async def test_device_without_lights_is_skipped(self, device_info) -> None:
        fake = FakeShelly()

        with patch("rgbw2mqtt.mixins.shelly.ShellyRpcClient", return_value=_rpc_client(device_info, {"sys": {}})):
            assert await fake.build_device("192.168.1.50") == ""

        assert fake.devices == {}


# ===========================================================================
# TestRefreshDeviceList
# ===========================================================================
class TestRefreshDeviceList:
    @pytest.mark.asyncio
    async def test_missing_devices_marked_offline(self) -> None:
        fake = FakeShelly(hosts=["a", "b"])
        fake.devices = {"DEV1": MagicMock(), "DEV2": MagicMock()}
        fake.build_device = AsyncMock(side_effect=["DEV1", ""])

        await fake.refresh_device_list()

        fake.publish_device_availability.assert_awaited_once_with("DEV2", online=False)
        assert fake.states["DEV2"]["internal"]["online"] is False

    @pytest.mark.asyncio
    async def test_first_run_rediscovers(self) -> None:
        fake = FakeShelly()
        fake.discovery_complete = False
        fake.build_device = AsyncMock(return_value="DEV1")

        await fake.refresh_device_list()

        fake.rediscover_all.assert_awaited_once()
        assert fake.discovery_complete is True

    @pytest.mark.asyncio
    async def test_build_exceptions_are_logged(self) -> None:
        fake = FakeShelly(hosts=["a", "b"])
        fake.build_device = AsyncMock(side_effect=[RuntimeError("boom"), "DEV2"])

        await fake.refresh_device_list()

        fake.logger.error.assert_called()
        fake.rediscover_all.assert_not_awaited()


# ===========================================================================
# TestDevicePayload
# ===========================================================================
class TestDevicePayload:
    def _wired(self, device_info: dict[str, Any], status: dict[str, Any]) -> FakeShelly:
        fake = FakeShelly()
        delegate = DeviceDelegate.for_device(_rpc_client(device_info, status), device_info, status)
        fake.devices[delegate.device_id] = delegate
        fake.upsert_state(delegate.device_id, internal={"host": "192.168.1.50", "name": "Kitchen Strip"})
        return fake

    def test_color_light_component(self, device_info, rgbw_status) -> None:
        fake = self._wired(device_info, rgbw_status)
        payload = fake.build_device_payload("shellyplusrgbwpm-a0a3b3c4d5e6")

        assert payload["device"]["name"] == "Kitchen Strip"
        assert payload["device"]["manufacturer"] == "Shelly"
        assert payload["device"]["model"] == "SNDC-0D4P10WW"
        assert payload["device"]["configuration_url"] == "http://192.168.1.50/"

        light = payload["cmps"]["color-light-0"]
        assert light["p"] == "light"
        assert light["name"] == "Light"
        assert light["supported_color_modes"] == ["hs"]
        assert light["cmd_t"] == "rgbw2mqtt/shellyplusrgbwpm-a0a3b3c4d5e6/color-light-0/on/set"
        assert light["hs_command_topic"] == "rgbw2mqtt/shellyplusrgbwpm-a0a3b3c4d5e6/color-light-0/hs/set"
        assert light["hs_state_topic"] == "rgbw2mqtt/shellyplusrgbwpm-a0a3b3c4d5e6/color-light-0/hs"
        assert light["brightness_scale"] == 100

    def test_white_light_components(self, device_info, lights_status) -> None:
        fake = self._wired(device_info, lights_status)
        payload = fake.build_device_payload("shellyplusrgbwpm-a0a3b3c4d5e6")

        assert list(payload["cmps"]) == ["light-0", "light-1", "light-2", "light-3"]
        for component in payload["cmps"].values():
            assert component["supported_color_modes"] == ["brightness"]
            assert "hs_command_topic" not in component


# ===========================================================================
# TestRefreshDeviceStates
# ===========================================================================
class TestRefreshDeviceStates:
    @pytest.mark.asyncio
    async def test_status_is_applied(self, device_info, rgbw_status) -> None:
        fake = FakeShelly()
        client = _rpc_client(device_info, {"rgbw:0": {"output": False}})
        delegate = DeviceDelegate.for_device(client, device_info, rgbw_status)
        delegate.initialize()
        fake.devices["DEV1"] = delegate

        await fake.refresh_device_states("DEV1")

        assert delegate.abilities[0].service.get_characteristic(ON).value is False
        fake.publish_device_availability.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rpc_error_marks_offline_once(self, device_info, rgbw_status) -> None:
        fake = FakeShelly()
        client = _rpc_client(device_info, DeviceRpcError("192.168.1.50", "Shelly.GetStatus", "timed out"))
        fake.devices["DEV1"] = DeviceDelegate.for_device(client, device_info, rgbw_status)

        await fake.refresh_device_states("DEV1")
        await fake.refresh_device_states("DEV1")

        fake.publish_device_availability.assert_awaited_once_with("DEV1", online=False)
        assert fake.states["DEV1"]["internal"]["online"] is False

    @pytest.mark.asyncio
    async def test_recovery_marks_online(self, device_info, rgbw_status) -> None:
        fake = FakeShelly()
        client = _rpc_client(device_info, rgbw_status)
        fake.devices["DEV1"] = DeviceDelegate.for_device(client, device_info, rgbw_status)
        fake.upsert_state("DEV1", internal={"online": False})

        await fake.refresh_device_states("DEV1")

        fake.publish_device_availability.assert_awaited_once_with("DEV1", online=True)
        assert fake.states["DEV1"]["internal"]["online"] is True
