# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from rgbw2mqtt.abilities.color_light import ColorLightAbility
from rgbw2mqtt.device.delegate import DeviceDelegate
from rgbw2mqtt.device.rpc import DeviceRpcError, ShellyRpcClient

if TYPE_CHECKING:
    from rgbw2mqtt.interface import Ability
    from rgbw2mqtt.interface import Rgbw2MqttProtocol as Rgbw2Mqtt


class ShellyMixin:
    async def refresh_device_list(self: Rgbw2Mqtt) -> None:
        self.logger.info(f"refreshing device list from {len(self.hosts)} Shelly host(s) (every {self.device_list_interval} sec)")

        seen_devices: set[str] = set()

        tasks = [self.build_device(host) for host in self.hosts]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for result in results:
            if isinstance(result, Exception):
                self.logger.error("error during build_device", exc_info=result)
            elif result and isinstance(result, str):
                seen_devices.add(result)

        missing_devices = set(self.devices.keys()) - seen_devices
        for device_id in missing_devices:
            self.upsert_state(device_id, internal={"online": False})
            await self.publish_device_availability(device_id, online=False)
            self.logger.warning(f"device {self.get_device_name(device_id)} did not answer, marked offline")

        if not self.discovery_complete:
            await self.rediscover_all()
            self.logger.info("first-time device setup and discovery is done")
            self.discovery_complete = True

    async def build_device(self: Rgbw2Mqtt, host: str) -> str:
        """Probe one Shelly host and wire it up; returns the device id, or "" if unreachable."""
        rpc = ShellyRpcClient(self.session, host)
        try:
            info = await rpc.get_device_info()
        except DeviceRpcError as err:
            self.logger.warning(f"could not reach Shelly at {host}: {err}")
            return ""

        device_id = str(info.get("id") or host)

        # already wired up, just poll it
        if device_id in self.devices:
            await self.refresh_device_states(device_id)
            return device_id

        try:
            status = await rpc.get_status()
        except DeviceRpcError as err:
            self.logger.warning(f"could not read status of {device_id} at {host}: {err}")
            return ""

        delegate = DeviceDelegate.for_device(rpc, info, status)
        if not delegate.abilities:
            return ""

        self.upsert_state(
            device_id,
            internal={
                "host": host,
                "model": delegate.model,
                "name": info.get("name") or device_id,
                "online": True,
            },
        )

        self.devices[device_id] = delegate
        delegate.initialize()
        for ability in delegate.abilities:
            self.bind_ability(device_id, ability)

        if not self.is_discovered(device_id):
            self.logger.info(f'added new device: "{self.get_device_name(device_id)}" [Shelly {delegate.model}] ({host}) with {len(delegate.abilities)} light(s)')
            await self.publish_device_discovery(device_id)

        await self.publish_device_availability(device_id, online=True)
        await self.publish_device_state(device_id)
        return device_id

    def build_device_payload(self: Rgbw2Mqtt, device_id: str) -> dict[str, Any]:
        delegate = self.devices[device_id]
        internal = self.states.get(device_id, {}).get("internal", {})

        return {
            "stat_t": self.mqtt_helper.stat_t(device_id, "light"),
            "avty_t": self.mqtt_helper.avty_t(device_id),
            "device": {
                "name": self.get_device_name(device_id),
                "identifiers": [
                    self.mqtt_helper.device_slug(device_id),
                ],
                "manufacturer": "Shelly",
                "model": delegate.model,
                "configuration_url": f"http://{internal.get('host', delegate.rpc.host)}/",
                "via_device": self.service,
            },
            "origin": {
                "name": self.service_name,
                "sw": self.config["version"],
            },
            "qos": self.qos,
            "cmps": {ability.key: self.build_light_component(device_id, ability) for ability in delegate.abilities},
        }

    def build_light_component(self: Rgbw2Mqtt, device_id: str, ability: Ability) -> dict[str, Any]:
        key = ability.key
        component: dict[str, Any] = {
            "p": "light",
            "name": ability.name,
            "uniq_id": self.mqtt_helper.dev_unique_id(device_id, key),
            "stat_t": self.mqtt_helper.stat_t(device_id, key, "state"),
            "cmd_t": self.mqtt_helper.cmd_t(device_id, key, "on"),
            "avty_t": self.mqtt_helper.avty_t(device_id),
            "payload_on": "ON",
            "payload_off": "OFF",
            "brightness_scale": 100,
            "brightness_state_topic": self.mqtt_helper.stat_t(device_id, key, "brightness"),
            "brightness_command_topic": self.mqtt_helper.cmd_t(device_id, key, "brightness"),
            "supported_color_modes": ["brightness"],
        }

        if isinstance(ability, ColorLightAbility):
            component["supported_color_modes"] = ["hs"]
            component["hs_state_topic"] = self.mqtt_helper.stat_t(device_id, key, "hs")
            component["hs_command_topic"] = self.mqtt_helper.cmd_t(device_id, key, "hs")
            component["icon"] = "mdi:led-strip-variant"
        else:
            component["icon"] = "mdi:lightbulb"

        return component

    async def refresh_device_states(self: Rgbw2Mqtt, device_id: str) -> None:
        delegate = self.devices[device_id]
        was_online = self.states.get(device_id, {}).get("internal", {}).get("online", True)

        try:
            status = await delegate.rpc.get_status()
        except DeviceRpcError as err:
            if was_online:
                self.logger.warning(f"lost contact with {self.get_device_name(device_id)}: {err}")
                self.upsert_state(device_id, internal={"online": False})
                await self.publish_device_availability(device_id, online=False)
            return

        # components emit change events, abilities push characteristics, listeners publish
        changed = delegate.apply_status(status)
        if changed:
            self.logger.debug(f"{self.get_device_name(device_id)} reported changes on {', '.join(changed)}")

        if not was_online:
            self.logger.info(f"{self.get_device_name(device_id)} is reachable again")
            self.upsert_state(device_id, internal={"online": True})
            await self.publish_device_availability(device_id, online=True)
