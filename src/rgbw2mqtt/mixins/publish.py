# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

from rgbw2mqtt.characteristics import BRIGHTNESS, HUE, ON, SATURATION

if TYPE_CHECKING:
    from rgbw2mqtt.characteristics import Characteristic
    from rgbw2mqtt.interface import Ability
    from rgbw2mqtt.interface import Rgbw2MqttProtocol as Rgbw2Mqtt

# characteristic name -> state topic item; hue and saturation share the "h,s" topic
STATE_TOPICS = {
    ON: "state",
    BRIGHTNESS: "brightness",
    HUE: "hs",
    SATURATION: "hs",
}


class PublishMixin:

    # Service -------------------------------------------------------------------------------------

    async def publish_service_discovery(self: Rgbw2Mqtt) -> None:
        device_id = "service"

        device = {
            "stat_t": self.mqtt_helper.stat_t(device_id, "service"),
            "cmd_t": self.mqtt_helper.cmd_t(device_id),
            "avty_t": self.mqtt_helper.avty_t(device_id),
            "device": {
                "name": self.service_name,
                "identifiers": [
                    self.mqtt_helper.service_slug,
                ],
                "manufacturer": "weirdTangent",
                "sw_version": self.config["version"],
            },
            "origin": {
                "name": self.service_name,
                "sw_version": self.config["version"],
            },
            "qos": self.qos,
            "cmps": {
                "server": {
                    "p": "binary_sensor",
                    "name": self.service_name,
                    "uniq_id": self.mqtt_helper.svc_unique_id("server"),
                    "stat_t": self.mqtt_helper.stat_t(device_id, "service", "server"),
                    "payload_on": "online",
                    "payload_off": "offline",
                    "device_class": "connectivity",
                    "entity_category": "diagnostic",
                    "icon": "mdi:server",
                },
                "devices": {
                    "p": "sensor",
                    "name": "Devices",
                    "uniq_id": self.mqtt_helper.svc_unique_id("devices"),
                    "stat_t": self.mqtt_helper.stat_t(device_id, "service", "devices"),
                    "entity_category": "diagnostic",
                    "icon": "mdi:lightbulb-group",
                },
                "refresh_interval": {
                    "p": "number",
                    "name": "Refresh Interval",
                    "uniq_id": f"{self.mqtt_helper.service_slug}_refresh_interval",
                    "stat_t": self.mqtt_helper.stat_t("service", "service", "refresh_interval"),
                    "cmd_t": self.mqtt_helper.cmd_t("service", "refresh_interval"),
                    "unit_of_measurement": "s",
                    "min": 1,
                    "max": 3600,
                    "step": 1,
                    "icon": "mdi:timer-refresh",
                    "mode": "box",
                },
                "rescan_interval": {
                    "p": "number",
                    "name": "Rescan Interval",
                    "uniq_id": f"{self.mqtt_helper.service_slug}_rescan_interval",
                    "stat_t": self.mqtt_helper.stat_t("service", "service", "rescan_interval"),
                    "cmd_t": self.mqtt_helper.cmd_t("service", "rescan_interval"),
                    "unit_of_measurement": "s",
                    "min": 1,
                    "max": 3600,
                    "step": 1,
                    "icon": "mdi:timer-refresh",
                    "mode": "box",
                },
            },
        }

        topic = self.mqtt_helper.disc_t("device", device_id)
        await asyncio.to_thread(self.mqtt_helper.safe_publish, topic, json.dumps(device), retain=True)
        self.set_discovered(device_id)

        self.logger.debug(f"discovery published for {self.service} ({self.mqtt_helper.service_slug})")

    async def publish_service_availability(self: Rgbw2Mqtt, status: str = "online") -> None:
        await asyncio.to_thread(self.mqtt_helper.safe_publish, self.mqtt_helper.avty_t("service"), status)

    async def publish_service_state(self: Rgbw2Mqtt) -> None:
        service = {
            "server": "online",
            "devices": len(self.devices),
            "refresh_interval": self.device_interval,
            "rescan_interval": self.device_list_interval,
        }

        for key, value in service.items():
            await asyncio.to_thread(
                self.mqtt_helper.safe_publish,
                self.mqtt_helper.stat_t("service", "service", key),
                value,
            )

    # Devices -------------------------------------------------------------------------------------

    async def publish_device_discovery(self: Rgbw2Mqtt, device_id: str) -> None:
        topic = self.mqtt_helper.disc_t("device", device_id)
        payload = json.dumps(self.build_device_payload(device_id))

        await asyncio.to_thread(self.mqtt_helper.safe_publish, topic, payload, retain=True)
        self.set_discovered(device_id)

    async def publish_device_availability(self: Rgbw2Mqtt, device_id: str, online: bool = True) -> None:
        topic = self.mqtt_helper.avty_t(device_id)
        payload = "online" if online else "offline"

        await asyncio.to_thread(self.mqtt_helper.safe_publish, topic, payload, retain=True)

    async def publish_device_state(self: Rgbw2Mqtt, device_id: str) -> None:
        for ability in self.devices[device_id].abilities:
            for name in (ON, BRIGHTNESS, HUE):
                if name in ability.service.characteristics:
                    await self.publish_characteristic(device_id, ability, name)

    async def publish_characteristic(self: Rgbw2Mqtt, device_id: str, ability: Ability, name: str) -> None:
        service = ability.service
        item = STATE_TOPICS[name]
        value: Any

        match item:
            case "state":
                on = service.get_characteristic(ON).value
                value = None if on is None else ("ON" if on else "OFF")
            case "brightness":
                value = service.get_characteristic(BRIGHTNESS).value
            case "hs":
                hue = service.get_characteristic(HUE).value
                saturation = service.get_characteristic(SATURATION).value
                value = None if hue is None or saturation is None else f"{hue},{saturation}"

        # never pushed yet, nothing to report
        if value is None:
            return

        topic = self.mqtt_helper.stat_t(device_id, ability.key, item)
        await asyncio.to_thread(self.mqtt_helper.safe_publish, topic, value, retain=True)

    def bind_ability(self: Rgbw2Mqtt, device_id: str, ability: Ability) -> None:
        """Mirror every characteristic push of this ability onto its MQTT state topic."""

        def listener(characteristic: Characteristic, value: Any) -> None:
            self.characteristic_changed(device_id, ability, characteristic, value)

        for characteristic in ability.service.characteristics.values():
            characteristic.subscribe(listener)

    def characteristic_changed(self: Rgbw2Mqtt, device_id: str, ability: Ability, characteristic: Characteristic, value: Any) -> None:
        self.logger.debug(f"{self.get_device_name(device_id)} {ability.name} {characteristic.name} => {value}")
        task = self.loop.create_task(self.publish_characteristic(device_id, ability, characteristic.name))
        self.pending_publishes.add(task)
        task.add_done_callback(self.pending_publishes.discard)
