# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from mqtt_helper import BaseMqttMixin
from paho.mqtt.client import Client, MQTTMessage

if TYPE_CHECKING:
    from rgbw2mqtt.interface import Rgbw2MqttProtocol as Rgbw2Mqtt


class MqttError(RuntimeError):
    """Raised when the MQTT broker cannot be reached or used."""

    pass


class MqttMixin(BaseMqttMixin):
    def mqtt_subscription_topics(self: Rgbw2Mqtt) -> list[str]:
        return [
            "homeassistant/status",
            f"{self.mqtt_helper.service_slug}/service/+/set",
            f"{self.mqtt_helper.service_slug}/+/+/+/set",
        ]

    async def mqtt_on_message(self: Rgbw2Mqtt, client: Client, userdata: Any, msg: MQTTMessage) -> None:
        topic = msg.topic
        components = topic.split("/")

        try:
            payload = json.loads(msg.payload)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError, ValueError):
            try:
                payload = msg.payload.decode("utf-8")
            except Exception as err:
                self.logger.warning(f"failed to decode MQTT payload on {topic}: {err}")
                return None

        if components[0] == self.mqtt_config["discovery_prefix"]:
            return await self.handle_homeassistant_message(payload)

        if components[0] == self.mqtt_helper.service_slug and components[1] == "service":
            return await self.handle_service_message(components[2], payload)

        if components[0] == self.mqtt_helper.service_slug:
            return await self.handle_device_topic(components, payload)

        self.logger.debug(f"did not process message on MQTT topic: {topic} with {payload}")

    async def handle_homeassistant_message(self: Rgbw2Mqtt, payload: str) -> None:
        if payload == "online":
            await self.rediscover_all()
            self.logger.info("home assistant came online, rediscovering devices")

    async def handle_device_topic(self: Rgbw2Mqtt, components: list[str], payload: Any) -> None:
        parsed = self._parse_device_topic(components)
        if not parsed:
            return

        (vendor, device_id, ability_key, attribute) = parsed
        if not vendor or not vendor.startswith(self.mqtt_helper.service_slug):
            self.logger.error(f"ignoring non-Shelly device command, got vendor {vendor}")
            return
        if not device_id or not ability_key or not attribute:
            self.logger.error(f"failed to parse device_id, light and/or attribute from mqtt topic components: {components}")
            return
        if not self.devices.get(device_id, None):
            self.logger.warning(f"got MQTT message for unknown device: {device_id}")
            return

        self.logger.info(f"got message for {device_id} {ability_key}: {attribute} => {payload}")
        await self.send_command(device_id, ability_key, attribute, payload)

    def _parse_device_topic(self: Rgbw2Mqtt, components: list[str]) -> list[str] | None:
        """Extract (vendor, device_id, light key, attribute) from a command topic."""
        try:
            if components[-1] != "set" or len(components) != 5:
                return None

            # Example topics
            # rgbw2mqtt/rgbw2mqtt_shellyplusrgbwpm-a0a3b3c4d5e6/color-light-0/on/set
            # rgbw2mqtt/rgbw2mqtt_shellyplusrgbwpm-a0a3b3c4d5e6/color-light-0/hs/set
            # rgbw2mqtt/rgbw2mqtt_shellyplusrgbwpm-a0a3b3c4d5e6/light-2/brightness/set

            vendor, device_id = components[1].split("_", 1)
            return [vendor, device_id, components[2], components[3]]

        except Exception as e:
            self.logger.warning(f"malformed device topic: {components} ({e})")
            return None

    def is_discovered(self: Rgbw2Mqtt, device_id: str) -> bool:
        return bool(self.states.get(device_id, {}).get("internal", {}).get("discovered", False))

    def set_discovered(self: Rgbw2Mqtt, device_id: str) -> None:
        self.upsert_state(device_id, internal={"discovered": True})
