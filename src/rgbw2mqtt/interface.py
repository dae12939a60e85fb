# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import argparse
import asyncio
from datetime import datetime
import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    import aiohttp
    from mqtt_helper import MqttHelper
    from paho.mqtt.client import Client, MQTTMessage

    from rgbw2mqtt.characteristics import Characteristic, LightbulbService
    from rgbw2mqtt.device.delegate import DeviceDelegate

RgbTuple = list[int]


class LightLikeComponent(Protocol):
    """Device side of a light output: reported fields, partial set, change events."""

    id: int
    key: str
    output: bool
    brightness: int | None

    async def set(
        self,
        on: bool | None = None,
        brightness: int | None = None,
        rgb: RgbTuple | None = None,
        white: int | None = None,
    ) -> None: ...

    def on(self, event: str, handler: Callable[[Any], None]) -> Callable[[], None]: ...

    def off(self, event: str, handler: Callable[[Any], None]) -> None: ...


class RgbLikeComponent(LightLikeComponent, Protocol):
    rgb: RgbTuple | None
    white: int | None


@runtime_checkable
class Ability(Protocol):
    """Something that binds one device component to one platform service."""

    name: str
    key: str
    service: LightbulbService

    def initialize(self) -> None: ...

    def detach(self) -> None: ...


class Rgbw2MqttProtocol(Protocol):
    """Attributes and methods the service mixins rely on from each other."""

    loop: asyncio.AbstractEventLoop
    session: aiohttp.ClientSession
    args: argparse.Namespace | None
    logger: logging.Logger
    config: dict[str, Any]
    mqtt_config: dict[str, Any]
    service: str
    service_name: str
    qos: int
    mqtt_helper: MqttHelper
    mqttc: Client
    mqtt_connect_time: datetime
    client_id: str
    running: bool
    discovery_complete: bool
    devices: dict[str, DeviceDelegate]
    states: dict[str, Any]
    hosts: list[str]
    device_interval: int
    device_list_interval: int
    request_timeout: int
    pending_publishes: set[asyncio.Task]

    # helpers
    def load_config(self, config_arg: Any | None = None) -> dict[str, Any]: ...
    def read_file(self, file_name: str) -> str: ...
    def upsert_state(self, device_id: str, **kwargs: Any) -> bool: ...
    def get_device_name(self, device_id: str) -> str: ...
    def get_ability(self, device_id: str, ability_key: str) -> Ability | None: ...
    def parse_hs(self, payload: Any) -> tuple[float, float]: ...
    def mark_ready(self) -> None: ...
    def heartbeat_ready(self) -> None: ...
    def _handle_signal(self, signum: int, frame: Any = None) -> None: ...
    async def send_command(self, device_id: str, ability_key: str, attribute: str, payload: Any) -> None: ...
    async def handle_service_message(self, handler: str, message: Any) -> None: ...
    async def rediscover_all(self) -> None: ...

    # publish
    async def publish_service_discovery(self) -> None: ...
    async def publish_service_availability(self, status: str = "online") -> None: ...
    async def publish_service_state(self) -> None: ...
    async def publish_device_discovery(self, device_id: str) -> None: ...
    async def publish_device_availability(self, device_id: str, online: bool = True) -> None: ...
    async def publish_device_state(self, device_id: str) -> None: ...
    async def publish_characteristic(self, device_id: str, ability: Ability, name: str) -> None: ...
    def bind_ability(self, device_id: str, ability: Ability) -> None: ...
    def characteristic_changed(self, device_id: str, ability: Ability, characteristic: Characteristic, value: Any) -> None: ...

    # shelly
    async def refresh_device_list(self) -> None: ...
    async def build_device(self, host: str) -> str: ...
    def build_device_payload(self, device_id: str) -> dict[str, Any]: ...
    def build_light_component(self, device_id: str, ability: Ability) -> dict[str, Any]: ...
    async def refresh_device_states(self, device_id: str) -> None: ...

    # refresh / loops
    async def refresh_all_devices(self) -> None: ...
    async def device_list_loop(self) -> None: ...
    async def device_loop(self) -> None: ...
    async def heartbeat(self) -> None: ...
    async def main_loop(self) -> None: ...

    # mqtt
    def mqtt_subscription_topics(self) -> list[str]: ...
    async def mqtt_on_message(self, client: Client, userdata: Any, msg: MQTTMessage) -> None: ...
    async def handle_homeassistant_message(self, payload: str) -> None: ...
    async def handle_device_topic(self, components: list[str], payload: Any) -> None: ...
    def _parse_device_topic(self, components: list[str]) -> list[str] | None: ...
    def is_discovered(self, device_id: str) -> bool: ...
    def set_discovered(self, device_id: str) -> None: ...
    async def mqttc_create(self) -> None: ...
