# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import aiohttp
import argparse
import asyncio
from datetime import datetime
from json_logging import get_logger
import logging
from mqtt_helper import MqttHelper
from paho.mqtt.client import Client
from types import TracebackType

from typing import TYPE_CHECKING, Any, Self, cast

from rgbw2mqtt.mixins.mqtt import MqttError

if TYPE_CHECKING:
    from rgbw2mqtt.device.delegate import DeviceDelegate
    from rgbw2mqtt.interface import Rgbw2MqttProtocol as Rgbw2Mqtt


class Base:
    def __init__(self: Rgbw2Mqtt, args: argparse.Namespace | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)

        self.loop = asyncio.get_running_loop()

        self.session: aiohttp.ClientSession

        self.args = args
        self.logger = get_logger(__name__)

        # now load self.config right away
        cfg_arg = getattr(args, "config", None)
        self.config = self.load_config(cfg_arg)

        if not self.config["mqtt"] or not self.config["shelly"]:
            raise ValueError("config was not loaded")

        if self.config.get("debug"):
            self.logger.setLevel(logging.DEBUG)

        self.mqtt_config = self.config["mqtt"]

        self.service = self.mqtt_config["prefix"]
        self.service_name = f"{self.service} service"
        self.qos = self.mqtt_config["qos"]

        self.mqtt_helper = MqttHelper(self.service, default_qos=self.qos, default_retain=True)

        self.running = False
        self.discovery_complete = False

        self.devices: dict[str, DeviceDelegate] = {}
        self.states: dict[str, Any] = {}
        self.pending_publishes: set[asyncio.Task] = set()

        self.mqttc: Client
        self.mqtt_connect_time: datetime
        self.client_id = self.mqtt_helper.client_id()

        self.hosts = self.config["shelly"]["hosts"]
        self.device_interval = self.config["shelly"].get("device_interval", 30)
        self.device_list_interval = self.config["shelly"].get("device_list_interval", 300)
        self.request_timeout = self.config["shelly"].get("timeout", 10)

    async def __aenter__(self: Self) -> Rgbw2Mqtt:
        super_enter = getattr(super(), "__enter__", None)
        if callable(super_enter):
            super_enter()

        timeout = aiohttp.ClientTimeout(total=cast(Any, self).request_timeout)
        cast(Any, self).session = aiohttp.ClientSession(timeout=timeout)

        try:
            await cast(Any, self).mqttc_create()
        except Exception as err:
            await cast(Any, self).session.close()
            raise MqttError(f"could not connect to MQTT broker: {err}") from err
        cast(Any, self).running = True

        return cast("Rgbw2Mqtt", self)

    async def __aexit__(self: Self, exc_type: BaseException | None, exc_val: BaseException | None, exc_tb: TracebackType) -> None:
        super_exit = getattr(super(), "__exit__", None)
        if callable(super_exit):
            super_exit(exc_type, exc_val, exc_tb)

        service = cast(Any, self)
        service.running = False

        for delegate in service.devices.values():
            delegate.detach()

        if service.session and not service.session.closed:
            await service.session.close()

        if getattr(service, "mqttc", None) is not None:
            try:
                await service.publish_service_availability("offline")
                service.mqttc.loop_stop()
            except Exception as e:
                service.logger.debug(f"mqtt loop_stop failed: {e}")

            if service.mqttc.is_connected():
                try:
                    service.mqttc.disconnect()
                    service.logger.info("disconnected from MQTT broker")
                except Exception as e:
                    service.logger.warning(f"error during MQTT disconnect: {e}")

        service.logger.info("exiting gracefully")
