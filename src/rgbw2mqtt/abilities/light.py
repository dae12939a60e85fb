# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from json_logging import get_logger

from typing import Any

from rgbw2mqtt.characteristics import BRIGHTNESS, ON, LightbulbService, ServiceCommunicationError
from rgbw2mqtt.interface import LightLikeComponent


class LightAbility:
    """On/brightness light for a single white channel (``light:N``)."""

    def __init__(self, component: LightLikeComponent, service: LightbulbService | None = None, single: bool = False) -> None:
        self.component = component
        self.name = "Light" if single else f"Light {component.id + 1}"
        self.key = f"light-{component.id}"
        self.service = service or LightbulbService(self.name, self.key, color=False)
        self.logger = get_logger(__name__)

    def initialize(self) -> None:
        self.service.set_characteristic(ON, self.component.output)
        if self.component.brightness is not None:
            self.service.set_characteristic(BRIGHTNESS, self.component.brightness)

        self.service.get_characteristic(ON).on_set(self.on_set_handler)
        self.service.get_characteristic(BRIGHTNESS).on_set(self.brightness_set_handler)

        self.component.on("change:output", self.output_change_handler)
        self.component.on("change:brightness", self.brightness_change_handler)

    def detach(self) -> None:
        self.component.off("change:output", self.output_change_handler)
        self.component.off("change:brightness", self.brightness_change_handler)

    async def on_set_handler(self, value: Any) -> None:
        if value == self.component.output:
            return

        try:
            await self.component.set(on=bool(value))
        except Exception as err:
            self.logger.error(f"failed to set light {self.key} on {self.component.key}: {err}")
            raise ServiceCommunicationError(ON, str(err)) from err

    async def brightness_set_handler(self, value: Any) -> None:
        if value == self.component.brightness:
            return

        try:
            await self.component.set(brightness=int(value))
        except Exception as err:
            self.logger.error(f"failed to set light {self.key} brightness on {self.component.key}: {err}")
            raise ServiceCommunicationError(BRIGHTNESS, str(err)) from err

    def output_change_handler(self, value: Any) -> None:
        self.service.get_characteristic(ON).update_value(bool(value))

    def brightness_change_handler(self, value: Any) -> None:
        self.service.get_characteristic(BRIGHTNESS).update_value(value)
