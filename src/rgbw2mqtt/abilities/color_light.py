# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from dataclasses import dataclass, field
from json_logging import get_logger

from typing import Any

from rgbw2mqtt.characteristics import BRIGHTNESS, HUE, ON, SATURATION, LightbulbService, ServiceCommunicationError
from rgbw2mqtt.color import ColorMode, hsv_to_rgb, rgb_to_hsv
from rgbw2mqtt.interface import RgbLikeComponent, RgbTuple


@dataclass
class ColorLightState:
    """Last known values, owned and mutated only by its ColorLightAbility.

    hue/saturation are the HSV projection of rgb; brightness tracks the device's
    own brightness field, or the HSV value when the device has none.
    """

    hue: int = 0
    saturation: int = 0
    brightness: int = 100
    rgb: list[int] = field(default_factory=lambda: [255, 255, 255])
    white: int | None = None


class ColorLightAbility:
    """Keeps an rgb/rgbw component and a Lightbulb service in sync.

    Platform sets on the characteristics become partial device commands.
    Device change events become characteristic pushes and never issue a
    command, so a device echoing our own command does not loop back.
    """

    def __init__(self, component: RgbLikeComponent, mode: ColorMode, service: LightbulbService | None = None, single: bool = False) -> None:
        self.component = component
        self.mode = ColorMode(mode)
        self.name = "Light" if single else f"Light {component.id + 1}"
        self.key = f"color-light-{component.id}"
        self.service = service or LightbulbService(self.name, self.key)
        self.state = ColorLightState()
        self.logger = get_logger(__name__)

    def initialize(self) -> None:
        rgb = self.component.rgb if isinstance(self.component.rgb, (list, tuple)) else None
        if rgb:
            self.state.rgb = list(rgb)
            hsv = rgb_to_hsv(rgb)
            self.state.hue = hsv.h
            self.state.saturation = hsv.s
            if self.component.brightness is None:
                self.state.brightness = hsv.v

        if self.component.brightness is not None:
            self.state.brightness = self.component.brightness

        if self.component.white is not None:
            self.state.white = self.component.white

        self.service.set_characteristic(ON, self.component.output)
        self.service.set_characteristic(BRIGHTNESS, self.state.brightness)
        self.service.set_characteristic(HUE, self.state.hue)
        self.service.set_characteristic(SATURATION, self.state.saturation)

        self.service.get_characteristic(ON).on_set(self.on_set_handler)
        self.service.get_characteristic(BRIGHTNESS).on_set(self.brightness_set_handler)
        self.service.get_characteristic(HUE).on_set(self.hue_set_handler)
        self.service.get_characteristic(SATURATION).on_set(self.saturation_set_handler)

        self.component.on("change:output", self.output_change_handler)
        self.component.on("change:brightness", self.brightness_change_handler)
        self.component.on("change:rgb", self.rgb_change_handler)
        if self.mode == ColorMode.RGBW:
            self.component.on("change:white", self.white_change_handler)

    def detach(self) -> None:
        self.component.off("change:output", self.output_change_handler)
        self.component.off("change:brightness", self.brightness_change_handler)
        self.component.off("change:rgb", self.rgb_change_handler)
        self.component.off("change:white", self.white_change_handler)

    # Platform sets -------------------------------------------------------------------------------

    async def on_set_handler(self, value: Any) -> None:
        if value == self.component.output:
            return

        try:
            await self.component.set(on=bool(value))
        except Exception as err:
            self.logger.error(f"failed to set color light {self.key} on {self.component.key}: {err}")
            raise ServiceCommunicationError(ON, str(err)) from err

    async def brightness_set_handler(self, value: Any) -> None:
        if value == self.component.brightness:
            return

        # optimistic, kept even if the command below fails
        self.state.brightness = int(value)

        try:
            await self.component.set(brightness=int(value))
        except Exception as err:
            self.logger.error(f"failed to set color light {self.key} brightness on {self.component.key}: {err}")
            raise ServiceCommunicationError(BRIGHTNESS, str(err)) from err

    async def hue_set_handler(self, value: Any) -> None:
        self.state.hue = int(value)
        await self.set_color_from_hsv(HUE)

    async def saturation_set_handler(self, value: Any) -> None:
        self.state.saturation = int(value)
        await self.set_color_from_hsv(SATURATION)

    async def set_color_from_hsv(self, characteristic: str = HUE) -> None:
        # value is pinned to 100, brightness is its own channel and is not sent
        rgb = hsv_to_rgb(self.state.hue, self.state.saturation, 100)
        self.state.rgb = rgb
        white = self.state.white if self.mode == ColorMode.RGBW else None

        try:
            await self.component.set(rgb=rgb, white=white)
        except Exception as err:
            self.logger.error(f"failed to set color light {self.key} color on {self.component.key}: {err}")
            raise ServiceCommunicationError(characteristic, str(err)) from err

    # Device changes ------------------------------------------------------------------------------

    def output_change_handler(self, value: Any) -> None:
        self.service.get_characteristic(ON).update_value(bool(value))

    def brightness_change_handler(self, value: Any) -> None:
        self.state.brightness = value
        self.service.get_characteristic(BRIGHTNESS).update_value(value)

    def rgb_change_handler(self, value: Any) -> None:
        rgb: RgbTuple = value
        self.state.rgb = list(rgb)

        hsv = rgb_to_hsv(rgb)
        self.state.hue = hsv.h
        self.state.saturation = hsv.s

        self.service.get_characteristic(HUE).update_value(self.state.hue)
        self.service.get_characteristic(SATURATION).update_value(self.state.saturation)

        if self.component.brightness is None:
            self.state.brightness = hsv.v
            self.service.get_characteristic(BRIGHTNESS).update_value(self.state.brightness)

    def white_change_handler(self, value: Any) -> None:
        self.state.white = value
