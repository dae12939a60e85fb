# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from json_logging import get_logger

from typing import Any, Callable, ClassVar

from rgbw2mqtt.abilities.color_light import ColorLightAbility
from rgbw2mqtt.abilities.light import LightAbility
from rgbw2mqtt.color import ColorMode
from rgbw2mqtt.device.components import COMPONENT_TYPES, ShellyComponent, parse_component_key
from rgbw2mqtt.device.rpc import ShellyRpcClient
from rgbw2mqtt.interface import Ability

MAX_LIGHT_CHANNELS = 4


class DeviceDelegate:
    """Turns a Shelly device's status into components and the abilities that drive them."""

    registry: ClassVar[dict[str, type["DeviceDelegate"]]] = {}

    def __init__(self, rpc: ShellyRpcClient, device_info: dict[str, Any], status: dict[str, Any]) -> None:
        self.rpc = rpc
        self.device_info = device_info
        self.device_id: str = device_info.get("id") or rpc.host
        self.model: str = device_info.get("model", "")
        self.logger = get_logger(__name__)

        self.components: dict[str, ShellyComponent] = {}
        for key, value in status.items():
            parsed = parse_component_key(key)
            if not parsed or not isinstance(value, dict):
                continue
            component_type, index = parsed
            self.components[key] = COMPONENT_TYPES[component_type](rpc, index, value)

        self.abilities: list[Ability] = []
        self.setup()

    @classmethod
    def register_delegate(cls, *models: str) -> Callable[[type["DeviceDelegate"]], type["DeviceDelegate"]]:
        def decorator(delegate: type["DeviceDelegate"]) -> type["DeviceDelegate"]:
            for model in models:
                cls.registry[model] = delegate
            return delegate

        return decorator

    @classmethod
    def for_device(cls, rpc: ShellyRpcClient, device_info: dict[str, Any], status: dict[str, Any]) -> "DeviceDelegate":
        delegate = cls.registry.get(device_info.get("model", ""), DeviceDelegate)
        return delegate(rpc, device_info, status)

    def add_color_light(self, component: ShellyComponent, mode: ColorMode, single: bool = False) -> ColorLightAbility:
        ability = ColorLightAbility(component, mode, single=single)
        self.abilities.append(ability)
        return ability

    def add_light(self, component: ShellyComponent, single: bool = False) -> LightAbility:
        ability = LightAbility(component, single=single)
        self.abilities.append(ability)
        return ability

    def setup(self) -> None:
        for component in self.components.values():
            if component.component_type == "rgbw":
                self.add_color_light(component, ColorMode.RGBW)
            elif component.component_type == "rgb":
                self.add_color_light(component, ColorMode.RGB)
            else:
                self.add_light(component)

        if not self.abilities:
            self.logger.warning(f"no light outputs found on {self.device_id} ({self.model or 'unknown model'})")

    def initialize(self) -> None:
        for ability in self.abilities:
            ability.initialize()

    def detach(self) -> None:
        for ability in self.abilities:
            ability.detach()

    def apply_status(self, status: dict[str, Any]) -> list[str]:
        """Feed a Shelly.GetStatus result to the components; returns the keys that changed."""
        changed: list[str] = []
        for key, component in self.components.items():
            component_status = status.get(key)
            if isinstance(component_status, dict) and component.update(component_status):
                changed.append(key)
        return changed


@DeviceDelegate.register_delegate("SNDC-0D4P10WW")
class ShellyPlusRgbwPmDelegate(DeviceDelegate):
    """Shelly Plus RGBW PM: one rgbw or rgb output, or up to four white channels.

    The device profile decides which components exist, only one family is ever
    exposed.
    """

    def setup(self) -> None:
        if "rgbw:0" in self.components:
            self.add_color_light(self.components["rgbw:0"], ColorMode.RGBW, single=True)
            return

        if "rgb:0" in self.components:
            self.add_color_light(self.components["rgb:0"], ColorMode.RGB, single=True)
            return

        lights = [self.components[f"light:{index}"] for index in range(MAX_LIGHT_CHANNELS) if f"light:{index}" in self.components]
        if len(lights) == 1:
            self.add_light(lights[0], single=True)
            return

        for light in lights:
            self.add_light(light)
