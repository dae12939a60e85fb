# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from typing import Any

from rgbw2mqtt.device.events import EventEmitter
from rgbw2mqtt.device.rpc import ShellyRpcClient

RgbTuple = list[int]

# Set params mirrored into reported fields once the device accepts them.
# rgb is left to the next status: its HSV projection drops hue at zero saturation,
# which would clobber the hue half of an in-flight hs command.
ECHOED_PARAMS = {"on": "output", "brightness": "brightness", "white": "white"}


class ShellyComponent(EventEmitter):
    """A light output of a Shelly device, mirroring its last reported status.

    Fields the device has never reported stay ``None`` so abilities can tell a
    brightness-less fixture from one that reports brightness 0.
    """

    component_type = ""
    rpc_namespace = ""
    fields: tuple[str, ...] = ("output", "brightness")

    def __init__(self, rpc: ShellyRpcClient, id: int, status: dict[str, Any] | None = None) -> None:
        super().__init__()
        self.rpc = rpc
        self.id = id
        self.key = f"{self.component_type}:{id}"

        self.output: bool = False
        self.brightness: int | None = None
        self.rgb: RgbTuple | None = None
        self.white: int | None = None

        if status:
            self.update(status, notify=False)

    def update(self, status: dict[str, Any], notify: bool = True) -> list[str]:
        """Store newly reported fields and emit ``change:<field>`` for each that changed."""
        changed: list[str] = []
        for field in self.fields:
            if field not in status:
                continue
            value = status[field]
            if field == "rgb" and value is not None:
                value = [int(channel) for channel in value]
            if getattr(self, field) == value:
                continue
            setattr(self, field, value)
            changed.append(field)

        if notify:
            for field in changed:
                self.emit(f"change:{field}", getattr(self, field))

        return changed

    def build_params(
        self,
        on: bool | None = None,
        brightness: int | None = None,
        rgb: RgbTuple | None = None,
        white: int | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"id": self.id}
        if on is not None:
            params["on"] = bool(on)
        if brightness is not None:
            params["brightness"] = int(brightness)
        return params

    async def set(
        self,
        on: bool | None = None,
        brightness: int | None = None,
        rgb: RgbTuple | None = None,
        white: int | None = None,
    ) -> None:
        """Send a partial ``*.Set`` and mirror the accepted fields as if the device reported them."""
        params = self.build_params(on, brightness, rgb, white)
        await self.rpc.call(f"{self.rpc_namespace}.Set", params)
        self.update({field: params[param] for param, field in ECHOED_PARAMS.items() if param in params})


class LightComponent(ShellyComponent):
    component_type = "light"
    rpc_namespace = "Light"


class RgbComponent(ShellyComponent):
    component_type = "rgb"
    rpc_namespace = "RGB"
    fields = ("output", "brightness", "rgb")

    def build_params(
        self,
        on: bool | None = None,
        brightness: int | None = None,
        rgb: RgbTuple | None = None,
        white: int | None = None,
    ) -> dict[str, Any]:
        params = super().build_params(on, brightness)
        if rgb is not None:
            params["rgb"] = [int(channel) for channel in rgb]
        return params


class RgbwComponent(RgbComponent):
    component_type = "rgbw"
    rpc_namespace = "RGBW"
    fields = ("output", "brightness", "rgb", "white")

    def build_params(
        self,
        on: bool | None = None,
        brightness: int | None = None,
        rgb: RgbTuple | None = None,
        white: int | None = None,
    ) -> dict[str, Any]:
        params = super().build_params(on, brightness, rgb)
        if white is not None:
            params["white"] = int(white)
        return params


COMPONENT_TYPES: dict[str, type[ShellyComponent]] = {
    LightComponent.component_type: LightComponent,
    RgbComponent.component_type: RgbComponent,
    RgbwComponent.component_type: RgbwComponent,
}


def parse_component_key(key: str) -> tuple[str, int] | None:
    """Split a status key such as ``rgbw:0`` into ``("rgbw", 0)``."""
    component_type, sep, index = key.partition(":")
    if not sep or component_type not in COMPONENT_TYPES or not index.isdigit():
        return None
    return component_type, int(index)
