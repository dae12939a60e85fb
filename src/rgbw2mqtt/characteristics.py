# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from typing import Any, Awaitable, Callable

from rgbw2mqtt.color import round_half_up

SetHandler = Callable[[Any], Awaitable[None]]
ValueListener = Callable[["Characteristic", Any], None]

ON = "on"
BRIGHTNESS = "brightness"
HUE = "hue"
SATURATION = "saturation"


class ServiceCommunicationError(Exception):
    """The accessory could not be reached while applying a characteristic set."""

    def __init__(self, characteristic: str, message: str = "") -> None:
        super().__init__(f"service communication failure setting {characteristic}{': ' + message if message else ''}")
        self.characteristic = characteristic


class Characteristic:
    """A typed property of a light accessory.

    Values arrive two ways: ``handle_set`` for requests coming from the platform
    (they run the registered set handler), and ``update_value`` for pushes that
    mirror device-originated changes (they never run the set handler).
    """

    def __init__(self, name: str, min_value: int | None = None, max_value: int | None = None, wraps: bool = False) -> None:
        self.name = name
        self.min_value = min_value
        self.max_value = max_value
        self.wraps = wraps
        self.value: Any = None
        self._set_handler: SetHandler | None = None
        self._listeners: list[ValueListener] = []

    def on_set(self, handler: SetHandler) -> "Characteristic":
        self._set_handler = handler
        return self

    def subscribe(self, listener: ValueListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ValueListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def coerce(self, value: Any) -> Any:
        if self.min_value is None and self.max_value is None:
            return bool(value)
        number = round_half_up(float(value))
        if self.wraps and self.min_value is not None and self.max_value is not None:
            # angles: 360 is 0 again
            return self.min_value + (number - self.min_value) % (self.max_value - self.min_value + 1)
        if self.min_value is not None:
            number = max(self.min_value, number)
        if self.max_value is not None:
            number = min(self.max_value, number)
        return number

    def update_value(self, value: Any) -> None:
        self.value = self.coerce(value)
        self.notify()

    async def handle_set(self, value: Any) -> None:
        value = self.coerce(value)
        if self._set_handler is not None:
            await self._set_handler(value)
        self.value = value
        self.notify()

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener(self, self.value)


class LightbulbService:
    """Service descriptor grouping the light characteristics of one ability."""

    service_type = "lightbulb"

    def __init__(self, name: str, subtype: str, color: bool = True) -> None:
        self.name = name
        self.subtype = subtype
        self.color = color
        self.characteristics: dict[str, Characteristic] = {
            ON: Characteristic(ON),
            BRIGHTNESS: Characteristic(BRIGHTNESS, 0, 100),
        }
        if color:
            self.characteristics[HUE] = Characteristic(HUE, 0, 359, wraps=True)
            self.characteristics[SATURATION] = Characteristic(SATURATION, 0, 100)

    def get_characteristic(self, name: str) -> Characteristic:
        return self.characteristics[name]

    def set_characteristic(self, name: str, value: Any) -> "LightbulbService":
        self.characteristics[name].update_value(value)
        return self
