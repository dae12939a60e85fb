# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rgbw2mqtt.interface import Rgbw2MqttProtocol as Rgbw2Mqtt


class RefreshMixin:
    async def refresh_all_devices(self: Rgbw2Mqtt) -> None:
        # don't let this kick off until we are done with our list
        while not self.discovery_complete and self.running:
            await asyncio.sleep(1)

        if not self.devices:
            return

        self.logger.debug(f"polling {len(self.devices)} Shelly device(s) (every {self.device_interval} sec)")

        device_ids = list(self.devices)
        tasks = [self.refresh_device_states(device_id) for device_id in device_ids]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for device_id, result in zip(device_ids, results):
            if isinstance(result, Exception):
                self.logger.error(f"error refreshing {self.get_device_name(device_id)}", exc_info=result)
