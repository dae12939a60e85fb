# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import aiohttp
from aiohttp import ClientError
import itertools
from json_logging import get_logger

from typing import Any, cast


class DeviceRpcError(RuntimeError):
    """Raised when a Shelly device does not answer an RPC call successfully."""

    def __init__(self, host: str, method: str, message: str, code: int | None = None) -> None:
        super().__init__(f"{method} on {host} failed: {message}")
        self.host = host
        self.method = method
        self.code = code


class ShellyRpcClient:
    """JSON-RPC over HTTP for Shelly Gen2+ devices (POST http://<host>/rpc)."""

    def __init__(self, session: aiohttp.ClientSession, host: str) -> None:
        self.session = session
        self.host = host
        self.url = f"http://{host}/rpc"
        self.logger = get_logger(__name__)
        self._ids = itertools.count(1)

    async def call(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"id": next(self._ids), "method": method}
        if params:
            body["params"] = params

        self.logger.debug(f"rpc {method} to {self.host}: {params}")

        try:
            async with self.session.post(self.url, json=body) as r:
                if r.status != 200:
                    raise DeviceRpcError(self.host, method, f"http status {r.status}")

                data = await r.json()

        except ClientError as err:
            raise DeviceRpcError(self.host, method, f"request error: {err}") from err
        except TimeoutError as err:
            raise DeviceRpcError(self.host, method, "timed out") from err

        if not isinstance(data, dict):
            raise DeviceRpcError(self.host, method, f"unexpected response type: {type(data).__name__}")

        if "error" in data:
            error = data["error"] or {}
            raise DeviceRpcError(self.host, method, str(error.get("message", "unknown error")), error.get("code"))

        return cast(dict[str, Any], data.get("result") or {})

    async def get_device_info(self) -> dict[str, Any]:
        return await self.call("Shelly.GetDeviceInfo")

    async def get_status(self) -> dict[str, Any]:
        return await self.call("Shelly.GetStatus")
