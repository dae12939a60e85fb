# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import copy
from deepmerge.merger import Merger
from importlib.metadata import PackageNotFoundError, version as pkg_version
import logging
import os
import pathlib
import signal
import threading
from types import FrameType
import yaml

from typing import TYPE_CHECKING, Any, cast

from rgbw2mqtt.characteristics import BRIGHTNESS, HUE, ON, SATURATION, ServiceCommunicationError

if TYPE_CHECKING:
    from rgbw2mqtt.interface import Ability
    from rgbw2mqtt.interface import Rgbw2MqttProtocol as Rgbw2Mqtt

READY_FILE = os.getenv("READY_FILE", "/tmp/rgbw2mqtt.ready")


class ConfigError(ValueError):
    """Raised when the configuration file is invalid."""

    pass


class HelpersMixin:
    async def send_command(self: Rgbw2Mqtt, device_id: str, ability_key: str, attribute: str, payload: Any) -> None:
        """Apply an MQTT command as a platform set on the matching characteristic(s).

        An ``hs`` command carries hue and saturation together but is applied as
        two separate sets, each of which sends its own colour command.
        """
        ability = self.get_ability(device_id, ability_key)
        if ability is None:
            self.logger.warning(f"got command for unknown light {ability_key} on {self.get_device_name(device_id)}")
            return

        service = ability.service
        try:
            match attribute:
                case "on" | "state":
                    await service.get_characteristic(ON).handle_set(str(payload).upper() in ("ON", "TRUE", "1"))

                case "brightness":
                    await service.get_characteristic(BRIGHTNESS).handle_set(float(payload))

                case "hs" if service.color:
                    hue, saturation = self.parse_hs(payload)
                    await service.get_characteristic(HUE).handle_set(hue)
                    await service.get_characteristic(SATURATION).handle_set(saturation)

                case _:
                    self.logger.warning(f"ignored unknown or invalid attribute: {attribute} => {payload}")
                    return

        except ServiceCommunicationError as err:
            self.logger.error(f"{self.get_device_name(device_id)} {ability.name} unreachable: {err}")
            self.upsert_state(device_id, internal={"online": False})
            await self.publish_device_availability(device_id, online=False)
        except (TypeError, ValueError) as err:
            self.logger.warning(f"ignored invalid {attribute} payload for {self.get_device_name(device_id)}: {payload!r} ({err})")

    def parse_hs(self: Rgbw2Mqtt, payload: Any) -> tuple[float, float]:
        """Accept ``"h,s"``, ``[h, s]`` or ``{"h": .., "s": ..}`` and return floats."""
        if isinstance(payload, str):
            parts = payload.split(",")
        elif isinstance(payload, (list, tuple)):
            parts = list(payload)
        elif isinstance(payload, dict):
            parts = [payload.get("h"), payload.get("s")]
        else:
            raise ValueError(f"Invalid HS value: {payload!r}")

        if len(parts) != 2:
            raise ValueError(f"Invalid HS value: {payload!r}")
        return float(cast(Any, parts[0])), float(cast(Any, parts[1]))

    async def handle_service_message(self: Rgbw2Mqtt, handler: str, message: Any) -> None:
        match handler:
            case "refresh_interval":
                self.device_interval = int(message)
                self.logger.info(f"refresh_interval updated to be {message}")
            case "rescan_interval":
                self.device_list_interval = int(message)
                self.logger.info(f"rescan_interval updated to be {message}")
            case _:
                self.logger.error(f"unrecognized message to {self.mqtt_helper.service_slug}: {handler} with {message}")
                return
        await self.publish_service_state()

    async def rediscover_all(self: Rgbw2Mqtt) -> None:
        await self.publish_service_state()
        await self.publish_service_discovery()
        for device_id in self.devices:
            await self.publish_device_discovery(device_id)
            await self.publish_device_state(device_id)

    # Utility functions ---------------------------------------------------------------------------

    def _handle_signal(self: Rgbw2Mqtt, signum: int, frame: FrameType | None = None) -> None:
        sig_name = signal.Signals(signum).name
        self.logger.warning(f"{sig_name} received - stopping service loop")
        self.running = False

        def _force_exit() -> None:
            self.logger.warning("force-exiting process after signal")
            os._exit(0)

        threading.Timer(5.0, _force_exit).start()

    def mark_ready(self: Rgbw2Mqtt) -> None:
        pathlib.Path(READY_FILE).touch()

    def heartbeat_ready(self: Rgbw2Mqtt) -> None:
        pathlib.Path(READY_FILE).touch()

    def read_file(self: Rgbw2Mqtt, file_name: str) -> str:
        try:
            with open(file_name, "r", encoding="utf-8") as file:
                return file.read().strip()
        except FileNotFoundError:
            raise FileNotFoundError(f"File not found: {file_name}")

    def load_config(self: Rgbw2Mqtt, config_arg: Any | None = None) -> dict[str, Any]:
        version = os.getenv("APP_VERSION") or self._read_version()
        tier = os.getenv("APP_TIER", "prod")
        if tier == "dev":
            version += ":DEV"

        config_from = "env"
        config: dict[str, str | bool | int | dict] = {}

        # Determine config file path
        config_path = config_arg or "/config"
        config_path = os.path.expanduser(config_path)
        config_path = os.path.abspath(config_path)

        if os.path.isdir(config_path):
            config_file = os.path.join(config_path, "config.yaml")
        elif os.path.isfile(config_path):
            config_file = config_path
            config_path = os.path.dirname(config_file)
        else:
            # If it's not a valid path but looks like a filename, handle gracefully
            if config_path.endswith(".yaml"):
                config_file = config_path
            else:
                config_file = os.path.join(config_path, "config.yaml")

        # Try to load from YAML
        if os.path.exists(config_file):
            try:
                with open(config_file, "r") as f:
                    config = yaml.safe_load(f) or {}
                config_from = "file"
            except Exception as e:
                logging.warning(f"Failed to load config from {config_file}: {e}")
        else:
            logging.warning(f"Config file not found at {config_file}, falling back to environment vars")

        # Merge with environment vars (env vars override nothing if file exists)
        mqtt = cast(dict[str, Any], config.get("mqtt", {}))
        shelly = cast(dict[str, Any], config.get("shelly", {}))

        # fmt: off
        mqtt = {
              "host":         cast(str, mqtt.get("host"))            or os.getenv("MQTT_HOST", "localhost"),
              "port":     int(cast(str, mqtt.get("port")             or os.getenv("MQTT_PORT", 1883))),
              "qos":      int(cast(str, mqtt.get("qos")              or os.getenv("MQTT_QOS", 0))),
              "username":               mqtt.get("username")         or os.getenv("MQTT_USERNAME", ""),
              "password":               mqtt.get("password")         or os.getenv("MQTT_PASSWORD", ""),
              "tls_enabled":            mqtt.get("tls_enabled")      or (os.getenv("MQTT_TLS_ENABLED", "false").lower() == "true"),
              "tls_ca_cert":            mqtt.get("tls_ca_cert")      or os.getenv("MQTT_TLS_CA_CERT"),
              "tls_cert":               mqtt.get("tls_cert")         or os.getenv("MQTT_TLS_CERT"),
              "tls_key":                mqtt.get("tls_key")          or os.getenv("MQTT_TLS_KEY"),
              "prefix":                 mqtt.get("prefix")           or os.getenv("MQTT_PREFIX", "rgbw2mqtt"),
              "discovery_prefix":       mqtt.get("discovery_prefix") or os.getenv("MQTT_DISCOVERY_PREFIX", "homeassistant"),
        }

        shelly = {
            "hosts":                     self._parse_hosts(shelly.get("hosts") or os.getenv("SHELLY_HOSTS", "")),
            "device_interval":       int(cast(str, shelly.get("device_interval") or os.getenv("SHELLY_DEVICE_INTERVAL", 30))),
            "device_list_interval":  int(cast(str, shelly.get("device_list_interval") or os.getenv("SHELLY_LIST_INTERVAL", 300))),
            "timeout":               int(cast(str, shelly.get("timeout") or os.getenv("SHELLY_TIMEOUT", 10))),
        }

        config = {
            "mqtt":        mqtt,
            "shelly":      shelly,
            "debug":       str(config.get("debug") or os.getenv("DEBUG", "")).lower() == "true",
            "timezone":    config.get("timezone", os.getenv("TZ", "UTC")),
            "config_from": config_from,
            "config_path": config_path,
            "version":     version,
        }
        # fmt: on

        # Validate required fields
        if not cast(dict, config["shelly"]).get("hosts"):
            raise ConfigError("`shelly.hosts` required in config file or SHELLY_HOSTS env var")
        if not cast(dict, config["mqtt"]).get("host"):
            raise ConfigError("`mqtt host` value is missing, not even the default value")
        if not cast(dict, config["mqtt"]).get("port"):
            raise ConfigError("`mqtt port` value is missing, not even the default value")

        return config

    def _parse_hosts(self: Rgbw2Mqtt, value: Any) -> list[str]:
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, list):
            raise ConfigError(f"`shelly.hosts` must be a list or comma separated string, got {type(value).__name__}")
        hosts: list[str] = []
        for entry in value:
            # allow `- host: 1.2.3.4` entries as well as plain strings
            host = entry.get("host") if isinstance(entry, dict) else entry
            if host and str(host).strip():
                hosts.append(str(host).strip())
        return hosts

    def _read_version(self: Rgbw2Mqtt) -> str:
        try:
            return self.read_file("VERSION")
        except FileNotFoundError:
            pass
        try:
            return pkg_version("rgbw2mqtt")
        except PackageNotFoundError:
            return "0.0.0"

    # Device properties ---------------------------------------------------------------------------

    def get_device_name(self: Rgbw2Mqtt, device_id: str) -> str:
        internal = self.states.get(device_id, {}).get("internal", {})
        return cast(str, internal.get("name") or device_id)

    def get_ability(self: Rgbw2Mqtt, device_id: str, ability_key: str) -> Ability | None:
        delegate = self.devices.get(device_id)
        if delegate is None:
            return None
        return next((ability for ability in delegate.abilities if ability.key == ability_key), None)

    def upsert_state(self: Rgbw2Mqtt, device_id: str, **kwargs: dict[str, Any] | str | int | bool | None) -> bool:
        MERGER = Merger(
            [(dict, "merge"), (list, "append_unique"), (set, "union")],
            ["override"],
            ["override"],
        )
        prev = copy.deepcopy(self.states.get(device_id, {}))
        for section, data in kwargs.items():
            merged = MERGER.merge(self.states.get(device_id, {}), {section: data})
            self.states[device_id] = merged
        new = self.states.get(device_id, {})
        return False if prev == new else True
