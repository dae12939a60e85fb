# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from .mixins.helpers import HelpersMixin
from .mixins.mqtt import MqttMixin
from .mixins.publish import PublishMixin
from .mixins.shelly import ShellyMixin
from .mixins.refresh import RefreshMixin
from .mixins.loops import LoopsMixin
from .base import Base


class Rgbw2Mqtt(
    HelpersMixin,
    PublishMixin,
    ShellyMixin,
    RefreshMixin,
    LoopsMixin,
    MqttMixin,
    Base,
):
    pass
