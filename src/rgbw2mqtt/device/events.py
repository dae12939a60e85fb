# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from json_logging import get_logger
from typing import Any, Callable

EventHandler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class EventEmitter:
    """Callback table keyed by event name ("change:output", "change:rgb", ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._emitter_logger = get_logger(__name__)

    def on(self, event: str, handler: EventHandler) -> Unsubscribe:
        self._handlers.setdefault(event, []).append(handler)

        def unsubscribe() -> None:
            self.off(event, handler)

        return unsubscribe

    def off(self, event: str, handler: EventHandler) -> None:
        # unknown event or handler is a no-op
        handlers = self._handlers.get(event)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[event]

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def emit(self, event: str, value: Any) -> None:
        # copy, a handler may unsubscribe while we iterate
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(value)
            except Exception:
                self._emitter_logger.exception(f"handler for {event} failed")
