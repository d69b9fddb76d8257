"""Append-only status log shown to the user; mirrored to logging and the hub."""
from __future__ import annotations

import logging

from station_monitor.mqtt.hub import EventHub

logger = logging.getLogger(__name__)


class StatusLog:
    def __init__(self, hub: EventHub | None = None) -> None:
        self._hub = hub
        self._entries: list[str] = []

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, text: str, level: int = logging.INFO) -> None:
        self._entries.append(text)
        logger.log(level, "%s", text)
        if self._hub is not None:
            self._hub.publish({"type": "log", "text": text})

    def clear(self) -> None:
        self._entries.clear()
