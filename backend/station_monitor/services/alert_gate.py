"""Offline alert suppression per station.

Окно 0: алерт на каждое сообщение offline. Положительное окно подавляет
повторные алерты для станции, пока она не сообщит любой другой статус или
пока окно не истечёт.
"""
from __future__ import annotations

import time
from collections.abc import Callable


class AlertGate:
    def __init__(
        self,
        suppress_window_sec: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.suppress_window_sec = suppress_window_sec
        self._clock = clock
        self._last_alert: dict[str, float] = {}

    def should_alert(self, station_id: str) -> bool:
        if self.suppress_window_sec <= 0:
            return True

        now = self._clock()
        last = self._last_alert.get(station_id)
        if last is not None and now - last < self.suppress_window_sec:
            return False

        self._last_alert[station_id] = now
        return True

    def clear(self, station_id: str) -> None:
        """Station reported a non-offline status; the next offline alerts again."""
        self._last_alert.pop(station_id, None)

    def reset(self) -> None:
        self._last_alert.clear()
