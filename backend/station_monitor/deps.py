from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from station_monitor.services.monitor import LivenessMonitor


def get_monitor(request: Request) -> LivenessMonitor:
    return request.app.state.monitor
