from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from station_monitor.errors import MalformedPayloadError

UNKNOWN_STATION = "Unknown Station"
OFFLINE = "offline"


class ConnectionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    topic: str

    def broker_url(self, port: int = 9001, path: str = "/mqtt") -> str:
        return f"ws://{self.host}:{port}{path}"


class StatusEvent(BaseModel):
    """Parsed liveness payload: {"status": "...", "stationId": "..."}."""

    status: Optional[str] = None
    station_id: str = Field(UNKNOWN_STATION, alias="stationId")

    @field_validator("status", mode="before")
    @classmethod
    def _status_str(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("station_id", mode="before")
    @classmethod
    def _station_id_str(cls, v: Any) -> str:
        # Пустая строка / не строка → Unknown Station
        if isinstance(v, str) and v:
            return v
        return UNKNOWN_STATION

    @property
    def is_offline(self) -> bool:
        return self.status == OFFLINE


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_status_event(text: str) -> Optional[StatusEvent]:
    """Parse payload text.

    Raises MalformedPayloadError when the text is not JSON. Valid JSON that
    is not an object carries no status and yields None.
    """
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise MalformedPayloadError(text) from exc
    if not isinstance(data, dict):
        return None
    return StatusEvent.model_validate(data)
