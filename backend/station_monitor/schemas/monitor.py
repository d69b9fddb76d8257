from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ConnectRequest(BaseModel):
    host: str = ""
    topic: str = ""


class ConnectOut(BaseModel):
    state: str
    broker_url: str
    topic: str


class MonitorStateOut(BaseModel):
    state: str
    host: Optional[str] = None
    topic: Optional[str] = None
    broker_url: Optional[str] = None
    permission_granted: bool


class LogOut(BaseModel):
    entries: list[str]
