"""Tagged transport events consumed by the liveness monitor."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Connected:
    url: str


@dataclass(frozen=True)
class Subscribed:
    topic: str


@dataclass(frozen=True)
class SubscribeFailed:
    topic: str
    cause: str


@dataclass(frozen=True)
class Message:
    topic: str
    payload: bytes


@dataclass(frozen=True)
class TransportFailed:
    cause: str


@dataclass(frozen=True)
class Closed:
    url: str


TransportEvent = Union[Connected, Subscribed, SubscribeFailed, Message, TransportFailed, Closed]
