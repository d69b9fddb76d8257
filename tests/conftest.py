"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import asyncio

import pytest

from station_monitor.config import get_settings
from station_monitor.mqtt.events import Connected, Subscribed
from station_monitor.mqtt.hub import EventHub
from station_monitor.schemas.status import ConnectionConfig
from station_monitor.services.alert_gate import AlertGate
from station_monitor.services.monitor import LivenessMonitor
from station_monitor.services.notifier import Notifier
from station_monitor.services.status_log import StatusLog


def handshake(conn: ConnectionConfig) -> list:
    return [Connected(conn.broker_url()), Subscribed(conn.topic)]


class FakeTransport:
    """Yields a scripted event list, then (if hold) stays open until cancelled."""

    def __init__(self, conn: ConnectionConfig, script: list, hold: bool = True) -> None:
        self.conn = conn
        self.url = conn.broker_url()
        self.script = script
        self.hold = hold
        self.exhausted = asyncio.Event()
        self.cancelled = False

    async def events(self):
        try:
            for event in self.script:
                yield event
            self.exhausted.set()
            if self.hold:
                await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FakeTransportFactory:
    def __init__(self) -> None:
        self.transports: list[FakeTransport] = []
        self.script = handshake
        self.hold = True

    def __call__(self, conn: ConnectionConfig) -> FakeTransport:
        transport = FakeTransport(conn, self.script(conn), hold=self.hold)
        self.transports.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.transports[-1]


def drain(queue: asyncio.Queue) -> list[dict]:
    messages = []
    while not queue.empty():
        messages.append(queue.get_nowait())
    return messages


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Never pick up a developer's config.yaml."""
    monkeypatch.setenv("STATION_MONITOR_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def hub() -> EventHub:
    return EventHub(queue_size=64)


@pytest.fixture
def hub_queue(hub: EventHub) -> asyncio.Queue:
    return hub.subscribe()


@pytest.fixture
def factory() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
async def monitor(hub: EventHub, factory: FakeTransportFactory):
    mon = LivenessMonitor(
        transport_factory=factory,
        log=StatusLog(hub),
        notifier=Notifier(hub, permission_granted=True),
        gate=AlertGate(),
        hub=hub,
    )
    yield mon
    await mon.disconnect()
