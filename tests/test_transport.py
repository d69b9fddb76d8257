from __future__ import annotations

from types import SimpleNamespace

import aiomqtt
import pytest

from station_monitor.config import MqttConfig
from station_monitor.mqtt.events import (
    Closed,
    Connected,
    Message,
    SubscribeFailed,
    Subscribed,
    TransportFailed,
)
from station_monitor.mqtt.transport import MqttTransport, mqtt_transport_factory
from station_monitor.schemas.status import ConnectionConfig

URL = "ws://10.0.0.5:9001/mqtt"


class FakeClient:
    """Stand-in for aiomqtt.Client driven by class-level knobs."""

    instances: list[FakeClient] = []
    refuse: str | None = None
    subscribe_error: str | None = None
    drop_error: str | None = None
    incoming: list = []

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.subscriptions: list[str] = []
        self.exited = False
        FakeClient.instances.append(self)

    async def __aenter__(self) -> FakeClient:
        if self.refuse:
            raise aiomqtt.MqttError(self.refuse)
        return self

    async def __aexit__(self, *exc_info) -> bool:
        self.exited = True
        return False

    async def subscribe(self, topic: str) -> None:
        if self.subscribe_error:
            raise aiomqtt.MqttError(self.subscribe_error)
        self.subscriptions.append(topic)

    @property
    def messages(self):
        return self._iter()

    async def _iter(self):
        for message in self.incoming:
            yield message
        if self.drop_error:
            raise aiomqtt.MqttError(self.drop_error)


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.instances = []
    FakeClient.refuse = None
    FakeClient.subscribe_error = None
    FakeClient.drop_error = None
    FakeClient.incoming = []
    monkeypatch.setattr(aiomqtt, "Client", FakeClient)
    return FakeClient


def make_transport(cfg: MqttConfig | None = None) -> MqttTransport:
    return MqttTransport(ConnectionConfig(host="10.0.0.5", topic="status"), cfg or MqttConfig())


async def collect(transport: MqttTransport) -> list:
    return [event async for event in transport.events()]


async def test_happy_session(fake_client):
    fake_client.incoming = [
        SimpleNamespace(topic="status", payload=b'{"status":"offline"}'),
        SimpleNamespace(topic="status", payload="plain text"),
        SimpleNamespace(topic="status", payload=None),
    ]

    events = await collect(make_transport())

    assert events == [
        Connected(URL),
        Subscribed("status"),
        Message("status", b'{"status":"offline"}'),
        Message("status", b"plain text"),
        Message("status", b""),
        Closed(URL),
    ]
    client = fake_client.instances[0]
    assert client.subscriptions == ["status"]
    assert client.exited


async def test_client_options(fake_client):
    await collect(make_transport(MqttConfig(client_id="monitor-1", connect_timeout_sec=3)))

    kwargs = fake_client.instances[0].kwargs
    assert kwargs["hostname"] == "10.0.0.5"
    assert kwargs["port"] == 9001
    assert kwargs["transport"] == "websockets"
    assert kwargs["websocket_path"] == "/mqtt"
    assert kwargs["identifier"] == "monitor-1"
    assert kwargs["timeout"] == 3


async def test_empty_client_id_lets_library_generate_one(fake_client):
    await collect(make_transport())
    assert fake_client.instances[0].kwargs["identifier"] is None


async def test_connection_refused(fake_client):
    fake_client.refuse = "Connection refused"

    events = await collect(make_transport())

    assert events == [TransportFailed("Connection refused"), Closed(URL)]


async def test_subscribe_failure_keeps_session(fake_client):
    fake_client.subscribe_error = "not authorized"
    fake_client.incoming = [SimpleNamespace(topic="status", payload=b"{}")]

    events = await collect(make_transport())

    assert events == [
        Connected(URL),
        SubscribeFailed("status", "not authorized"),
        Message("status", b"{}"),
        Closed(URL),
    ]


async def test_broker_drop_mid_session(fake_client):
    fake_client.drop_error = "Disconnected during message iteration"

    events = await collect(make_transport())

    assert events == [
        Connected(URL),
        Subscribed("status"),
        TransportFailed("Disconnected during message iteration"),
        Closed(URL),
    ]
    assert fake_client.instances[0].exited


def test_factory_builds_url_from_config():
    factory = mqtt_transport_factory(MqttConfig(port=8083, websocket_path="/ws"))
    transport = factory(ConnectionConfig(host="broker.local", topic="t"))
    assert transport.url == "ws://broker.local:8083/ws"
