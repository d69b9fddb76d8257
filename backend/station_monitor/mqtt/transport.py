"""MQTT-over-WebSocket transport: aiomqtt session → stream of tagged events."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from typing import Protocol

import aiomqtt

from station_monitor.config import MqttConfig
from station_monitor.errors import SubscriptionError
from station_monitor.mqtt.events import (
    Closed,
    Connected,
    Message,
    SubscribeFailed,
    Subscribed,
    TransportEvent,
    TransportFailed,
)
from station_monitor.schemas.status import ConnectionConfig

logger = logging.getLogger(__name__)


class Transport(Protocol):
    url: str

    def events(self) -> AsyncIterator[TransportEvent]: ...


TransportFactory = Callable[[ConnectionConfig], Transport]


def _payload_bytes(payload: object) -> bytes:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if payload is None:
        return b""
    return str(payload).encode("utf-8")


class MqttTransport:
    """One broker session. The stream ends with Closed; cancelling the
    consumer tears the connection down without a Closed event."""

    def __init__(self, conn: ConnectionConfig, cfg: MqttConfig) -> None:
        self.conn = conn
        self.cfg = cfg
        self.url = conn.broker_url(cfg.port, cfg.websocket_path)

    def _client(self) -> aiomqtt.Client:
        return aiomqtt.Client(
            hostname=self.conn.host,
            port=self.cfg.port,
            identifier=self.cfg.client_id or None,
            transport=self.cfg.transport,
            websocket_path=self.cfg.websocket_path,
            keepalive=self.cfg.keepalive,
            timeout=self.cfg.connect_timeout_sec,
        )

    async def _subscribe(self, client: aiomqtt.Client) -> None:
        try:
            await client.subscribe(self.conn.topic)
        except aiomqtt.MqttError as exc:
            raise SubscriptionError(self.conn.topic, str(exc)) from exc

    async def events(self) -> AsyncIterator[TransportEvent]:
        try:
            async with self._client() as client:
                logger.info("MQTT connected to %s", self.url)
                yield Connected(self.url)

                try:
                    await self._subscribe(client)
                except SubscriptionError as exc:
                    logger.warning("%s", exc)
                    yield SubscribeFailed(exc.topic, exc.cause)
                else:
                    logger.info("MQTT subscribed to %s", self.conn.topic)
                    yield Subscribed(self.conn.topic)

                async for message in client.messages:
                    yield Message(str(message.topic), _payload_bytes(message.payload))
        except aiomqtt.MqttError as exc:
            logger.error("MQTT connection to %s failed: %s", self.url, exc)
            yield TransportFailed(str(exc))

        logger.info("MQTT disconnected from %s", self.url)
        yield Closed(self.url)


def mqtt_transport_factory(cfg: MqttConfig) -> TransportFactory:
    def factory(conn: ConnectionConfig) -> Transport:
        return MqttTransport(conn, cfg)

    return factory
