"""Device liveness monitor: one broker topic → status log + offline alerts."""
from __future__ import annotations

import asyncio
import contextlib
import enum
import logging

from station_monitor.errors import AlreadyConnectedError, ConfigMissingError, MalformedPayloadError
from station_monitor.mqtt.events import (
    Closed,
    Connected,
    Message,
    SubscribeFailed,
    Subscribed,
    TransportEvent,
    TransportFailed,
)
from station_monitor.mqtt.hub import EventHub
from station_monitor.mqtt.transport import Transport, TransportFactory
from station_monitor.schemas.status import ConnectionConfig, parse_status_event
from station_monitor.services.alert_gate import AlertGate
from station_monitor.services.notifier import Notifier
from station_monitor.services.status_log import StatusLog

logger = logging.getLogger(__name__)

OFFLINE_TITLE = "Device Offline"


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class LivenessMonitor:
    def __init__(
        self,
        transport_factory: TransportFactory,
        log: StatusLog,
        notifier: Notifier,
        gate: AlertGate | None = None,
        hub: EventHub | None = None,
        offline_title: str = OFFLINE_TITLE,
    ) -> None:
        self._transport_factory = transport_factory
        self.log = log
        self.notifier = notifier
        self.gate = gate or AlertGate()
        self._hub = hub
        self.offline_title = offline_title

        self.state = ConnectionState.DISCONNECTED
        self.config: ConnectionConfig | None = None
        self.broker_url: str | None = None
        self._task: asyncio.Task | None = None

    @staticmethod
    def configure(host: str, topic: str) -> ConnectionConfig:
        host = (host or "").strip()
        topic = (topic or "").strip()
        missing = [name for name, value in (("host", host), ("topic", topic)) if not value]
        if missing:
            raise ConfigMissingError(missing)
        return ConnectionConfig(host=host, topic=topic)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self.state:
            return
        logger.debug("State %s → %s", self.state.value, state.value)
        self.state = state
        if self._hub is not None:
            self._hub.publish({"type": "state", "state": state.value})

    async def connect(self, config: ConnectionConfig) -> None:
        """Start a session in the background; outcomes arrive as log entries."""
        if self.state is not ConnectionState.DISCONNECTED or self._task is not None:
            raise AlreadyConnectedError(self.state.value)

        transport = self._transport_factory(config)
        self.config = config
        self.broker_url = transport.url
        self._set_state(ConnectionState.CONNECTING)
        logger.info("Connecting to %s, topic %s", transport.url, config.topic)
        self._task = asyncio.create_task(self._run(transport))

    async def _run(self, transport: Transport) -> None:
        try:
            async for event in transport.events():
                self.handle_event(event)
        except Exception as exc:
            logger.exception("Unexpected error in MQTT session: %s", exc)
            self.log.append(f"MQTT Error: {exc}", logging.ERROR)
        finally:
            # Сессия закончилась сама (Closed), handle снова свободен
            if self._task is asyncio.current_task():
                self._task = None
                self._set_state(ConnectionState.DISCONNECTED)

    def handle_event(self, event: TransportEvent) -> None:
        if isinstance(event, Connected):
            self._set_state(ConnectionState.CONNECTED)
            self.log.append(f"Connected to {event.url}")
        elif isinstance(event, Subscribed):
            self.log.append(f"Subscribed to {event.topic}")
        elif isinstance(event, SubscribeFailed):
            self.log.append(f"Subscription failed: {event.cause}", logging.WARNING)
        elif isinstance(event, Message):
            self.on_message(event.topic, event.payload)
        elif isinstance(event, TransportFailed):
            self.log.append(f"MQTT Error: {event.cause}", logging.ERROR)
        elif isinstance(event, Closed):
            self._set_state(ConnectionState.DISCONNECTED)
            self.log.append(f"Disconnected from {event.url}")

    def on_message(self, topic: str, payload: bytes) -> None:
        text = payload.decode("utf-8", errors="replace")
        self.log.append(f"{topic}: {text}")

        try:
            event = parse_status_event(text)
        except MalformedPayloadError as exc:
            self.log.append(str(exc), logging.WARNING)
            return

        if event is None:
            return
        if not event.is_offline:
            self.gate.clear(event.station_id)
            return

        body = f'Device "{event.station_id}" is offline'
        if not self.gate.should_alert(event.station_id):
            self.log.append(f'Suppressed repeated offline alert for "{event.station_id}"')
            return

        self.notifier.notify(self.offline_title, body)
        self.log.append(body, logging.WARNING)

    async def disconnect(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.info("Disconnected from %s", self.broker_url)

        self._set_state(ConnectionState.DISCONNECTED)
        self.log.clear()
        self.gate.reset()
        self.config = None
        self.broker_url = None

    async def wait_closed(self) -> None:
        """Wait until the current session ends on its own."""
        task = self._task
        if task is not None:
            await asyncio.shield(task)
