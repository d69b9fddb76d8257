"""Station Monitor: device liveness backend."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from station_monitor.config import get_settings
from station_monitor.mqtt.hub import EventHub
from station_monitor.mqtt.transport import TransportFactory, mqtt_transport_factory
from station_monitor.routers import monitor as monitor_router
from station_monitor.routers import ws
from station_monitor.services.alert_gate import AlertGate
from station_monitor.services.monitor import LivenessMonitor
from station_monitor.services.notifier import Notifier
from station_monitor.services.status_log import StatusLog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Starting %s v%s", settings.app.name, settings.app.version)

    # 1. Event hub for WS clients
    hub = EventHub(queue_size=settings.hub.queue_size)
    app.state.hub = hub

    # 2. Notification permission is resolved once, here
    notifier = Notifier.from_config(hub, settings.notifications)

    # 3. Monitor (idle until POST /api/connect)
    factory: TransportFactory | None = app.state.transport_factory
    if factory is None:
        factory = mqtt_transport_factory(settings.mqtt)
    monitor = LivenessMonitor(
        transport_factory=factory,
        log=StatusLog(hub),
        notifier=notifier,
        gate=AlertGate(settings.alerts.suppress_window_sec),
        hub=hub,
        offline_title=settings.notifications.offline_title,
    )
    app.state.monitor = monitor

    logger.info("Backend ready on %s:%s", settings.backend.host, settings.backend.port)
    yield

    # Cleanup
    await monitor.disconnect()
    logger.info("Shutdown complete")


def create_app(transport_factory: TransportFactory | None = None) -> FastAPI:
    app = FastAPI(
        title="Station Monitor",
        version=get_settings().app.version,
        lifespan=lifespan,
    )
    app.state.transport_factory = transport_factory

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(monitor_router.router)
    app.include_router(ws.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/config")
    async def frontend_config():
        """Return frontend-safe config subset."""
        settings = get_settings()
        return {
            "app": {"name": settings.app.name, "version": settings.app.version},
            "broker_port": settings.mqtt.port,
            "websocket_path": settings.mqtt.websocket_path,
            "permission_granted": settings.notifications.permission_granted,
        }

    return app


app = create_app()
