from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from station_monitor.mqtt.hub import EventHub
from station_monitor.services.monitor import LivenessMonitor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    hub: EventHub = websocket.app.state.hub
    monitor: LivenessMonitor = websocket.app.state.monitor

    queue = hub.subscribe()
    try:
        # Сразу отправляем текущий лог, клиент не ждёт новое сообщение
        await websocket.send_json({
            "type": "snapshot",
            "state": monitor.state.value,
            "entries": monitor.log.entries,
            "permission_granted": monitor.notifier.permission_granted,
        })
        for alert in monitor.notifier.startup_alerts():
            await websocket.send_json(alert)

        send_task = asyncio.create_task(_ws_sender(websocket, queue))
        recv_task = asyncio.create_task(_ws_receiver(websocket))
        done, pending = await asyncio.wait(
            {send_task, recv_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
        _reap(done)
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.warning("WS error: %s", exc)
    finally:
        hub.unsubscribe(queue)
        logger.info("WS disconnected")


def _reap(done: set[asyncio.Task]) -> None:
    """Retrieve finished task outcomes; a client disconnect is not an error."""
    for task in done:
        if task.cancelled():
            continue
        exc = task.exception()
        if exc is not None and not isinstance(exc, WebSocketDisconnect):
            logger.warning("WS error: %s", exc)


async def _ws_sender(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await queue.get()
        await websocket.send_json(message)


async def _ws_receiver(websocket: WebSocket) -> None:
    while True:
        await websocket.receive_text()
