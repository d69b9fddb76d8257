"""Connect / disconnect actions and the status log."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from station_monitor.deps import get_monitor
from station_monitor.errors import AlreadyConnectedError, ConfigMissingError
from station_monitor.schemas.monitor import ConnectOut, ConnectRequest, LogOut, MonitorStateOut
from station_monitor.services.monitor import LivenessMonitor

router = APIRouter(prefix="/api", tags=["monitor"])

CONFIG_MISSING_DETAIL = "Please enter both IP address and topic"


@router.post("/connect", response_model=ConnectOut, status_code=status.HTTP_202_ACCEPTED)
async def connect(
    body: ConnectRequest,
    monitor: LivenessMonitor = Depends(get_monitor),
):
    try:
        config = monitor.configure(body.host, body.topic)
        await monitor.connect(config)
    except ConfigMissingError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=CONFIG_MISSING_DETAIL,
        )
    except AlreadyConnectedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    return ConnectOut(
        state=monitor.state.value,
        broker_url=monitor.broker_url,
        topic=config.topic,
    )


@router.post("/disconnect")
async def disconnect(monitor: LivenessMonitor = Depends(get_monitor)):
    """Idempotent: сбрасывает соединение, лог и конфиг."""
    await monitor.disconnect()
    return {"state": monitor.state.value}


@router.get("/state", response_model=MonitorStateOut)
async def get_state(monitor: LivenessMonitor = Depends(get_monitor)):
    config = monitor.config
    return MonitorStateOut(
        state=monitor.state.value,
        host=config.host if config else None,
        topic=config.topic if config else None,
        broker_url=monitor.broker_url,
        permission_granted=monitor.notifier.permission_granted,
    )


@router.get("/log", response_model=LogOut)
async def get_log(monitor: LivenessMonitor = Depends(get_monitor)):
    return LogOut(entries=monitor.log.entries)
