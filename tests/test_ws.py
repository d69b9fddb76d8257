from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocketDisconnect

from station_monitor.routers.ws import _reap


async def _finished(exc: BaseException | None) -> asyncio.Task:
    async def body():
        if exc is not None:
            raise exc

    task = asyncio.create_task(body())
    await asyncio.wait({task})
    return task


async def test_reap_retrieves_client_disconnect_silently(caplog):
    task = await _finished(WebSocketDisconnect(code=1000))

    with caplog.at_level(logging.WARNING, logger="station_monitor.routers.ws"):
        _reap({task})

    assert caplog.records == []
    # Outcome has been retrieved, asyncio will not report it on GC
    assert not task._log_traceback  # noqa: SLF001


async def test_reap_logs_unexpected_errors(caplog):
    task = await _finished(RuntimeError("send failed"))

    with caplog.at_level(logging.WARNING, logger="station_monitor.routers.ws"):
        _reap({task})

    assert [r.getMessage() for r in caplog.records] == ["WS error: send failed"]
    assert not task._log_traceback  # noqa: SLF001


async def test_reap_skips_clean_and_cancelled_tasks(caplog):
    clean = await _finished(None)
    cancelled = asyncio.create_task(asyncio.sleep(10))
    cancelled.cancel()
    await asyncio.wait({cancelled})

    with caplog.at_level(logging.WARNING, logger="station_monitor.routers.ws"):
        _reap({clean, cancelled})

    assert caplog.records == []
