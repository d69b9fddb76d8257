from __future__ import annotations

import uvicorn

from station_monitor.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "station_monitor.main:app",
        host=settings.backend.host,
        port=settings.backend.port,
        log_level="debug" if settings.app.debug else "info",
    )


if __name__ == "__main__":
    main()
