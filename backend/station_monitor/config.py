from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel

# Версия из кода (config.yaml НЕ в git)
APP_VERSION = "1.0.0"


class AppConfig(BaseModel):
    name: str = "Station Monitor"
    version: str = APP_VERSION
    debug: bool = False


class MqttConfig(BaseModel):
    port: int = 9001
    websocket_path: str = "/mqtt"
    transport: str = "websockets"
    client_id: str = ""
    keepalive: int = 60
    connect_timeout_sec: float = 10.0


class NotificationsConfig(BaseModel):
    # Resolved once at startup, never re-read at runtime
    permission_granted: bool = True
    offline_title: str = "Device Offline"


class AlertsConfig(BaseModel):
    # 0 = every offline payload alerts
    suppress_window_sec: float = 0.0


class HubConfig(BaseModel):
    queue_size: int = 256


class BackendConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5555


class Settings(BaseModel):
    app: AppConfig = AppConfig()
    mqtt: MqttConfig = MqttConfig()
    notifications: NotificationsConfig = NotificationsConfig()
    alerts: AlertsConfig = AlertsConfig()
    hub: HubConfig = HubConfig()
    backend: BackendConfig = BackendConfig()


def _find_config_path() -> Path:
    env = os.environ.get("STATION_MONITOR_CONFIG_PATH")
    if env:
        return Path(env)
    return Path(__file__).resolve().parent.parent.parent / "config.yaml"


def load_settings(path: Path) -> Settings:
    if not path.exists():
        return Settings()
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return Settings(**data)


@lru_cache
def get_settings() -> Settings:
    return load_settings(_find_config_path())
