"""Alert sink: local notification, or a blocking alert when permission is denied."""
from __future__ import annotations

import logging

from station_monitor.config import NotificationsConfig
from station_monitor.mqtt.hub import EventHub

logger = logging.getLogger(__name__)

PERMISSION_DENIED_TITLE = "Permission denied"
PERMISSION_DENIED_BODY = "Local notifications will not be shown."


class Notifier:
    def __init__(self, hub: EventHub, permission_granted: bool) -> None:
        self._hub = hub
        self.permission_granted = permission_granted

    @classmethod
    def from_config(cls, hub: EventHub, cfg: NotificationsConfig) -> Notifier:
        notifier = cls(hub, cfg.permission_granted)
        if not notifier.permission_granted:
            logger.warning("Notification permission not granted, falling back to alerts")
        return notifier

    def startup_alerts(self) -> list[dict]:
        """Alerts every newly attached client must see once, before live traffic."""
        if self.permission_granted:
            return []
        return [{"type": "alert", "title": PERMISSION_DENIED_TITLE, "body": PERMISSION_DENIED_BODY}]

    def notify(self, title: str, body: str) -> None:
        if not self.permission_granted:
            self.alert("Notification", body)
            return
        logger.info("Notification: %s: %s", title, body)
        self._hub.publish({"type": "notification", "title": title, "body": body})

    def alert(self, title: str, body: str) -> None:
        logger.info("Alert: %s: %s", title, body)
        self._hub.publish({"type": "alert", "title": title, "body": body})
