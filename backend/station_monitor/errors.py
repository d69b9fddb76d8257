"""Monitor error taxonomy. None of these is fatal to the process."""
from __future__ import annotations


class MonitorError(Exception):
    pass


class ConfigMissingError(MonitorError):
    """Host or topic is empty; blocks connect."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing connection fields: {', '.join(missing)}")


class AlreadyConnectedError(MonitorError):
    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"Monitor is already {state}; disconnect first")


class MalformedPayloadError(MonitorError):
    """Payload is not valid JSON. Recovered locally, logged only."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Invalid message format: {text}")


class TransportError(MonitorError):
    pass


class SubscriptionError(TransportError):
    def __init__(self, topic: str, cause: str) -> None:
        self.topic = topic
        self.cause = cause
        super().__init__(f"Subscription to {topic} failed: {cause}")
