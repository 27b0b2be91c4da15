"""Transient user notifications (the terminal stand-in for toasts)."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from asistente.models.enums import NotificationLevel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    description: str = ""


class Notifier:
    """Collects notifications and forwards them to subscribers.

    Components call `info` / `success` / `error`; the CLI subscribes a
    printer. Nothing is persisted beyond `history`, which tests inspect.
    """

    def __init__(self) -> None:
        self.history: list[Notification] = []
        self._subscribers: list[Callable[[Notification], None]] = []

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        self._subscribers.append(callback)

    def notify(self, level: NotificationLevel, title: str, description: str = "") -> Notification:
        note = Notification(level=level, title=title, description=description)
        self.history.append(note)
        logger.debug("Notification [%s] %s", level.value, title)
        for callback in self._subscribers:
            callback(note)
        return note

    def info(self, title: str, description: str = "") -> Notification:
        return self.notify(NotificationLevel.INFO, title, description)

    def success(self, title: str, description: str = "") -> Notification:
        return self.notify(NotificationLevel.SUCCESS, title, description)

    def error(self, title: str, description: str = "") -> Notification:
        return self.notify(NotificationLevel.ERROR, title, description)

    @property
    def last(self) -> Notification | None:
        return self.history[-1] if self.history else None
