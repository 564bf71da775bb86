from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from src.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    message: str | None = None


NotificationListener = Callable[[Notification], None]


class Notifier:
    """User-facing notification sink (the toast of a UI)."""

    def __init__(self, history_size: int = 50):
        self._listeners: list[NotificationListener] = []
        self.history: deque[Notification] = deque(maxlen=history_size)

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self, level: NotificationLevel, title: str, message: str | None = None
    ) -> Notification:
        notification = Notification(level=level, title=title, message=message)
        self.history.append(notification)
        logger.debug("Notification", level=level.value, title=title, detail=message)
        for listener in list(self._listeners):
            listener(notification)
        return notification

    def info(self, title: str, message: str | None = None) -> Notification:
        return self.notify(NotificationLevel.INFO, title, message)

    def success(self, title: str, message: str | None = None) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, title, message)

    def warning(self, title: str, message: str | None = None) -> Notification:
        return self.notify(NotificationLevel.WARNING, title, message)

    def error(self, title: str, message: str | None = None) -> Notification:
        return self.notify(NotificationLevel.ERROR, title, message)
