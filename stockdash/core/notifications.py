"""User-facing notifications raised by inventory operations.

Every notification is logged. It is also appended to the collector bound
to the current context (see `collect_notifications`), so an API request
sees only the notifications its own operation produced, and kept in a
bounded backlog for callers that are not running inside a collector.
"""

from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from stockdash.infra.logging import get_logger
from stockdash.schemas.common import Notification

logger = get_logger(__name__)

_collector: ContextVar[list[Notification] | None] = ContextVar("notification_collector", default=None)


@contextmanager
def collect_notifications() -> Iterator[list[Notification]]:
    """Collect notifications raised in this context.

    Example:
        with collect_notifications() as raised:
            ok = await manager.add_product(candidate)
        return OperationResult(success=ok, notifications=raised)
    """
    collected: list[Notification] = []
    token = _collector.set(collected)
    try:
        yield collected
    finally:
        _collector.reset(token)


class Notifier:
    """Records notifications and logs them through structlog."""

    def __init__(self, backlog_size: int = 50) -> None:
        self._backlog: deque[Notification] = deque(maxlen=backlog_size)

    def notify(self, title: str, description: str = "", destructive: bool = False) -> Notification:
        notification = Notification(
            title=title,
            description=description,
            variant="destructive" if destructive else "default",
        )
        if destructive:
            logger.warning("Notification raised", title=title, description=description)
        else:
            logger.info("Notification raised", title=title, description=description)

        self._backlog.append(notification)
        collected = _collector.get()
        if collected is not None:
            collected.append(notification)
        return notification

    def success(self, title: str, description: str = "") -> Notification:
        return self.notify(title, description)

    def failure(self, title: str, description: str = "") -> Notification:
        return self.notify(title, description, destructive=True)

    def drain(self) -> list[Notification]:
        """Return and clear the backlog."""
        pending = list(self._backlog)
        self._backlog.clear()
        return pending
