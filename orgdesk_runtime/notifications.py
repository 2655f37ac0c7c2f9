# file: orgdesk_runtime/notifications.py
"""
Notification sinks — fire-and-forget notify(message, kind).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    message: str
    kind: NotificationKind


class Notifier(Protocol):
    def notify(self, message: str, kind: NotificationKind) -> None: ...


class LoggingNotifier:
    """Writes notifications to the log (server-side default)."""

    def notify(self, message: str, kind: NotificationKind) -> None:
        if kind == NotificationKind.ERROR:
            logger.warning("notify[error]: %s", message)
        else:
            logger.info("notify[success]: %s", message)


class RecordingNotifier:
    """Keeps every notification in order, for tests."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, message: str, kind: NotificationKind) -> None:
        self.notifications.append(Notification(message, kind))

    @property
    def messages(self) -> List[str]:
        return [n.message for n in self.notifications]

    @property
    def last(self) -> Notification:
        return self.notifications[-1]

    def clear(self) -> None:
        self.notifications.clear()
