"""
User-visible notices ("toasts") raised by the auth state machines.

The state machines never raise into their caller; failures they recover
from are reported here instead.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


class Notifier(Protocol):
    def notify(self, level: NoticeLevel, message: str) -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes notices to the application log."""

    _LOG_LEVELS = {
        NoticeLevel.SUCCESS: logging.INFO,
        NoticeLevel.INFO: logging.INFO,
        NoticeLevel.ERROR: logging.WARNING,
    }

    def notify(self, level: NoticeLevel, message: str) -> None:
        logger.log(self._LOG_LEVELS[level], "[%s] %s", level.value, message)


class NoticeBuffer(LoggingNotifier):
    """
    Keeps notices in memory until a renderer drains them.

    Also logs each notice, like LoggingNotifier.
    """

    def __init__(self):
        self._notices: List[Notice] = []

    def notify(self, level: NoticeLevel, message: str) -> None:
        super().notify(level, message)
        self._notices.append(Notice(level, message))

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices)

    def messages(self, level: NoticeLevel | None = None) -> List[str]:
        return [n.message for n in self._notices if level is None or n.level == level]

    def drain(self) -> List[Notice]:
        drained, self._notices = self._notices, []
        return drained
