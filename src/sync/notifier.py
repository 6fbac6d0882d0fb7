"""Transient user-facing notifications.

Operations report their outcome here instead of raising; only plain-language
messages are kept, never error details.
"""

from collections import deque
from dataclasses import dataclass
from enum import StrEnum

import structlog

logger = structlog.get_logger()


class NoticeLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


class Notifier:
    """Bounded buffer of the most recent notices."""

    def __init__(self, maxlen: int = 50) -> None:
        self._notices: deque[Notice] = deque(maxlen=maxlen)

    def success(self, message: str) -> None:
        self._push(Notice(NoticeLevel.SUCCESS, message))

    def error(self, message: str) -> None:
        self._push(Notice(NoticeLevel.ERROR, message))

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    @property
    def last(self) -> Notice | None:
        return self._notices[-1] if self._notices else None

    def messages(self, level: NoticeLevel | None = None) -> list[str]:
        return [n.message for n in self._notices if level is None or n.level == level]

    def drain(self) -> list[Notice]:
        """Return and clear the pending notices."""
        notices = list(self._notices)
        self._notices.clear()
        return notices

    def _push(self, notice: Notice) -> None:
        self._notices.append(notice)
        logger.info("notice", level=notice.level.value, message=notice.message)
