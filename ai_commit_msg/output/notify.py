"""Notifications - status lines that can replace each other in place."""

import itertools
import logging
import sys
from dataclasses import dataclass
from typing import Optional, Protocol, TextIO


@dataclass(frozen=True)
class NotificationRecord:
    """Handle to an issued notification, usable as a later replace target."""
    id: int


class Notifier(Protocol):
    def notify(
        self,
        text: str,
        level: int = logging.INFO,
        *,
        title: Optional[str] = None,
        timeout: Optional[int] = None,
        replace: Optional[NotificationRecord] = None,
        hide_from_history: bool = False,
    ) -> NotificationRecord:
        ...


class TerminalNotifier:
    """Renders notifications on a terminal stream (stderr by default).

    A notification without a timeout is transient: it stays on the current
    line and the next notification replacing it overwrites that line. Off a
    TTY transient notifications are dropped so logs only get final results.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stderr
        self._ids = itertools.count(1)
        self._open_line: Optional[NotificationRecord] = None

    @property
    def interactive(self) -> bool:
        return hasattr(self.stream, 'isatty') and self.stream.isatty()

    def notify(
        self,
        text: str,
        level: int = logging.INFO,
        *,
        title: Optional[str] = None,
        timeout: Optional[int] = None,
        replace: Optional[NotificationRecord] = None,
        hide_from_history: bool = False,
    ) -> NotificationRecord:
        record = NotificationRecord(next(self._ids))
        transient = timeout is None

        if not self.interactive:
            if not transient:
                print(text, file=self.stream, flush=True)
            return record

        if self._open_line is not None:
            if replace == self._open_line:
                self.stream.write('\r\033[K')
            else:
                self.stream.write('\n')

        self.stream.write(text if transient else f"{text}\n")
        self.stream.flush()
        self._open_line = record if transient else None
        return record
