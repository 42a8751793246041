"""Progress Indicator - animated status line replaced by one final notification."""

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional, Sequence

from ai_commit_msg import APP_TITLE
from ai_commit_msg.output.notify import NotificationRecord, Notifier


class ProgressState(Enum):
    IDLE = "idle"
    SPINNING = "spinning"
    TERMINAL = "terminal"


class TerminalKind(Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


# kind -> (icon, level, timeout in ms)
TERMINAL_STYLES = {
    TerminalKind.SUCCESS: ("✅", logging.INFO, 2000),
    TerminalKind.ERROR: ("❌", logging.ERROR, 3000),
    TerminalKind.WARNING: ("⚠️ ", logging.WARNING, 3000),
}


class ProgressIndicator:
    """Spinner for one generation.

    Every tick replaces the previous tick's notification so the user sees a
    single updating line. `finish()` replaces whatever was shown last with the
    final status, exactly once.
    """

    LABEL = "Generating commit message..."
    TICK_INTERVAL = 0.1
    FRAME_MS = 80

    def __init__(self, notifier: Notifier, notifications: bool = True, title: str = APP_TITLE,
                 clock: Callable[[], float] = time.monotonic):
        self.notifier = notifier
        self.notifications = notifications
        self.title = title
        self.clock = clock
        self.state = ProgressState.IDLE
        self.record: Optional[NotificationRecord] = None
        self._frames: tuple[str, ...] = ()
        self._started_at = 0.0
        self._task: Optional[asyncio.Task] = None

    def start(self, frames: Sequence[str], enabled: bool = True) -> bool:
        """Begin ticking. Returns False (and does nothing) when disabled."""
        if not enabled or not frames or not self.notifications:
            return False
        self._frames = tuple(frames)
        self._started_at = self.clock()
        self.state = ProgressState.SPINNING
        self._task = asyncio.get_running_loop().create_task(self._spin())
        return True

    def announce(self, text: str = LABEL) -> None:
        """Single static notification, for when the spinner is off."""
        if self.notifications:
            self.record = self.notifier.notify(text, logging.INFO, title=self.title)

    def render(self) -> str:
        elapsed_ms = (self.clock() - self._started_at) * 1000
        frame = self._frames[int(elapsed_ms // self.FRAME_MS) % len(self._frames)]
        return f"{frame} {self.LABEL}"

    def tick(self) -> None:
        self.record = self.notifier.notify(
            self.render(),
            logging.INFO,
            title=self.title,
            timeout=None,
            replace=self.record,
            hide_from_history=self.record is not None,
        )

    async def _spin(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self.TICK_INTERVAL)

    def stop(self) -> None:
        """Cancel the tick. Safe to call repeatedly or before start()."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def finish(self, kind: TerminalKind, message: str) -> Optional[NotificationRecord]:
        """Replace the transient notification with the final one."""
        if self.state is ProgressState.TERMINAL:
            raise RuntimeError("progress already finished")
        self.stop()
        self.state = ProgressState.TERMINAL
        if not self.notifications:
            return None

        icon, level, timeout = TERMINAL_STYLES[kind]
        self.record = self.notifier.notify(
            f"{icon} {message}",
            level,
            title=self.title,
            timeout=timeout,
            replace=self.record,
        )
        return self.record
