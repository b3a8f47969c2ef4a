from __future__ import annotations

import logging
import threading
from typing import Optional

from .errors import TerminalModeError
from .signals import SignalChannel

logger = logging.getLogger(__name__)


class DeadlineWatchdog:
    """One-shot timer that stops the recording after ``max_duration`` seconds."""

    def __init__(self, channel: SignalChannel, max_duration: float, terminal=None):
        self.channel = channel
        self.max_duration = float(max_duration)
        self.terminal = terminal

        self._cancelled = threading.Event()
        self._fired = threading.Event()
        self._th: Optional[threading.Thread] = None

    @property
    def fired(self) -> bool:
        return self._fired.is_set()

    def start(self) -> None:
        if self.max_duration <= 0:
            return
        if self._th is not None and self._th.is_alive():
            return
        self._th = threading.Thread(target=self._run, name="batowl-deadline", daemon=True)
        self._th.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._th is not None:
            self._th.join(timeout=timeout)

    def _run(self) -> None:
        if self._cancelled.wait(self.max_duration):
            return
        self._fired.set()
        if self.channel.request_stop():
            logger.info("deadline of %.0fs reached, stopping", self.max_duration)
        # the listener may still be blocked on a read and cannot restore the terminal
        if self.terminal is not None:
            try:
                self.terminal.release()
            except TerminalModeError as e:
                logger.error("%s", e)
