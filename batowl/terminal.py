from __future__ import annotations

import logging
import os
import sys
import threading
from typing import Any, Optional

from .errors import TerminalModeError

logger = logging.getLogger(__name__)

_WINDOWS = sys.platform.startswith("win")

if _WINDOWS:
    import msvcrt
else:
    import termios
    import tty


class TerminalModeHandle:
    """
    Exclusive ownership of the controlling terminal's raw mode.

    acquire() switches stdin to raw mode; release() restores the saved mode.
    Release is idempotent and thread-safe: whichever exit path calls it first
    restores the terminal, every later call is a no-op.
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdin
        self._fd: Optional[int] = None
        self._saved: Any = None
        self._lock = threading.Lock()
        self._acquired = False
        self._released = False

    @property
    def active(self) -> bool:
        return self._acquired and not self._released

    def __enter__(self) -> "TerminalModeHandle":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            self.release()
            return
        try:
            self.release()
        except TerminalModeError as e:
            logger.error("%s", e)

    def acquire(self) -> None:
        with self._lock:
            if self._acquired:
                raise TerminalModeError("terminal mode already acquired")
            try:
                fd = self.stream.fileno()
            except (AttributeError, OSError, ValueError) as e:
                raise TerminalModeError(f"stdin has no file descriptor: {e}") from e
            if not os.isatty(fd):
                raise TerminalModeError("stdin is not a terminal")
            if not _WINDOWS:
                try:
                    self._saved = termios.tcgetattr(fd)
                    tty.setraw(fd)
                except termios.error as e:
                    raise TerminalModeError(f"failed to enter raw mode: {e}") from e
            self._fd = fd
            self._acquired = True
            logger.debug("terminal fd=%d switched to raw mode", fd)

    def release(self) -> bool:
        """Restore the saved mode. Returns True only for the call that did it."""
        with self._lock:
            if not self._acquired or self._released:
                return False
            self._released = True
            if not _WINDOWS:
                try:
                    termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
                except termios.error as e:
                    raise TerminalModeError(f"failed to restore terminal mode: {e}") from e
            logger.debug("terminal fd=%d restored", self._fd)
            return True

    def read_key(self) -> str:
        """Block for one raw keystroke. Returns "" at end of input."""
        if _WINDOWS:
            return msvcrt.getwch()
        data = os.read(self._fd, 1)
        return data.decode("latin-1")
