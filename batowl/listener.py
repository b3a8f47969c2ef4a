from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .signals import SignalChannel

logger = logging.getLogger(__name__)

QUIT_KEY = "q"
SAMPLE_KEY = "r"


class InputListener:
    """
    Reads raw keystrokes and turns ``q``/``r`` into control signals.

    ``q`` requests STOP and ends the listener, ``r`` requests SAMPLE_NOW,
    anything else is ignored. The thread is a daemon: when the recording ends
    through another source it is simply abandoned, still blocked on its read.
    """

    def __init__(self, channel: SignalChannel, read_key: Callable[[], str]):
        self.channel = channel
        self.read_key = read_key

        self._stop = threading.Event()
        self._th: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._th is not None and self._th.is_alive():
            return
        self._stop.clear()
        self._th = threading.Thread(target=self._run, name="batowl-input", daemon=True)
        self._th.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._th is not None:
            self._th.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self._th is not None and self._th.is_alive()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                key = self.read_key()
            except OSError as e:
                # spurious under raw-mode drivers; keep listening
                logger.warning("keyboard read failed: %s", e)
                continue

            if key == "":
                logger.warning("end of input reached, keyboard controls disabled")
                return
            if self._stop.is_set():
                return

            if key == QUIT_KEY:
                self.channel.request_stop()
                return
            if key == SAMPLE_KEY:
                self.channel.request_sample()
