from __future__ import annotations

import enum
import queue
import threading
from typing import Optional


class ControlSignal(enum.Enum):
    STOP = "stop"
    SAMPLE_NOW = "sample_now"


class SignalChannel:
    """
    Unbounded channel carrying ControlSignals to the coordinator.

    STOP is a one-shot latch: the first request_stop() enqueues it and every
    later call is a no-op. Once closed, all sends are dropped so helpers never
    block on a receiver that has gone away.
    """

    def __init__(self):
        self._q: "queue.Queue[ControlSignal]" = queue.Queue()
        self._lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._closed = False

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    @property
    def closed(self) -> bool:
        return self._closed

    def request_stop(self) -> bool:
        """Returns True only for the call that actually enqueued STOP."""
        with self._lock:
            if self._closed or self._stop_requested.is_set():
                return False
            self._stop_requested.set()
            self._q.put(ControlSignal.STOP)
            return True

    def request_sample(self) -> bool:
        with self._lock:
            if self._closed or self._stop_requested.is_set():
                return False
            self._q.put(ControlSignal.SAMPLE_NOW)
            return True

    def get(self, timeout: Optional[float] = None) -> ControlSignal:
        """Raises queue.Empty when nothing arrives within timeout."""
        if timeout is not None and timeout <= 0:
            return self._q.get_nowait()
        return self._q.get(timeout=timeout)

    def close(self) -> None:
        with self._lock:
            self._closed = True
