"""Shared pytest fixtures for the batowl test suite."""

import os
import sys
import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from batowl.errors import ProbeError  # noqa: E402


# =============================================================================
# Fakes
# =============================================================================

class SequenceProbe:
    """Returns the given levels in order, repeating the last one."""

    def __init__(self, levels: Sequence[int], on_call: Optional[Callable[[int], None]] = None,
                 fail_at: Optional[int] = None):
        self.levels = list(levels)
        self.on_call = on_call
        self.fail_at = fail_at
        self.calls = 0

    def __call__(self) -> int:
        idx = self.calls
        self.calls += 1
        if self.fail_at is not None and idx >= self.fail_at:
            raise ProbeError("fake battery unplugged")
        lvl = self.levels[min(idx, len(self.levels) - 1)]
        if self.on_call is not None:
            self.on_call(self.calls)
        return lvl


class ScriptedKeys:
    """read_key replacement: each entry is (delay_s, key); "" means end of input."""

    def __init__(self, script: List[Tuple[float, object]]):
        self.script = list(script)
        self.done = threading.Event()

    def __call__(self) -> str:
        if not self.script:
            self.done.set()
            # behave like a blocked terminal read that never returns
            threading.Event().wait(60)
            return ""
        delay, key = self.script.pop(0)
        if delay:
            time.sleep(delay)
        if isinstance(key, Exception):
            raise key
        return key


class FakeClock:
    def __init__(self, times: Sequence[float]):
        self.times = list(times)
        self.i = 0

    def __call__(self) -> float:
        t = self.times[min(self.i, len(self.times) - 1)]
        self.i += 1
        return t


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def sequence_probe():
    return SequenceProbe


@pytest.fixture
def scripted_keys():
    return ScriptedKeys


@pytest.fixture
def fake_clock():
    return FakeClock


@pytest.fixture
def pty_terminal():
    """A real TerminalModeHandle bound to a pseudo-terminal; yields (handle, master_fd)."""
    pty = pytest.importorskip("pty")
    from batowl.terminal import TerminalModeHandle

    master, slave = pty.openpty()
    stream = open(slave, "rb", buffering=0)
    handle = TerminalModeHandle(stream=stream)
    try:
        yield handle, master
    finally:
        handle.release()
        # unblock a listener that may still be parked on a read
        try:
            os.write(master, b"x")
        except OSError:
            pass
        time.sleep(0.05)
        stream.close()
        os.close(master)


def write_when_active(handle, master: int, keys: Sequence[Tuple[float, bytes]]) -> threading.Thread:
    """Type keys into the pty once raw mode is on (setraw flushes earlier input)."""

    def _run():
        deadline = time.monotonic() + 5.0
        while not handle.active and time.monotonic() < deadline:
            time.sleep(0.01)
        for delay, key in keys:
            time.sleep(delay)
            os.write(master, key)

    th = threading.Thread(target=_run, daemon=True)
    th.start()
    return th


@pytest.fixture
def type_keys():
    return write_when_active
