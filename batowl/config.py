from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .errors import ConfigParseError

logger = logging.getLogger(__name__)


class Unit(enum.Enum):
    SECOND = "s"
    MINUTE = "m"
    HOUR = "h"

    @property
    def seconds(self) -> int:
        return _UNIT_SECONDS[self]

    @property
    def label(self) -> str:
        return self.name.lower()


_UNIT_SECONDS = {Unit.SECOND: 1, Unit.MINUTE: 60, Unit.HOUR: 3600}

DEFAULT_INTERVAL = 5
DEFAULT_UNIT = Unit.MINUTE
DEFAULT_MAX_DURATION = 0.0


@dataclass(frozen=True)
class RecordingConfig:
    interval: int = DEFAULT_INTERVAL
    unit: Unit = DEFAULT_UNIT
    max_duration: float = DEFAULT_MAX_DURATION  # seconds, 0 = unbounded

    def __post_init__(self):
        if not isinstance(self.unit, Unit):
            raise ConfigParseError(f"Unsupported unit: `{self.unit}`")
        if isinstance(self.interval, bool) or not isinstance(self.interval, int):
            raise ConfigParseError(f"Interval must be a whole number, got {self.interval!r}")
        if self.interval <= 0:
            raise ConfigParseError("Interval cannot be 0 or negative")
        if self.max_duration < 0:
            raise ConfigParseError("Duration cannot be negative")

    @property
    def period(self) -> float:
        """Sampling period in seconds."""
        return float(self.interval * self.unit.seconds)

    @property
    def bounded(self) -> bool:
        return self.max_duration > 0


def _split_number(text: str) -> Tuple[str, str]:
    i = 0
    while i < len(text) and text[i] in "0123456789":
        i += 1
    return text[:i], text[i:]


def parse_unit(text: str) -> Unit:
    if not text:
        raise ConfigParseError("Unit must be provided")
    for unit in Unit:
        if unit.value == text:
            return unit
    raise ConfigParseError(f"Unsupported unit: `{text}`")


def parse_interval(text: str) -> Tuple[int, Unit]:
    """
    Parse an interval such as ``30s``, ``5m`` or ``1h``.

    Empty input yields the default (5 minutes).
    """
    text = text.strip()
    if not text:
        return DEFAULT_INTERVAL, DEFAULT_UNIT

    digits, rest = _split_number(text)
    if not digits:
        raise ConfigParseError("Interval must be a number")
    num = int(digits)
    if num <= 0:
        raise ConfigParseError("Interval cannot be 0 or negative")
    return num, parse_unit(rest)


def parse_duration(text: str) -> float:
    """
    Parse a stop-after duration into seconds.

    Empty input and a bare ``0`` both mean no limit.
    """
    text = text.strip()
    if not text:
        return DEFAULT_MAX_DURATION

    digits, rest = _split_number(text)
    if not digits:
        raise ConfigParseError("Duration must be a number")
    num = int(digits)
    if num == 0:
        return DEFAULT_MAX_DURATION
    return float(num * parse_unit(rest).seconds)


def _ask(question: str, parse: Callable, read: Callable[[str], str], write: Callable[[str], None]):
    write(question)
    while True:
        try:
            return parse(read("> "))
        except ConfigParseError as e:
            logger.debug("rejected input: %s", e)
            write(f"{e}, Try Again")


def prompt_config(
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    interval: Optional[str] = None,
    duration: Optional[str] = None,
) -> RecordingConfig:
    """
    Build a RecordingConfig, asking interactively for whatever was not given.

    Pre-supplied ``interval``/``duration`` strings use the same grammar as the
    prompt; a malformed pre-supplied value raises ConfigParseError.
    """
    if interval is None:
        num, unit = _ask(
            "Enter interval to record after (eg: 1s/5m/1h) [DEFAULT: 5m]",
            parse_interval, read, write,
        )
    else:
        num, unit = parse_interval(interval)

    if duration is None:
        max_duration = _ask(
            "Enter duration to stop after, 0 for no limit (eg: 1s/5m/1h) [DEFAULT: 0]",
            parse_duration, read, write,
        )
    else:
        max_duration = parse_duration(duration)

    return RecordingConfig(interval=num, unit=unit, max_duration=max_duration)
