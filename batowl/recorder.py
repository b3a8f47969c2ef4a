from __future__ import annotations

import logging
import math
import queue
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from .config import RecordingConfig
from .signals import ControlSignal, SignalChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    elapsed: int  # in the recording's unit
    level: int    # percent


class SampleSeries:
    """Append-only, ordered run of samples. Index 0 is the initial reading."""

    def __init__(self):
        self._samples: List[Sample] = []

    def append(self, sample: Sample) -> None:
        if self._samples and sample.elapsed < self._samples[-1].elapsed:
            raise ValueError(
                f"elapsed went backwards: {sample.elapsed} < {self._samples[-1].elapsed}"
            )
        self._samples.append(sample)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def __getitem__(self, i: int) -> Sample:
        return self._samples[i]

    @property
    def samples(self) -> Tuple[Sample, ...]:
        return tuple(self._samples)

    @property
    def times(self) -> List[int]:
        return [s.elapsed for s in self._samples]

    @property
    def levels(self) -> List[int]:
        return [s.level for s in self._samples]

    @property
    def last(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None


class SampleScheduler:
    """
    Fixed-phase periodic ticker on a monotonic clock.

    Tick k is due at start + k * period. Ticks missed while the caller was busy
    are dropped, not delivered in a burst.
    """

    def __init__(self, period_s: float, clock: Callable[[], float] = time.monotonic):
        if period_s <= 0:
            raise ValueError("period_s must be positive")
        self.period_s = float(period_s)
        self.clock = clock

        self._start: Optional[float] = None
        self._k = 1
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self) -> None:
        self._start = self.clock()
        self._k = 1
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def next_due(self) -> Optional[float]:
        if self._cancelled or self._start is None:
            return None
        return self._start + self._k * self.period_s

    def time_until_next(self) -> Optional[float]:
        """Seconds until the next tick (<= 0 when due), None once cancelled."""
        due = self.next_due()
        if due is None:
            return None
        return due - self.clock()

    def consume(self) -> None:
        """Acknowledge the due tick and move to the next slot in the future."""
        if self._start is None:
            return
        now = self.clock()
        self._k = max(self._k + 1, int(math.floor((now - self._start) / self.period_s)) + 1)


class RecordingCoordinator:
    """
    Owns the sample series and decides when the recording ends.

    Multiplexes the periodic scheduler with the signal channel: pending
    signals are served before a due tick, SAMPLE_NOW appends a sample without
    rebasing the scheduler, STOP returns the series without a final sample.
    """

    def __init__(
        self,
        config: RecordingConfig,
        probe: Callable[[], int],
        channel: SignalChannel,
        scheduler: Optional[SampleScheduler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.probe = probe
        self.channel = channel
        self.clock = clock
        self.scheduler = scheduler or SampleScheduler(config.period, clock=clock)

        self.series = SampleSeries()
        self._started_at: Optional[float] = None
        self._last_at: Optional[float] = None
        self._accum_s = 0.0

    def _elapsed_units(self) -> int:
        return int(self._accum_s // self.config.unit.seconds)

    def _take(self, source: str) -> Sample:
        # read first: a failing probe must not advance the clock bookkeeping
        level = self.probe()
        now = self.clock()
        self._accum_s += max(0.0, now - self._last_at)
        self._last_at = now

        sample = Sample(elapsed=self._elapsed_units(), level=int(level))
        self.series.append(sample)
        logger.info(
            "Updated Record [%d] (%s) t=%d%s level=%d%%",
            len(self.series) - 1, source, sample.elapsed, self.config.unit.value, sample.level,
        )
        return sample

    def _past_deadline(self) -> bool:
        if not self.config.bounded or self._started_at is None:
            return False
        return self.clock() - self._started_at >= self.config.max_duration

    def _wait_timeout(self) -> Optional[float]:
        timeout = self.scheduler.time_until_next()
        if not self.config.bounded or self._started_at is None:
            return timeout
        remaining = self._started_at + self.config.max_duration - self.clock()
        return remaining if timeout is None else min(timeout, remaining)

    def record(self) -> SampleSeries:
        try:
            level = self.probe()
            self._started_at = self._last_at = self.clock()
            self.series.append(Sample(elapsed=0, level=int(level)))
            logger.info("Initial record: level=%d%%", level)

            self.scheduler.start()
            while True:
                try:
                    signal = self.channel.get(timeout=self._wait_timeout())
                except queue.Empty:
                    if self._past_deadline():
                        # no scheduled sample past the deadline
                        self.channel.request_stop()
                        continue
                    due = self.scheduler.time_until_next()
                    if due is not None and due > 0:
                        continue
                    self.scheduler.consume()
                    self._take("tick")
                    continue

                if signal is ControlSignal.STOP:
                    logger.debug("stop observed after %d samples", len(self.series))
                    break
                if signal is ControlSignal.SAMPLE_NOW:
                    self._take("forced")
        finally:
            self.scheduler.cancel()
            self.channel.close()

        return self.series


def record(config: RecordingConfig, probe: Callable[[], int], channel: SignalChannel) -> SampleSeries:
    return RecordingCoordinator(config, probe, channel).record()
