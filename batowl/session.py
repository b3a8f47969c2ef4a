from __future__ import annotations

import logging
from typing import Callable, Optional

from .config import RecordingConfig
from .listener import QUIT_KEY, SAMPLE_KEY, InputListener
from .recorder import RecordingCoordinator, SampleScheduler, SampleSeries
from .report import ChartConfig, render_chart
from .signals import SignalChannel
from .terminal import TerminalModeHandle
from .watchdog import DeadlineWatchdog

logger = logging.getLogger(__name__)


class RecordingSession:
    """
    Wires one recording together:
      - terminal raw mode held for the whole recording, restored on every exit path
      - keyboard listener and (optional) deadline watchdog feeding one channel
      - coordinator loop, then a single chart render
    """

    def __init__(
        self,
        config: RecordingConfig,
        probe: Callable[[], int],
        terminal: Optional[TerminalModeHandle] = None,
        chart: Optional[ChartConfig] = None,
        scheduler: Optional[SampleScheduler] = None,
    ):
        self.config = config
        self.probe = probe
        self.terminal = terminal if terminal is not None else TerminalModeHandle()
        self.chart = chart or ChartConfig()
        self.scheduler = scheduler

        self.channel: Optional[SignalChannel] = None
        self.listener: Optional[InputListener] = None
        self.watchdog: Optional[DeadlineWatchdog] = None
        self.series: Optional[SampleSeries] = None

    def record(self) -> SampleSeries:
        self.channel = SignalChannel()
        coordinator = RecordingCoordinator(
            self.config, self.probe, self.channel, scheduler=self.scheduler,
        )

        with self.terminal:
            logger.info("Press `%s` to quit, `%s` to force a recording now", QUIT_KEY, SAMPLE_KEY)
            self.listener = InputListener(self.channel, self.terminal.read_key)
            self.watchdog = DeadlineWatchdog(self.channel, self.config.max_duration, self.terminal)
            self.listener.start()
            self.watchdog.start()
            try:
                self.series = coordinator.record()
            finally:
                self.watchdog.cancel()
                self.listener.stop()

        return self.series

    def render(self) -> str:
        if self.series is None:
            raise RuntimeError("render() called before record()")
        return render_chart(self.series, unit=self.config.unit.label, config=self.chart)

    def run(self) -> str:
        self.record()
        return self.render()
