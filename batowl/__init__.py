"""batowl: record battery charge over time and chart it."""

from .config import RecordingConfig, Unit
from .recorder import RecordingCoordinator, Sample, SampleSeries, record
from .report import Report, render_chart
from .session import RecordingSession
from .signals import ControlSignal, SignalChannel

__all__ = [
    "ControlSignal",
    "RecordingConfig",
    "RecordingCoordinator",
    "RecordingSession",
    "Report",
    "Sample",
    "SampleSeries",
    "SignalChannel",
    "Unit",
    "record",
    "render_chart",
]
