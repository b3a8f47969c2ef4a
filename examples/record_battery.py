from batowl import RecordingConfig, RecordingSession, Unit
from batowl.probe import select_probe
from batowl.report import ChartConfig, Report

# Sample every 30s for at most an hour; press `r` to force a reading, `q` to stop.
cfg = RecordingConfig(interval=30, unit=Unit.SECOND, max_duration=3600)

session = RecordingSession(cfg, select_probe(), chart=ChartConfig(path="results/points.png"))
series = session.record()
session.render()

# Extra figures (drain rate etc.) from the same series.
rep = Report(series=series, unit=cfg.unit.label)
rep.plot(all=True, out_dir="results/figures")

print("Done. Chart -> results/points.png")
print("Available figure keys:", rep.list_figures())
