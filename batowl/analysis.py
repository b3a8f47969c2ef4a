from __future__ import annotations

from typing import Optional

from .recorder import SampleSeries


def level_delta(series: SampleSeries) -> int:
    """Charge gained (positive) or lost (negative) over the whole recording."""
    if len(series) < 2:
        return 0
    return series[-1].level - series[0].level


def drain_rate(series: SampleSeries) -> Optional[float]:
    """Average percentage points lost per unit of elapsed time; None without a time span."""
    if len(series) < 2:
        return None
    dt = series[-1].elapsed - series[0].elapsed
    if dt <= 0:
        return None
    return -level_delta(series) / float(dt)


def summarize_series(series: SampleSeries, unit: str) -> dict:
    out = {
        "samples": len(series),
        "unit": unit,
        "duration": series[-1].elapsed if len(series) else 0,
        "level_start": series[0].level if len(series) else None,
        "level_end": series[-1].level if len(series) else None,
        "level_delta": level_delta(series),
        "drain_rate": drain_rate(series),
    }
    return out
