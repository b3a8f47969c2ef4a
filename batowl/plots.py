from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List


@dataclass(frozen=True)
class PlotSpec:
    key: str
    title: str
    fn: Callable[..., Any]
    description: str


def plot_level_time(rep, ax, *, markers: bool = True, **_):
    df = rep.samples_df
    if df.empty:
        return False
    x = df["elapsed"].astype(float)
    y = df["level"].astype(float)
    ax.plot(x, y, marker="o" if markers else None, label="Battery Over Time")
    ax.set_xlabel(f"Time ({rep.unit})")
    ax.set_ylabel("Battery Percentage")
    ax.set_ylim(0, 100)
    ax.legend(loc="best")
    return True


def plot_drain_rate(rep, ax, **_):
    """Percentage points lost per unit between consecutive samples."""
    import numpy as np

    df = rep.samples_df
    if len(df) < 2:
        return False
    t = df["elapsed"].to_numpy(dtype=float)
    lvl = df["level"].to_numpy(dtype=float)
    dt = np.diff(t)
    keep = dt > 0
    if not keep.any():
        return False
    rate = -np.diff(lvl)[keep] / dt[keep]
    ax.step(t[1:][keep], rate, where="post", linewidth=1.8)
    ax.axhline(0.0, linewidth=0.8, alpha=0.5)
    ax.set_xlabel(f"Time ({rep.unit})")
    ax.set_ylabel(f"Drain (%/{rep.unit})")
    return True


# Registry
PLOT_REGISTRY: Dict[str, PlotSpec] = {
    "level_time": PlotSpec(
        key="level_time",
        title="Battery Charge vs Time",
        fn=plot_level_time,
        description="Battery percentage at each recorded sample.",
    ),
    "drain_rate": PlotSpec(
        key="drain_rate",
        title="Battery Drain Rate",
        fn=plot_drain_rate,
        description="Charge lost per unit of time between consecutive samples.",
    ),
}


def list_figures() -> List[str]:
    return sorted(PLOT_REGISTRY.keys())
