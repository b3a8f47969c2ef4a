from __future__ import annotations

import logging
import os
import textwrap
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

# Headless backend to avoid any GUI blocking/hanging
import matplotlib
matplotlib.use("Agg")

from .errors import RenderError
from .recorder import SampleSeries

logger = logging.getLogger(__name__)


def _apply_publication_style(style: str = "science"):
    import matplotlib as mpl
    import matplotlib.pyplot as plt

    try:
        import scienceplots  # noqa: F401
    except ImportError as e:
        raise RenderError(
            "SciencePlots is required. Install with: pip install SciencePlots"
        ) from e

    # no-latex: charts must render on hosts without a TeX install
    plt.style.use([style, "no-latex"])

    mpl.rcParams.update({
        "figure.facecolor": "#f7f7f7",
        "axes.facecolor": "#ffffff",

        "axes.edgecolor": "#333333",
        "axes.linewidth": 1.0,
        "axes.labelcolor": "#222222",

        "axes.grid": True,
        "grid.color": "#dddddd",
        "grid.linestyle": "-",
        "grid.linewidth": 0.7,
        "axes.axisbelow": True,

        "font.size": 11,
        "axes.titlesize": 13,
        "axes.labelsize": 11,

        "lines.linewidth": 2.5,
        "lines.markersize": 5,

        "legend.frameon": False,
    })


@dataclass(frozen=True)
class ChartConfig:
    path: str = "points.png"
    size_in: Tuple[float, float] = (10.0, 10.0)
    dpi: int = 100
    figure: str = "level_time"
    style: str = "science"


@dataclass
class Report:
    """In-memory view over a finished recording, used for charting."""

    series: SampleSeries
    unit: str = "second"

    def __post_init__(self):
        self._samples_df = None

    @property
    def samples_df(self):
        if self._samples_df is None:
            import pandas as pd

            rows = [{"elapsed": s.elapsed, "level": s.level} for s in self.series]
            self._samples_df = pd.DataFrame(rows, columns=["elapsed", "level"])
        return self._samples_df

    def list_figures(self) -> List[str]:
        from .plots import list_figures
        return list_figures()

    def plot_one(
        self,
        fig: str,
        *,
        out_path: Optional[str] = None,
        figsize: Tuple[float, float] = (7.2, 4.2),
        dpi: int = 300,
        style: str = "science",
        **opts,
    ) -> bool:
        """Plot a single figure by key. Returns True if produced, False if skipped."""
        from .plots import PLOT_REGISTRY

        if fig not in PLOT_REGISTRY:
            raise ValueError(f"Unknown figure '{fig}'. Available: {', '.join(self.list_figures())}")

        spec = PLOT_REGISTRY[fig]
        import matplotlib.pyplot as plt

        _apply_publication_style(style)

        fig_obj, ax = plt.subplots(figsize=figsize, constrained_layout=True)
        try:
            for spine in ("top", "right"):
                ax.spines[spine].set_visible(False)
            ax.tick_params(direction="out", length=4, width=0.8)

            ok = bool(spec.fn(self, ax, **opts))
            if ok:
                ax.set_title(textwrap.fill(spec.title, width=34), pad=12)
                if out_path is not None:
                    parent = os.path.dirname(out_path)
                    if parent:
                        os.makedirs(parent, exist_ok=True)
                    fig_obj.savefig(out_path, dpi=dpi, format="png")
        finally:
            plt.close(fig_obj)
        return ok

    def plot(
        self,
        *,
        figs: Optional[Sequence[str]] = None,
        all: bool = False,
        out_dir: Optional[str] = None,
        **opts,
    ) -> Dict[str, bool]:
        """Plot selected figures (or all=True) as ``<out_dir>/<key>.png``."""
        keys = list(self.list_figures()) if all else list(figs or [])
        if not keys:
            raise ValueError("No figures requested. Use all=True or provide figs=[...]")
        out: Dict[str, bool] = {}
        for k in keys:
            path = os.path.join(out_dir, f"{k}.png") if out_dir is not None else None
            out[k] = self.plot_one(k, out_path=path, **opts)
        return out


def render_chart(series: SampleSeries, unit: str = "second", config: Optional[ChartConfig] = None) -> str:
    """Write the fixed-size battery chart. Raises RenderError on any failure."""
    config = config or ChartConfig()
    rep = Report(series=series, unit=unit)
    try:
        ok = rep.plot_one(
            config.figure,
            out_path=config.path,
            figsize=config.size_in,
            dpi=config.dpi,
            style=config.style,
        )
    except RenderError:
        raise
    except (OSError, ValueError, RuntimeError) as e:
        raise RenderError(f"failed to render {config.path}: {e}") from e
    if not ok:
        raise RenderError(f"nothing to plot for {config.figure}")
    logger.debug("chart written to %s", config.path)
    return config.path
