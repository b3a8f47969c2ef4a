from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .analysis import summarize_series
from .config import prompt_config
from .errors import ConfigParseError, ProbeError, RenderError, TerminalModeError
from .probe import PROBES, select_probe
from .report import ChartConfig, Report
from .session import RecordingSession

logger = logging.getLogger("batowl")

EXIT_OK = 0
EXIT_PROBE = 1
EXIT_TERMINAL = 2
EXIT_RENDER = 3
EXIT_USAGE = 64
EXIT_INTERRUPTED = 130


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    # raw mode does not translate "\n" into a carriage return
    handler.terminator = "\r\n"
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger("batowl")
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batowl",
        description="Record the battery charge level over time and chart it.",
    )
    parser.add_argument("--interval", help="sampling interval, eg: 1s/5m/1h (prompted if omitted)")
    parser.add_argument("--duration", help="stop after, eg: 30m; 0 for no limit (prompted if omitted)")
    parser.add_argument("--output", default=ChartConfig.path, help="chart path (default: %(default)s)")
    parser.add_argument("--figures-dir", help="also write every available figure into this directory")
    parser.add_argument(
        "--probe", default="auto", choices=["auto"] + sorted(PROBES),
        help="battery source (default: pick by platform)",
    )
    parser.add_argument(
        "--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = prompt_config(interval=args.interval, duration=args.duration)
    except ConfigParseError as e:
        logger.error("%s", e)
        return EXIT_USAGE
    except (KeyboardInterrupt, EOFError):
        return EXIT_INTERRUPTED

    probe = select_probe(args.probe)
    print(f"Recording Battery every {int(config.period)} second(s)")

    session = RecordingSession(config, probe, chart=ChartConfig(path=args.output))
    try:
        series = session.record()
    except TerminalModeError as e:
        logger.error("terminal: %s", e)
        return EXIT_TERMINAL
    except ProbeError as e:
        logger.error("battery: %s", e)
        return EXIT_PROBE
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED

    summary = summarize_series(series, config.unit.label)
    rate = summary["drain_rate"]
    logger.info(
        "Recorded %d samples over %d %s(s)%s",
        summary["samples"], summary["duration"], config.unit.label,
        f", average drain {rate:.2f}%/{config.unit.label}" if rate is not None else "",
    )

    try:
        path = session.render()
        if args.figures_dir:
            Report(series=series, unit=config.unit.label).plot(
                all=True, out_dir=args.figures_dir,
            )
    except RenderError as e:
        logger.error("chart: %s", e)
        return EXIT_RENDER
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("chart: %s", e)
        return EXIT_RENDER

    print(f"Successfully generated {path}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
