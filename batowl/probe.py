from __future__ import annotations

import glob
import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .errors import ProbeError

logger = logging.getLogger(__name__)

BatteryProbe = Callable[[], int]


def _to_percentage(raw, source: str) -> int:
    try:
        lvl = int(str(raw).strip())
    except (TypeError, ValueError) as e:
        raise ProbeError(f"{source}: unreadable battery level {raw!r}") from e
    if not 0 <= lvl <= 100:
        raise ProbeError(f"{source}: battery level out of range: {lvl}")
    return lvl


@dataclass
class BatteryDevice:
    name: Optional[str] = None
    path: Optional[str] = None


class SysfsBatteryProbe:
    """Linux: reads ``capacity`` from the first /sys/class/power_supply/BAT* entry."""

    def __init__(self, root: str = "/sys/class/power_supply"):
        self.root = root
        self.device = BatteryDevice()

    def _locate(self) -> str:
        if self.device.path is None:
            found = sorted(glob.glob(os.path.join(self.root, "BAT*")))
            if not found:
                raise ProbeError(f"failed to get battery: no BAT* under {self.root}")
            self.device.path = found[0]
            self.device.name = os.path.basename(found[0])
            logger.debug("using battery %s", self.device.path)
        return self.device.path

    def read_level(self) -> int:
        path = os.path.join(self._locate(), "capacity")
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise ProbeError(f"failed to read {path}: {e}") from e
        return _to_percentage(raw, path)

    def __call__(self) -> int:
        return self.read_level()


class PowerShellBatteryProbe:
    """Windows: queries Win32_Battery.EstimatedChargeRemaining through PowerShell."""

    QUERY = (
        "(Get-WmiObject -Query 'SELECT EstimatedChargeRemaining FROM Win32_Battery')"
        ".EstimatedChargeRemaining"
    )

    def __init__(self, timeout_s: float = 5.0):
        self.timeout_s = float(timeout_s)
        self.device = BatteryDevice(name="Win32_Battery")

    def read_level(self) -> int:
        try:
            result = subprocess.run(
                ["powershell", "-Command", self.QUERY],
                capture_output=True, text=True, timeout=self.timeout_s, check=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise ProbeError(f"Failed to get battery level: {e}") from e
        return _to_percentage(result.stdout, "Win32_Battery")

    def __call__(self) -> int:
        return self.read_level()


class PsutilBatteryProbe:
    """Any other platform: psutil.sensors_battery()."""

    def __init__(self):
        self.device = BatteryDevice(name="psutil")

    def read_level(self) -> int:
        import psutil

        try:
            bat = psutil.sensors_battery()
        except (OSError, RuntimeError) as e:
            raise ProbeError(f"psutil: {e}") from e
        if bat is None:
            raise ProbeError("psutil: no battery found")
        return _to_percentage(int(round(bat.percent)), "psutil")

    def __call__(self) -> int:
        return self.read_level()


PROBES: Dict[str, Callable[[], BatteryProbe]] = {
    "sysfs": SysfsBatteryProbe,
    "powershell": PowerShellBatteryProbe,
    "psutil": PsutilBatteryProbe,
}


def select_probe(name: str = "auto", platform: Optional[str] = None) -> BatteryProbe:
    if name != "auto":
        if name not in PROBES:
            raise ValueError(f"Unknown probe '{name}'. Available: {', '.join(sorted(PROBES))}")
        return PROBES[name]()

    platform = platform or sys.platform
    if platform.startswith("win"):
        return PowerShellBatteryProbe()
    if platform.startswith("linux"):
        return SysfsBatteryProbe()
    return PsutilBatteryProbe()
