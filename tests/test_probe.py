import subprocess
from collections import namedtuple

import pytest

from batowl import probe as probe_mod
from batowl.errors import ProbeError
from batowl.probe import (
    PowerShellBatteryProbe,
    PsutilBatteryProbe,
    SysfsBatteryProbe,
    select_probe,
)


def _battery(root, name="BAT0", capacity="87\n"):
    d = root / name
    d.mkdir()
    (d / "capacity").write_text(capacity, encoding="utf-8")
    return d


def test_sysfs_reads_first_battery(tmp_path):
    _battery(tmp_path, "BAT1", "40\n")
    _battery(tmp_path, "BAT0", "87\n")
    (tmp_path / "AC").mkdir()

    p = SysfsBatteryProbe(root=str(tmp_path))
    assert p() == 87
    assert p.device.name == "BAT0"


def test_sysfs_without_battery(tmp_path):
    with pytest.raises(ProbeError, match="failed to get battery"):
        SysfsBatteryProbe(root=str(tmp_path))()


@pytest.mark.parametrize("raw", ["150\n", "-1", "full", ""])
def test_sysfs_rejects_bad_values(tmp_path, raw):
    _battery(tmp_path, capacity=raw)
    with pytest.raises(ProbeError):
        SysfsBatteryProbe(root=str(tmp_path)).read_level()


def test_sysfs_missing_capacity_file(tmp_path):
    (tmp_path / "BAT0").mkdir()
    with pytest.raises(ProbeError, match="failed to read"):
        SysfsBatteryProbe(root=str(tmp_path)).read_level()


def test_powershell_parses_output(monkeypatch):
    def fake_run(cmd, **kwargs):
        assert cmd[0] == "powershell"
        return subprocess.CompletedProcess(cmd, 0, stdout="55\r\n", stderr="")

    monkeypatch.setattr(probe_mod.subprocess, "run", fake_run)
    assert PowerShellBatteryProbe()() == 55


def test_powershell_missing(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError("powershell")

    monkeypatch.setattr(probe_mod.subprocess, "run", fake_run)
    with pytest.raises(ProbeError, match="Failed to get battery level"):
        PowerShellBatteryProbe()()


def test_powershell_empty_output(monkeypatch):
    monkeypatch.setattr(
        probe_mod.subprocess, "run",
        lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout="\r\n", stderr=""),
    )
    with pytest.raises(ProbeError):
        PowerShellBatteryProbe()()


def test_psutil_probe(monkeypatch):
    psutil = pytest.importorskip("psutil")
    Battery = namedtuple("Battery", "percent secsleft power_plugged")
    monkeypatch.setattr(psutil, "sensors_battery", lambda: Battery(66.6, 100, False))
    assert PsutilBatteryProbe()() == 67

    monkeypatch.setattr(psutil, "sensors_battery", lambda: None)
    with pytest.raises(ProbeError, match="no battery"):
        PsutilBatteryProbe()()


@pytest.mark.parametrize("platform,cls", [
    ("linux", SysfsBatteryProbe),
    ("win32", PowerShellBatteryProbe),
    ("darwin", PsutilBatteryProbe),
    ("freebsd13", PsutilBatteryProbe),
])
def test_select_probe_by_platform(platform, cls):
    assert isinstance(select_probe(platform=platform), cls)


def test_select_probe_by_name():
    assert isinstance(select_probe("psutil", platform="linux"), PsutilBatteryProbe)
    with pytest.raises(ValueError):
        select_probe("acpi")
