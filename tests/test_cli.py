import logging
import sys

import pytest

from batowl import cli
from batowl import session as session_mod
from batowl.terminal import TerminalModeHandle


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger("batowl")
    root.handlers[:] = []
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture
def fake_probe(monkeypatch, sequence_probe):
    probe = sequence_probe([77, 76, 75])
    monkeypatch.setattr(cli, "select_probe", lambda name: probe)
    return probe


def test_configure_logging_uses_raw_mode_terminator():
    cli.configure_logging("DEBUG")
    root = logging.getLogger("batowl")
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert root.handlers[0].terminator == "\r\n"


def test_bad_interval_flag_is_usage_error(fake_probe):
    assert cli.main(["--interval", "0s", "--duration", "0"]) == cli.EXIT_USAGE
    assert fake_probe.calls == 0


def test_non_terminal_stdin_exits_with_terminal_code(monkeypatch, fake_probe):
    import io

    monkeypatch.setattr(session_mod, "TerminalModeHandle",
                        lambda: TerminalModeHandle(stream=io.StringIO()))
    assert cli.main(["--interval", "1s", "--duration", "1s"]) == cli.EXIT_TERMINAL
    assert fake_probe.calls == 0


@pytest.mark.skipif(sys.platform.startswith("win"), reason="pty required")
def test_full_run_writes_chart(monkeypatch, pty_terminal, fake_probe, tmp_path, capsys):
    pytest.importorskip("scienceplots")
    handle, _ = pty_terminal
    monkeypatch.setattr(session_mod, "TerminalModeHandle", lambda: handle)
    out = tmp_path / "battery.png"

    code = cli.main([
        "--interval", "1s", "--duration", "1s",
        "--output", str(out), "--figures-dir", str(tmp_path / "figs"),
    ])

    assert code == cli.EXIT_OK
    assert out.exists()
    assert (tmp_path / "figs" / "level_time.png").exists()
    stdout = capsys.readouterr().out
    assert "Recording Battery every 1 second(s)" in stdout
    assert f"Successfully generated {out}" in stdout


@pytest.mark.skipif(sys.platform.startswith("win"), reason="pty required")
def test_probe_failure_exit_code(monkeypatch, pty_terminal, sequence_probe):
    handle, _ = pty_terminal
    monkeypatch.setattr(session_mod, "TerminalModeHandle", lambda: handle)
    monkeypatch.setattr(cli, "select_probe", lambda name: sequence_probe([1], fail_at=0))

    assert cli.main(["--interval", "1s", "--duration", "0"]) == cli.EXIT_PROBE
    assert not handle.active


def test_prompt_interrupted(monkeypatch, fake_probe):
    def boom(**kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "prompt_config", boom)
    assert cli.main([]) == cli.EXIT_INTERRUPTED
