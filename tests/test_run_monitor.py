import os
import re
import signal
import subprocess
import sys
import time
from pathlib import Path

import pytest

from pscpu import __version__
from pscpu.run_monitor import EXIT_CONFIG_ERROR, EXIT_FAILURE, EXIT_OK, main


def test_help_describes_row_format(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "RFC3339_TIMESTAMP,CPU_USAGE" in out
    assert "2015-01-05T14:44:05+01:00,66.6" in out
    assert "--pid" in out


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_missing_pid():
    assert main([]) == EXIT_CONFIG_ERROR


def test_zero_pid():
    assert main(["--pid", "0"]) == EXIT_CONFIG_ERROR


def test_non_integer_pid():
    with pytest.raises(SystemExit) as excinfo:
        main(["--pid", "abc"])
    assert excinfo.value.code == 2


def test_samples_into_folder(tmp_path, fake_ps, capsys):
    assert main(["-p", "7", "-f", str(tmp_path), "-s", "1", "-n", "2"]) == EXIT_OK

    rows = (tmp_path / "pscpu_7.csv").read_text().splitlines()
    assert len(rows) == 2
    assert all(re.fullmatch(r"\S+,42\.3", row) for row in rows)
    out = capsys.readouterr().out.splitlines()
    assert [line.split(" - ")[1] for line in out] == ["42.3", "42.3"]


def test_vanished_process(tmp_path, fake_ps):
    assert main(["-p", "8", "-f", str(tmp_path)]) == EXIT_FAILURE
    assert (tmp_path / "pscpu_8.csv").read_text() == ""


def test_unwritable_output(tmp_path, fake_ps):
    assert main(["-p", "7", "-f", str(tmp_path / "missing")]) == EXIT_FAILURE


def test_config_file(tmp_path, fake_ps):
    config_file = tmp_path / "pscpu.yaml"
    config_file.write_text(f"pid: 7\nfolder: {tmp_path}\ncount: 1\n", encoding="utf-8")
    assert main(["--config", str(config_file)]) == EXIT_OK
    assert len((tmp_path / "pscpu_7.csv").read_text().splitlines()) == 1


def test_log_file(tmp_path, fake_ps):
    log_file = tmp_path / "logs" / "pscpu.log"
    assert main(["-p", "7", "-f", str(tmp_path), "-n", "1", "--log-file", str(log_file), "-v"]) == EXIT_OK
    assert "Monitoring PID 7" in log_file.read_text()


class BrokenPipeStream:

    def write(self, text):
        raise BrokenPipeError(32, "Broken pipe")

    def flush(self):
        pass


def test_broken_stdout_is_a_write_error(tmp_path, fake_ps, monkeypatch):
    monkeypatch.setattr(sys, "stdout", BrokenPipeStream())
    assert main(["-p", "7", "-f", str(tmp_path), "-n", "3"]) == EXIT_FAILURE


def test_unusable_log_file(tmp_path, fake_ps):
    not_a_folder = tmp_path / "plain-file"
    not_a_folder.write_text("")
    log_file = not_a_folder / "pscpu.log"
    assert main(["-p", "7", "-f", str(tmp_path), "-n", "1", "--log-file", str(log_file)]) == EXIT_CONFIG_ERROR
    assert not (tmp_path / "pscpu_7.csv").exists()


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_sigint_during_sleep_exits_cleanly(tmp_path):
    fake_ps = tmp_path / "fake-ps"
    fake_ps.write_text('#!/bin/sh\necho "  12,5"\n')
    fake_ps.chmod(0o755)
    csv_file = tmp_path / "pscpu_7.csv"

    repo_root = Path(__file__).resolve().parents[1]
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(repo_root), env.get("PYTHONPATH")]))
    env["PYTHONUNBUFFERED"] = "1"
    process = subprocess.Popen(
        [sys.executable, "-m", "pscpu", "-p", "7", "-f", str(tmp_path), "-s", "3600",
         "--ps-command", str(fake_ps)],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
        text=True,
    )
    try:
        deadline = time.monotonic() + 20
        # Interrupt only once the first sample has been echoed
        while time.monotonic() < deadline and process.poll() is None:
            if "12.5" in (process.stdout.readline() or ""):
                break
        assert process.poll() is None

        process.send_signal(signal.SIGINT)
        stdout, stderr = process.communicate(timeout=20)
    finally:
        if process.poll() is None:
            process.kill()
            process.wait()

    assert process.returncode == 0, stderr
    rows = csv_file.read_text().splitlines()
    assert len(rows) == 1
    assert re.fullmatch(r"\S+,12\.5", rows[0])
