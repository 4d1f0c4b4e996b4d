import subprocess
from datetime import datetime, timezone

import pytest

import pscpu.monitor.sampler as sampler_module


class FakePs:
    """Stand-in for the ps command: canned output per pid, non-zero exit otherwise"""

    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    def __call__(self, cmd_args, **kwargs):
        self.calls.append(cmd_args)
        pid = int(cmd_args[cmd_args.index("-p") + 1])
        if pid in self.outputs:
            return subprocess.CompletedProcess(cmd_args, 0, stdout=self.outputs[pid], stderr="")
        return subprocess.CompletedProcess(cmd_args, 1, stdout="", stderr="")


@pytest.fixture
def fake_ps(monkeypatch):
    """Route PsSampler to a FakePs answering '  42.3\\n' for PID 7"""
    fake = FakePs({7: "  42.3\n"})
    monkeypatch.setattr(sampler_module, "resolve_cmd", lambda cmd: cmd)
    monkeypatch.setattr(sampler_module.subprocess, "run", fake)
    return fake


@pytest.fixture
def fixed_clock():
    moment = datetime(2014, 1, 2, 18, 26, 56, tzinfo=timezone.utc)
    return lambda: moment
