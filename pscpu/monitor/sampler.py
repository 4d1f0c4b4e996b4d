"""
Sampler Module

Queries the OS for the cpu usage of a single process and turns the answer
into a CpuSample. Two backends share the same contract: `ps` (the default)
and psutil.
"""
import subprocess
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, Optional

import psutil

from pscpu.consts.SamplerBackend import SamplerBackend
from pscpu.errors import ParseError, ProcessNotFound, QueryError
from pscpu.monitor.cpu_sample import CpuSample, local_now
from pscpu.util.file_utils import resolve_cmd
from pscpu.util.log_config import setup_logger

DEFAULT_PS_COMMAND = "ps"
PSUTIL_PRIME_INTERVAL = 0.1  # seconds

logger = setup_logger(__name__)


def parse_cpu_percent(raw: str, pid: Optional[int] = None) -> float:
    """
    Parse the textual cpu usage returned by the status query.

    Surrounding whitespace is dropped and the first comma is read as a
    decimal point, so "12,5" and "12.5" give the same value.

    Raises:
        ParseError: if the cleaned output is not a number
    """
    cleaned = raw.strip().replace(",", ".", 1)
    try:
        return float(cleaned)
    except ValueError as e:
        raise ParseError(raw, pid, e) from e


class Sampler(ABC):
    """Abstract base Sampler.

    Subclasses implement _measure. sample() takes the timestamp before the
    query is issued, so query latency never shifts it.
    """

    def __init__(self, clock: Callable[[], datetime] = local_now) -> None:
        self.clock = clock

    def sample(self, pid: int) -> CpuSample:
        captured_at = self.clock()
        cpu_percent = self._measure(pid)
        return CpuSample(captured_at=captured_at, cpu_percent=cpu_percent)

    @abstractmethod
    def _measure(self, pid: int) -> float:
        """Return the current cpu usage of pid, in %."""
        pass


class PsSampler(Sampler):
    """Run `ps -p <pid> -o %cpu=` and parse its output"""

    def __init__(self, cmd: str = DEFAULT_PS_COMMAND, clock: Callable[[], datetime] = local_now) -> None:
        super().__init__(clock)
        self.cmd = cmd

    def build_command(self, pid: int) -> list:
        return [resolve_cmd(self.cmd), "-p", str(pid), "-o", "%cpu="]

    def _run_query(self, pid: int) -> str:
        try:
            cmd_args = self.build_command(pid)
            completed = subprocess.run(
                cmd_args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise QueryError(pid, f"cannot launch {self.cmd}: {e}") from e

        if completed.returncode != 0:
            reason = completed.stderr.strip() or f"exit status {completed.returncode}"
            raise ProcessNotFound(pid, reason)
        return completed.stdout

    def _measure(self, pid: int) -> float:
        output = self._run_query(pid)
        logger.debug(f"ps output for PID {pid}: {output!r}")
        return parse_cpu_percent(output, pid)


class PsutilSampler(Sampler):
    """Read the cpu usage through psutil instead of spawning ps"""

    def __init__(self, prime_interval: float = PSUTIL_PRIME_INTERVAL, clock: Callable[[], datetime] = local_now) -> None:
        super().__init__(clock)
        self.prime_interval = prime_interval
        self.processes: Dict[int, psutil.Process] = {}

    def _measure(self, pid: int) -> float:
        try:
            process = self.processes.get(pid)
            if process is None:
                process = psutil.Process(pid)
                self.processes[pid] = process
                # First call has nothing to compare with: block for a short window
                return process.cpu_percent(interval=self.prime_interval)
            # Later calls measure usage since the previous sample
            return process.cpu_percent(interval=None)
        except psutil.NoSuchProcess as e:
            self.processes.pop(pid, None)
            raise ProcessNotFound(pid, str(e)) from e
        except psutil.Error as e:
            raise QueryError(pid, str(e)) from e


def build_sampler(
    backend: SamplerBackend = SamplerBackend.PS,
    ps_command: str = DEFAULT_PS_COMMAND,
    clock: Callable[[], datetime] = local_now,
) -> Sampler:
    if backend == SamplerBackend.PS:
        return PsSampler(cmd=ps_command, clock=clock)
    elif backend == SamplerBackend.PSUTIL:
        return PsutilSampler(clock=clock)

    raise ValueError(f"Unsupported sampler backend: {backend}")
