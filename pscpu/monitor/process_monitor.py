"""
Process Monitor Module

Runs the sample -> record -> sleep loop for one process and owns its
lifecycle. Shutdown requests arrive through a threading.Event: the signal
handler only sets it, the loop notices it (even mid-sleep) and is the only
one that flushes and closes the csv file.
"""
import signal
import threading
from typing import Dict, Optional

from pscpu.consts.MonitorState import MonitorState
from pscpu.errors import PscpuError, QueryError
from pscpu.monitor.cpu_sample import CpuSample
from pscpu.monitor.sampler import Sampler
from pscpu.recorder.csv_recorder import CsvRecorder
from pscpu.util.log_config import setup_logger

DEFAULT_INTERVAL = 5  # seconds

STOP_SIGNAL = "signal"
STOP_COMPLETED = "completed"
STOP_ERROR = "error"

logger = setup_logger(__name__)


class ProcessMonitor:
    """Periodically sample the cpu usage of a process into a CsvRecorder"""

    def __init__(
        self,
        pid: int,
        sampler: Sampler,
        recorder: CsvRecorder,
        interval: float = DEFAULT_INTERVAL,
        max_samples: Optional[int] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        """
        Initialize process monitor.

        Args:
            pid: Process ID to monitor
            sampler: Produces one CpuSample per call
            recorder: Sink for the samples, opened by run() if needed
            interval: Sampling interval in seconds (default: 5s)
            max_samples: Stop after this many samples (None: run until stopped)
            stop_event: Cancellation channel, set to request shutdown
        """
        self.pid = pid
        self.sampler = sampler
        self.recorder = recorder
        self.interval = interval
        self.max_samples = max_samples
        self.stop_event = stop_event or threading.Event()
        self.state = MonitorState.STARTING
        self.stop_reason: Optional[str] = None
        self.samples_taken = 0

    def request_stop(self, signum: Optional[int] = None, frame=None) -> None:
        """Ask the loop to stop. Usable directly as a signal handler."""
        if signum is not None:
            logger.info(f"Received {signal.Signals(signum).name}, stopping")
        self.stop_event.set()

    def run_once(self) -> CpuSample:
        """Take one sample, persist it and echo it"""
        sample = self.sampler.sample(self.pid)
        self.recorder.write(sample)
        self.samples_taken += 1
        return sample

    def _finished(self) -> bool:
        return self.max_samples is not None and self.samples_taken >= self.max_samples

    def run(self) -> None:
        """
        Main monitoring loop. Returns on a stop request or after max_samples.

        Raises:
            PscpuError: on the first sampler/recorder failure, after the csv
                        file has been flushed and closed
        """
        self.state = MonitorState.STARTING
        # Opening failure is fatal before any sample is taken
        try:
            self.recorder.open()
        except PscpuError:
            self.state = MonitorState.STOPPED
            self.stop_reason = STOP_ERROR
            raise
        logger.info(f"Monitoring PID {self.pid} every {self.interval}s into {self.recorder.path}")

        try:
            self.state = MonitorState.RUNNING
            while not self.stop_event.is_set():
                try:
                    self.run_once()
                except QueryError:
                    # ps shares the terminal's process group and dies on the same ctrl+c
                    if self.stop_event.is_set():
                        break
                    raise

                if self._finished():
                    self.stop_reason = STOP_COMPLETED
                    break

                # Sleep until next sample, woken early by a stop request
                self.stop_event.wait(self.interval)

            if self.stop_reason is None:
                self.stop_reason = STOP_SIGNAL
            self.state = MonitorState.TERMINATING
        except PscpuError as e:
            self.state = MonitorState.TERMINATING
            self.stop_reason = STOP_ERROR
            logger.debug(f"Monitor loop failed after {self.samples_taken} sample(s): {e}")
            raise
        finally:
            try:
                self.recorder.close()
            finally:
                self.state = MonitorState.STOPPED
                logger.debug(f"Monitor stopped ({self.stop_reason}), {self.samples_taken} sample(s) taken")


def install_signal_handlers(monitor: ProcessMonitor) -> Dict[int, object]:
    """
    Route SIGINT and SIGTERM to monitor.request_stop.

    Returns:
        The previous handlers, keyed by signal number
    """
    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, monitor.request_stop)
    return previous


def restore_signal_handlers(previous: Dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)
