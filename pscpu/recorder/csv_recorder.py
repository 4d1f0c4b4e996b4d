"""
CSV Recorder Module

Append-only sink for cpu samples: one row per sample in pscpu_<pid>.csv,
plus a human readable echo of the same sample.
"""
import csv
import os
import sys
from pathlib import Path
from typing import Optional, TextIO, Union

from pscpu.errors import OutputOpenError, WriteError
from pscpu.monitor.cpu_sample import CpuSample
from pscpu.util.file_utils import csv_file_path
from pscpu.util.log_config import setup_logger

CSV_FILE_MODE = 0o644

logger = setup_logger(__name__)


class CsvRecorder:
    """Write CpuSamples to the csv file of a process"""

    def __init__(
        self,
        folder: Optional[Union[str, Path]],
        pid: int,
        echo: Optional[TextIO] = None,
        sync: bool = False,
    ):
        """
        Initialize the recorder. The file is not touched until open().

        Args:
            folder: Destination folder, empty or None for the current directory
            pid: Process ID, used to name the file
            echo: Stream receiving "<timestamp> - <percent>" lines (default: sys.stdout)
            sync: fsync the file on every flush
        """
        self.path = csv_file_path(folder, pid)
        self.pid = pid
        self.echo = echo
        self.sync = sync
        self.file: Optional[TextIO] = None
        self.writer = None

    @property
    def closed(self) -> bool:
        return self.file is None or self.file.closed

    def open(self) -> "CsvRecorder":
        """
        Open the csv file for append, creating it (mode 0644) if needed.

        Existing rows are kept and never validated.

        Raises:
            OutputOpenError: if the file cannot be created/opened
        """
        if not self.closed:
            return self

        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, CSV_FILE_MODE)
        except OSError as e:
            raise OutputOpenError(self.path, e) from e

        try:
            self.file = os.fdopen(fd, "a", newline="", encoding="utf-8")
        except OSError as e:
            os.close(fd)
            raise OutputOpenError(self.path, e) from e

        self.writer = csv.writer(self.file, lineterminator="\n")
        logger.debug(f"Opened {self.path} for append")
        return self

    def write(self, sample: CpuSample) -> None:
        """
        Append one row for the sample and echo it to the console.

        Raises:
            WriteError: if the sink is not open or the write fails
        """
        if self.closed:
            raise WriteError(self.path, ValueError("I/O operation on closed file"))

        try:
            self.writer.writerow(sample.to_csv_record())
            print(str(sample), file=self.echo or sys.stdout)
        except (OSError, ValueError) as e:
            raise WriteError(self.path, e) from e

    def flush(self) -> None:
        """Push buffered rows to the OS (and to disk when sync is enabled)"""
        if self.closed:
            return

        try:
            self.file.flush()
            if self.sync:
                os.fsync(self.file.fileno())
        except OSError as e:
            raise WriteError(self.path, e) from e

    def close(self) -> None:
        """Flush then close. Safe to call more than once."""
        if self.closed:
            return

        try:
            self.flush()
        finally:
            try:
                self.file.close()
            except OSError as e:
                raise WriteError(self.path, e) from e
            finally:
                self.file = None
                self.writer = None
                logger.debug(f"Closed {self.path}")

    def __enter__(self) -> "CsvRecorder":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
