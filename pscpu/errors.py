"""
Error types raised by the sampler, the recorder and the configuration layer.

None of these are retried: run_monitor.main maps each one to an exit status.
"""
from pathlib import Path
from typing import Optional, Union


class PscpuError(Exception):
    """Base class for every pscpu failure"""


class ConfigError(PscpuError):
    """Missing or invalid command line / YAML configuration"""


class QueryError(PscpuError):
    """The process-status query could not be run or returned an error"""

    def __init__(self, pid: int, message: str):
        self.pid = pid
        self.message = message
        super().__init__(self.describe())

    def describe(self) -> str:
        return f"Error while querying cpu usage of PID {self.pid}: {self.message}"


class ProcessNotFound(QueryError):
    """The status query failed because the process is gone (or was never there)"""

    def describe(self) -> str:
        return f"Status query failed ({self.message}). Are you sure PID {self.pid} is active?"


class ParseError(PscpuError):
    """The status query output is not a number"""

    def __init__(self, raw: str, pid: Optional[int] = None, cause: Optional[Exception] = None):
        self.raw = raw
        self.pid = pid
        self.cause = cause
        super().__init__(f"Cannot parse cpu usage {raw!r} for PID {pid}: {cause}")


class OutputOpenError(PscpuError):
    """The csv file could not be created or opened for append"""

    def __init__(self, path: Union[str, Path], cause: Optional[Exception] = None):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Error when creating/opening the csv file {self.path}. {cause}")


class WriteError(PscpuError):
    """A row could not be written to (or flushed into) the csv file"""

    def __init__(self, path: Union[str, Path], cause: Optional[Exception] = None):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Error when writing to the csv file {self.path}. {cause}")
