"""
Monitor configuration data class.

Defaults mirror the command line defaults: current directory, 5 seconds,
unlimited samples, ps backend.
"""

from dataclasses import dataclass
from typing import Optional

from pscpu.consts.SamplerBackend import SamplerBackend

DEFAULT_CSV_FOLDER_PATH = ""  # current working directory
DEFAULT_SECONDS = 5
DEFAULT_COUNT = 0  # unlimited


@dataclass
class MonitorConfig:

    pid: Optional[int] = None
    folder: str = DEFAULT_CSV_FOLDER_PATH
    seconds: int = DEFAULT_SECONDS
    count: int = DEFAULT_COUNT
    backend: SamplerBackend = SamplerBackend.PS
    ps_command: str = "ps"
    sync: bool = False
    log_file: Optional[str] = None

    @property
    def max_samples(self) -> Optional[int]:
        return self.count or None
