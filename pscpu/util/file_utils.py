import shutil
from pathlib import Path
from typing import Optional, Union

CSV_FILE_TEMPLATE = "pscpu_{pid}.csv"


def resolve_cmd(cmd: str) -> str:
    p = Path(cmd)
    if p.is_file() or ("/" in cmd or "\\" in cmd):
        return str(p.resolve())
    found = shutil.which(cmd)
    if found:
        return found
    raise FileNotFoundError(
        f"Executable '{cmd}' not found. "
        f"Either provide a path (e.g. '/bin/ps') or ensure it's in PATH."
    )


def csv_file_path(folder: Optional[Union[str, Path]], pid: int) -> Path:
    """
    Build the path of the csv file for a process.

    Args:
        folder: Destination folder; empty or None means the current working directory
        pid: Process ID being monitored

    Returns:
        <folder>/pscpu_<pid>.csv (relative when folder is empty)
    """
    return Path(folder or "") / CSV_FILE_TEMPLATE.format(pid=pid)
