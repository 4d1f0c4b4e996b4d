from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List


def local_now() -> datetime:
    """Current time with the local UTC offset attached"""
    return datetime.now().astimezone()


def format_rfc3339(moment: datetime) -> str:
    """
    Render a datetime as an RFC 3339 timestamp with whole seconds.

    The offset of the datetime is kept as is ('Z' when it is zero), never
    converted to UTC. Naive datetimes are taken as local time.
    """
    if moment.tzinfo is None or moment.utcoffset() is None:
        moment = moment.astimezone()
    offset = moment.utcoffset()
    stamp = moment.strftime('%Y-%m-%dT%H:%M:%S')
    if offset == timedelta(0):
        return stamp + 'Z'
    sign = '+' if offset > timedelta(0) else '-'
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{stamp}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class CpuSample:
    """Cpu usage of a process, as % reported by the OS, at a given time"""
    captured_at: datetime
    cpu_percent: float  # can be > 100 on multi-core machines

    def to_csv_record(self) -> List[str]:
        """Convert to the two fields of a csv row"""
        return [
            format_rfc3339(self.captured_at),
            f"{self.cpu_percent:.1f}",
        ]

    def __str__(self) -> str:
        return " - ".join(self.to_csv_record())
