"""Merging, ordering and totals for one refresh cycle."""

from dataclasses import dataclass

from rpwatch.formatting import parse_float
from rpwatch.parser import ProcessInfo


@dataclass(slots=True, frozen=True)
class Usage:
    """CPU%, MEM% and resident KiB for one table row."""

    cpu: float
    mem: float
    rss_kb: float

    @classmethod
    def from_record(cls, record: ProcessInfo) -> "Usage":
        """Parse a record's numeric columns, treating garbage as 0.0."""
        return cls(
            cpu=parse_float(record.cpu),
            mem=parse_float(record.mem),
            rss_kb=parse_float(record.rss),
        )


@dataclass(slots=True, frozen=True)
class Summary:
    """Totals over all records of a cycle.

    Averages are per configured host, not per process.
    """

    total: Usage
    host_count: int

    def averages(self) -> Usage | None:
        """Return total / host_count, or None when no hosts are configured."""
        if self.host_count <= 0:
            return None
        return Usage(
            cpu=self.total.cpu / self.host_count,
            mem=self.total.mem / self.host_count,
            rss_kb=self.total.rss_kb / self.host_count,
        )


def sort_key(record: ProcessInfo) -> tuple[str, str, str]:
    """Order by host, then command, then pid."""
    return (record.host, record.cmd, record.pid)


def sort_records(records: list[ProcessInfo]) -> list[ProcessInfo]:
    """Return records sorted for display."""
    return sorted(records, key=sort_key)


def summarize(records: list[ProcessInfo], host_count: int) -> Summary:
    """Sum CPU%, MEM% and resident KiB across all records."""
    cpu = mem = rss_kb = 0.0
    for record in records:
        usage = Usage.from_record(record)
        cpu += usage.cpu
        mem += usage.mem
        rss_kb += usage.rss_kb
    return Summary(total=Usage(cpu=cpu, mem=mem, rss_kb=rss_kb), host_count=host_count)
