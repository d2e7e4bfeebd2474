"""Configuration system for rpwatch.

There is no configuration file: everything comes from the command line and
is collected into an explicit Config that gets passed to each component.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

# Seconds per duration unit
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5 micro sign
    "μs": 1e-6,  # U+03BC greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


@dataclass
class Layout:
    """Fixed column widths of the process table.

    Values wider than their column are padded, never truncated.
    """

    host_width: int = 32
    pid_width: int = 10
    cmd_width: int = 35
    cpu_width: int = 35
    mem_width: int = 31
    mem_bytes_width: int = 15
    bar_width: int = 20  # Cells in a CPU/MEM bar


@dataclass
class LogConfig:
    """Structured log file configuration."""

    path: Path | None = None  # No JSON log unless set
    max_bytes: int = 5 * 1024 * 1024  # Max log file size (5MB)
    backup_count: int = 3  # Number of backup log files to keep


@dataclass
class Config:
    """Runtime configuration for one rpwatch session."""

    interval: float  # Seconds between refresh cycles
    hosts: list[str]
    patterns: list[str]
    ssh_command: str = "ssh"
    timeout: float | None = None  # Per remote command, None waits forever
    layout: Layout = field(default_factory=Layout)
    log: LogConfig = field(default_factory=LogConfig)


def parse_duration(text: str) -> float:
    """Parse a duration string such as "2s", "500ms" or "1m30s" into seconds.

    Accepts an optional leading sign and any sequence of decimal numbers
    with units (ns, us, µs, ms, s, m, h). A bare "0" is allowed.

    Raises:
        ValueError: If the string is not a valid duration.
    """
    s = text
    sign = 1.0
    if s[:1] in ("-", "+"):
        if s[0] == "-":
            sign = -1.0
        s = s[1:]

    if s == "0":
        return 0.0
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        match = _DURATION_PART.match(s, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    return sign * total


def parse_hosts(text: str) -> list[str]:
    """Split a comma separated host list, dropping empty entries."""
    return [host for host in text.split(",") if host]
