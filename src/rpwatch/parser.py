"""Parsing of remote ps output into process records."""

import re
from dataclasses import dataclass, field
from datetime import datetime

# pid, pcpu, pmem, vsz, rss, cmd
PS_FIELD_COUNT = 6


@dataclass(slots=True, frozen=True)
class ProcessInfo:
    """One observed process instance on one host.

    Numeric columns are kept as the strings ps printed; they are parsed
    leniently when the table is rendered.
    """

    host: str
    pid: str
    cpu: str  # %CPU
    mem: str  # %MEM
    vsz: str  # Virtual size (KiB)
    rss: str  # Resident size (KiB)
    cmd: str
    captured_at: datetime = field(default_factory=datetime.now)


def compile_patterns(names: list[str]) -> list[re.Pattern[str]]:
    """Compile one whole-word matcher per process name.

    Names are matched literally and case-sensitively, bounded on both sides
    by a non-word character or the edge of the string.
    """
    return [re.compile(rf"(?<!\w){re.escape(name)}(?!\w)") for name in names]


def parse_line(line: str) -> tuple[str, str, str, str, str, str] | None:
    """Split a ps line into (pid, cpu, mem, vsz, rss, cmd).

    Returns None for lines with fewer than six fields (blank lines, ssh
    banners, "Connection to host closed."). The command is everything from
    the sixth field to the end of the line.
    """
    parts = line.split(None, PS_FIELD_COUNT - 1)
    if len(parts) < PS_FIELD_COUNT:
        return None
    pid, cpu, mem, vsz, rss, cmd = parts
    return pid, cpu, mem, vsz, rss, cmd.rstrip()


def match_command(cmd: str, matchers: list[re.Pattern[str]]) -> re.Pattern[str] | None:
    """Return the first matcher found in cmd, or None."""
    for matcher in matchers:
        if matcher.search(cmd):
            return matcher
    return None


def parse_output(host: str, raw: str, matchers: list[re.Pattern[str]]) -> list[ProcessInfo]:
    """Parse one host's ps output into records, at most one per pid.

    The first line seen for a pid wins. Lines that are malformed or don't
    match any pattern are skipped silently.
    """
    records: list[ProcessInfo] = []
    seen_pids: set[str] = set()

    for line in raw.splitlines():
        fields = parse_line(line)
        if fields is None:
            continue

        pid, cpu, mem, vsz, rss, cmd = fields
        if pid in seen_pids:
            continue
        if match_command(cmd, matchers) is None:
            continue

        records.append(ProcessInfo(host, pid, cpu, mem, vsz, rss, cmd))
        seen_pids.add(pid)

    return records
