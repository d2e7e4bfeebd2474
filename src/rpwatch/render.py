"""Terminal rendering of the process table."""

from dataclasses import dataclass
from datetime import datetime

from rich.console import Console
from rich.markup import escape

from rpwatch.aggregate import Summary, Usage
from rpwatch.config import Layout
from rpwatch.formatting import format_bytes_iec, format_interval, progress_bar
from rpwatch.parser import ProcessInfo

HEADER_STYLE = "bold bright_white on black"

# Clear screen, cursor home
CLEAR_HOME = "\033[2J\033[H"


@dataclass(slots=True)
class Frame:
    """Everything drawn for one successful refresh cycle."""

    captured_at: datetime
    interval: float
    patterns: list[str]
    records: list[ProcessInfo]  # Already sorted
    summary: Summary


class Renderer:
    """Draws frames as a fixed-column table.

    Columns are padded to the widths in Layout and never truncated, so an
    overlong host or command pushes the rest of its row to the right.
    """

    def __init__(self, console: Console, layout: Layout):
        self.console = console
        self.layout = layout

    def draw(self, frame: Frame) -> None:
        """Clear the screen and draw frame."""
        self.clear_screen()
        self._print(self.banner(frame))
        self._print("")
        self._print(self.header())
        for record in frame.records:
            self._print(self.row(record, Usage.from_record(record)))
        for line in self.footer(frame.summary):
            self._print(line)
        self.console.file.flush()

    def clear_screen(self) -> None:
        """Write clear and home straight to the output, terminal or not."""
        self.console.file.write(CLEAR_HOME)
        self.console.file.flush()

    def _print(self, markup: str) -> None:
        self.console.print(markup, soft_wrap=True, highlight=False, emoji=False)

    def banner(self, frame: Frame) -> str:
        """Time, refresh interval and the watched process names."""
        ts = frame.captured_at.strftime("%H:%M:%S")
        names = escape(", ".join(frame.patterns))
        interval = format_interval(frame.interval)
        return f"[dim]{ts}[/] \\[ every [cyan]{interval}[/] ] \\[[cyan]{names}[/]]"

    def header(self) -> str:
        lo = self.layout
        cells = [
            "HOST".ljust(lo.host_width),
            "PID".ljust(lo.pid_width),
            "CMD".ljust(lo.cmd_width),
            "CPU".ljust(lo.cpu_width),
            "MEM".ljust(lo.mem_width),
            "".ljust(lo.mem_bytes_width),
        ]
        return f"[{HEADER_STYLE}]{' '.join(cells)}[/]"

    def row(self, record: ProcessInfo, usage: Usage) -> str:
        """One process line: identity columns followed by usage columns."""
        lo = self.layout
        host = escape(record.host.ljust(lo.host_width))
        pid = escape(record.pid.ljust(lo.pid_width))
        cmd = escape(record.cmd.ljust(lo.cmd_width))
        return f"[cyan]{host}[/] [magenta]{pid}[/] {cmd} {self.usage_cells(usage)}"

    def footer(self, summary: Summary) -> list[str]:
        """SUM row, plus the per-host AVG row when there are hosts."""
        lines = [self._footer_row("SUM", summary.total)]
        averages = summary.averages()
        if averages is not None:
            lines.append(self._footer_row("AVG", averages))
        return lines

    def _footer_row(self, label: str, usage: Usage) -> str:
        lo = self.layout
        cells = [
            label.ljust(lo.host_width),
            "".ljust(lo.pid_width),
            "".ljust(lo.cmd_width),
        ]
        return f"[{HEADER_STYLE}]{' '.join(cells)}[/] {self.usage_cells(usage)}"

    def usage_cells(self, usage: Usage) -> str:
        """CPU bar, MEM bar and right-aligned resident size."""
        lo = self.layout
        cpu = progress_bar(usage.cpu / 100.0, lo.bar_width).ljust(lo.cpu_width)
        mem = progress_bar(usage.mem / 100.0, lo.bar_width).ljust(lo.mem_width)
        size = format_bytes_iec(usage.rss_kb * 1024).rjust(lo.mem_bytes_width)
        return f"[green]{cpu}[/] [yellow]{mem}[/] {size}"
