"""Shared test fixtures for rpwatch."""

import io

import pytest
from rich.console import Console

from rpwatch.config import Config, Layout
from rpwatch.parser import ProcessInfo
from rpwatch.render import Renderer


def make_process_info(
    host: str = "h1",
    pid: str = "100",
    cpu: str = "2.5",
    mem: str = "1.0",
    vsz: str = "1000",
    rss: str = "20480",
    cmd: str = "nginx: worker",
) -> ProcessInfo:
    """Create a ProcessInfo for testing."""
    return ProcessInfo(host=host, pid=pid, cpu=cpu, mem=mem, vsz=vsz, rss=rss, cmd=cmd)


def make_config(
    hosts: list[str] | None = None,
    patterns: list[str] | None = None,
    interval: float = 1.0,
    **kwargs,
) -> Config:
    """Create a Config for testing."""
    return Config(
        interval=interval,
        hosts=hosts if hosts is not None else ["h1"],
        patterns=patterns if patterns is not None else ["nginx"],
        **kwargs,
    )


@pytest.fixture
def console() -> Console:
    """Non-terminal console writing to a string buffer."""
    return Console(file=io.StringIO(), width=300, color_system=None, highlight=False)


@pytest.fixture
def renderer(console: Console) -> Renderer:
    """Renderer drawing into the string buffer console."""
    return Renderer(console, Layout())


def rendered(console: Console) -> str:
    """Return everything written to a string buffer console."""
    return console.file.getvalue()
