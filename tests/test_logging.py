"""Tests for console and structured logging."""

import io
import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import structlog
from rich.console import Console

from rpwatch import logging as console_log
from rpwatch.monitor import Monitor
from rpwatch.render import Renderer
from tests.conftest import make_config


@pytest.fixture
def captured_console(monkeypatch) -> Console:
    """Swap the shared console for one writing to a string buffer."""
    console = Console(file=io.StringIO(), width=300, color_system=None, highlight=False)
    monkeypatch.setattr(console_log, "_console", console)
    return console


@pytest.fixture
def reset_logging():
    """Restore stdlib and structlog state after configure()."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestConsoleLog:
    """Tests for the rich console helpers."""

    def test_error_line(self, captured_console: Console) -> None:
        console_log.error("something broke")
        out = captured_console.file.getvalue()

        assert "[err]" in out
        assert "something broke" in out

    def test_line_has_timestamp(self, captured_console: Console) -> None:
        console_log.error("hello")
        out = captured_console.file.getvalue()

        # HH:MM:SS prefix
        assert out[2] == ":" and out[5] == ":"

    def test_sample_failed(self, captured_console: Console) -> None:
        console_log.sample_failed("h1: exit status 255")
        out = captured_console.file.getvalue()

        assert "Error running SSH command: h1: exit status 255" in out

    def test_markup_in_message_is_escaped(self, captured_console: Console) -> None:
        console_log.sample_failed("[bold]not markup[/bold]")
        assert "[bold]not markup[/bold]" in captured_console.file.getvalue()

    def test_usage_lines(self, captured_console: Console) -> None:
        console_log.usage("rpwatch")
        lines = captured_console.file.getvalue().splitlines()

        assert lines == [
            "Usage: rpwatch [update_freq] [remote_host] [process_1] ... <process_n>",
            "   or  rpwatch [update_freq] [remote_host_1,remote_host_2,...,remote_host_n] "
            "[process_1] ... <process_n>",
        ]


class TestConfigure:
    """Tests for structlog configuration."""

    def test_json_log_file(self, tmp_path: Path, reset_logging) -> None:
        log_path = tmp_path / "logs" / "rpwatch.log"
        config = make_config()
        config.log.path = log_path

        console_log.configure(config)
        structlog.get_logger().error("sample_failed", host="h1")
        for handler in logging.getLogger().handlers:
            handler.flush()

        event = json.loads(log_path.read_text().strip().splitlines()[-1])
        assert event["event"] == "sample_failed"
        assert event["host"] == "h1"
        assert event["level"] == "error"
        assert event["source"] == "rpwatch"
        assert "ts" in event

    def test_without_log_file_nothing_is_written(self, reset_logging, capsys) -> None:
        console_log.configure(make_config())
        structlog.get_logger().error("sample_failed", host="h1")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""
        assert any(isinstance(h, logging.NullHandler) for h in logging.getLogger().handlers)

    @pytest.mark.asyncio
    async def test_cycle_events_reach_log_file(self, tmp_path: Path, reset_logging) -> None:
        """A rendered cycle is recorded in the JSON log."""
        log_path = tmp_path / "rpwatch.log"
        config = make_config()
        config.log.path = log_path
        console_log.configure(config)

        sampler = AsyncMock()
        sampler.sample.return_value = "100 2.5 1.0 1000 20480 nginx\n"
        renderer = Renderer(Console(file=io.StringIO()), config.layout)
        await Monitor(config, renderer, sampler=sampler).run_cycle()
        for handler in logging.getLogger().handlers:
            handler.flush()

        events = [json.loads(line) for line in log_path.read_text().splitlines()]
        rendered_events = [e for e in events if e["event"] == "cycle_rendered"]
        assert rendered_events
        assert rendered_events[0]["records"] == 1
        assert rendered_events[0]["level"] == "info"
