"""Refresh loop: sample every host, parse, aggregate and repaint."""

import asyncio
import signal
from datetime import datetime

import structlog

from rpwatch import logging as console_log
from rpwatch.aggregate import sort_records, summarize
from rpwatch.config import Config
from rpwatch.parser import ProcessInfo, compile_patterns, parse_output
from rpwatch.render import Frame, Renderer
from rpwatch.sampler import RemoteSampler, SampleError

log = structlog.get_logger()

_SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class Monitor:
    """Polls the configured hosts and redraws the table every interval.

    Hosts are sampled one after another. If any host fails, the whole cycle
    is dropped and the previous frame stays on screen.
    """

    def __init__(
        self,
        config: Config,
        renderer: Renderer,
        sampler: RemoteSampler | None = None,
    ):
        self.config = config
        self.renderer = renderer
        self.sampler = sampler or RemoteSampler(config)
        self.matchers = compile_patterns(config.patterns)
        self.cycle_count = 0

        self._shutdown_event = asyncio.Event()
        self._main_task: asyncio.Task | None = None

    @property
    def stopping(self) -> bool:
        return self._shutdown_event.is_set()

    async def collect(self) -> list[ProcessInfo]:
        """Sample and parse all hosts in configured order.

        Raises:
            SampleError: As soon as one host fails; later hosts are skipped.
        """
        records: list[ProcessInfo] = []
        for host in self.config.hosts:
            raw = await self.sampler.sample(host)
            records.extend(parse_output(host, raw, self.matchers))
        return records

    async def run_cycle(self) -> Frame | None:
        """Run one refresh cycle. Returns the drawn frame, or None on failure."""
        self.cycle_count += 1
        try:
            records = await self.collect()
        except SampleError as e:
            console_log.sample_failed(str(e))
            log.error("sample_failed", host=e.host, error=str(e), cycle=self.cycle_count)
            return None

        records = sort_records(records)
        frame = Frame(
            captured_at=datetime.now(),
            interval=self.config.interval,
            patterns=self.config.patterns,
            records=records,
            summary=summarize(records, len(self.config.hosts)),
        )
        self.renderer.draw(frame)
        log.info("cycle_rendered", cycle=self.cycle_count, records=len(records))
        return frame

    async def run(self) -> None:
        """Run until SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()
        for sig in _SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, lambda s=sig: self._handle_signal(s))
        self._main_task = asyncio.current_task()

        log.info(
            "monitor_started",
            hosts=self.config.hosts,
            patterns=self.config.patterns,
            interval=self.config.interval,
        )
        self.renderer.clear_screen()

        try:
            await self._main_loop()
        except asyncio.CancelledError:
            if not self.stopping:
                raise
        finally:
            for sig in _SHUTDOWN_SIGNALS:
                loop.remove_signal_handler(sig)
            log.info("monitor_stopped", cycles=self.cycle_count)

    async def _main_loop(self) -> None:
        """Cycle, then sleep for whatever is left of the interval.

        A cycle that overruns the interval is followed immediately by the
        next one; missed cycles are not made up.
        """
        loop = asyncio.get_running_loop()
        interval = self.config.interval
        cycle_start = loop.time()

        while not self.stopping:
            await self.run_cycle()

            sleep_time = interval - (loop.time() - cycle_start)
            if sleep_time > 0:
                try:
                    await asyncio.wait_for(self._shutdown_event.wait(), timeout=sleep_time)
                    break  # Shutdown requested during sleep
                except asyncio.TimeoutError:
                    pass  # Normal timeout, continue to next cycle
            cycle_start = loop.time()

    def _handle_signal(self, sig: signal.Signals) -> None:
        """Reset the terminal and stop immediately, abandoning remote commands."""
        log.info("signal_received", signal=sig.name)
        self.renderer.clear_screen()
        self._shutdown_event.set()
        if self._main_task is not None and not self._main_task.done():
            self._main_task.cancel()


async def run_monitor(config: Config) -> None:
    """Run the monitor until interrupted.

    Args:
        config: Session config built from the command line
    """
    console_log.configure(config)

    renderer = Renderer(console_log.get_console(), config.layout)
    monitor = Monitor(config, renderer)

    try:
        await monitor.run()
    except Exception as e:
        log.exception("monitor_crashed", error=str(e))
        raise
