"""Remote process sampling over ssh."""

import asyncio
import shlex

import structlog

from rpwatch.config import Config

log = structlog.get_logger()

PS_COLUMNS = "pid,pcpu,pmem,vsz,rss,cmd"


class SampleError(Exception):
    """Raised when the remote listing command fails on a host."""

    def __init__(self, host: str, message: str, output: str = ""):
        super().__init__(f"{host}: {message}")
        self.host = host
        self.output = output


def _grep_term(name: str) -> str:
    """Keep a name from matching the pipeline's own grep command line.

    "nginx" becomes "[n]ginx": same matches, but the literal name no longer
    appears in the remote command.
    """
    if name[:1].isalnum():
        return f"[{name[0]}]{name[1:]}"
    return name


def build_ps_command(patterns: list[str]) -> str:
    """Build the remote pipeline listing all processes matching any pattern."""
    alternation = "|".join(_grep_term(name) for name in patterns)
    return f"ps --no-headers -eo {PS_COLUMNS} | grep -E {shlex.quote(alternation)}"


def _kill(proc: asyncio.subprocess.Process) -> None:
    """Kill proc, ignoring one that has already exited."""
    try:
        proc.kill()
    except ProcessLookupError:
        pass  # Already dead


class RemoteSampler:
    """Runs the process listing on remote hosts, one host at a time."""

    def __init__(self, config: Config):
        self.config = config
        self.ps_command = build_ps_command(config.patterns)

    def argv(self, host: str) -> list[str]:
        """Command line used to sample host."""
        return [*shlex.split(self.config.ssh_command), host, "-tt", self.ps_command]

    async def sample(self, host: str) -> str:
        """Run the listing on host and return combined stdout/stderr.

        Raises:
            SampleError: On non-zero exit, a missing ssh binary or a timeout.
        """
        argv = self.argv(host)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise SampleError(host, str(e)) from e

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.config.timeout)
        except asyncio.TimeoutError as e:
            _kill(proc)
            await proc.wait()
            raise SampleError(host, f"timed out after {self.config.timeout}s") from e
        except asyncio.CancelledError:
            # Interrupted: abandon the remote command
            _kill(proc)
            raise

        output = stdout.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            raise SampleError(host, f"exit status {proc.returncode}", output)

        log.debug("host_sampled", host=host, bytes=len(stdout))
        return output
