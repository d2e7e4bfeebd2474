"""CLI entry point for rpwatch."""

from pathlib import Path

import click


@click.command(context_settings={"ignore_unknown_options": True})
@click.version_option(package_name="rpwatch")
@click.option(
    "--ssh-command",
    default="ssh",
    show_default=True,
    help="Remote shell client used to reach the hosts",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Seconds to wait for each remote command",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write structured JSON log events to this file",
)
@click.argument("update_interval", required=False)
@click.argument("hosts", required=False)
@click.argument("processes", nargs=-1)
@click.pass_context
def main(
    ctx: click.Context,
    ssh_command: str,
    timeout: float | None,
    log_file: Path | None,
    update_interval: str | None,
    hosts: str | None,
    processes: tuple[str, ...],
) -> None:
    """Watch CPU and memory usage of named processes on remote hosts.

    UPDATE_INTERVAL is a duration such as 2s or 500ms. HOSTS is one host or a
    comma separated list. Each PROCESS is matched as a whole word against the
    full command line.
    """
    import asyncio

    from rpwatch import logging as console_log
    from rpwatch.config import Config, LogConfig, parse_duration, parse_hosts
    from rpwatch.monitor import run_monitor

    if update_interval is None or hosts is None or not processes:
        console_log.usage(ctx.info_name or "rpwatch")
        raise SystemExit(1)

    try:
        interval = parse_duration(update_interval)
    except ValueError as e:
        console_log.interval_invalid(str(e))
        raise SystemExit(2)

    config = Config(
        interval=interval,
        hosts=parse_hosts(hosts),
        patterns=list(processes),
        ssh_command=ssh_command,
        timeout=timeout,
        log=LogConfig(path=log_file),
    )

    asyncio.run(run_monitor(config))


if __name__ == "__main__":
    main()
