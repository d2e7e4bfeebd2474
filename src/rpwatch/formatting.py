"""Formatting utilities for the process table."""

import math

_IEC_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB")

BAR_FILLED = "█"
BAR_EMPTY = "░"


def _trim_number(value: float) -> str:
    """Format with up to two decimals, dropping trailing zeros."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_bytes_iec(size: float) -> str:
    """Format a byte count with IEC binary units.

    Examples:
        512 -> "512 B"
        1536 -> "1.5 KiB"
        1073741824 -> "1 GiB"
    """
    value = float(size)
    for unit in _IEC_UNITS:
        if round(abs(value), 2) < 1024:
            return f"{_trim_number(value)} {unit}"
        value /= 1024
    return f"{_trim_number(value)} EiB"


def format_interval(seconds: float) -> str:
    """Format a duration in seconds the way it is written on the command line.

    Examples:
        2.0 -> "2s"
        0.5 -> "500ms"
        90.0 -> "1m30s"
    """
    if seconds == 0:
        return "0s"
    if seconds < 0:
        return "-" + format_interval(-seconds)

    if seconds < 1:
        for unit, scale in (("ms", 1e3), ("µs", 1e6)):
            scaled = round(seconds * scale, 6)
            if scaled >= 1:
                return f"{scaled:g}{unit}"
        return f"{round(seconds * 1e9):d}ns"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = f"{round(seconds % 60, 9):.9f}".rstrip("0").rstrip(".")

    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def parse_float(value: str) -> float:
    """Parse a decimal string, returning 0.0 if it is not a finite number."""
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def progress_bar(fraction: float, width: int = 20) -> str:
    """Render a horizontal bar followed by the percentage.

    The bar is clamped to [0, width] cells; the percentage text is not
    clamped, so a process using several cores shows e.g. "250.0%".
    """
    clamped = min(max(fraction, 0.0), 1.0)
    filled = int(clamped * width)
    bar = BAR_FILLED * filled + BAR_EMPTY * (width - filled)
    return f"{bar} {fraction * 100:5.1f}%"
