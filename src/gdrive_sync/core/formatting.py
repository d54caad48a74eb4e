"""Summary formatting utilities for consistent terminal and log output.

Design principles:
- Every summary fits on one line (~80 chars max)
- Grammatically correct (1 file vs 2 files)
"""

from __future__ import annotations

_BYTE_UNITS = ("B", "kB", "MB", "GB", "TB", "PB")


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Examples:
        (1, "file") -> "1 file"
        (3, "file") -> "3 files"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def format_bytes(size: int) -> str:
    """Format a byte count with decimal (SI) units.

    Examples:
        0 -> "0 B"
        999 -> "999 B"
        1500 -> "1.5 kB"
        4_200_000 -> "4.2 MB"
    """
    if size < 0:
        raise ValueError("Size must be non-negative")

    if size < 1000:
        return f"{size} B"

    value = float(size)
    for unit in _BYTE_UNITS[1:]:
        value /= 1000
        if value < 1000 or unit == _BYTE_UNITS[-1]:
            return f"{value:.1f} {unit}"
    raise AssertionError("unreachable")


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples:
        0.345 -> "0.3s"
        90.0 -> "1m 30s"
        3661.0 -> "1h 1m"
    """
    if seconds < 0:
        raise ValueError("Duration must be non-negative")

    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_secs = int(seconds % 60)

    if minutes < 60:
        return f"{minutes}m {remaining_secs}s"

    hours = minutes // 60
    remaining_mins = minutes % 60
    return f"{hours}h {remaining_mins}m"
