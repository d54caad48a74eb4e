"""User-facing console output for CLI operations.

Log records go through structlog; this module is only for the handful of
lines a person running ``gdrive-sync`` should see regardless of log level
(startup banner, authorization prompts, final status).

Usage::

    from gdrive_sync.core.progress import status

    status("Watching /share/Scans")
    status("Token saved", style="success")  # ✓ Token saved
    status("Folder not found", style="error")  # ✗ Folder not found
"""

from __future__ import annotations

from rich.console import Console

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)


def print_banner(title: str, rows: list[tuple[str, str]], *, width: int = 64) -> None:
    """Print a ruled banner with aligned label/value rows."""
    rule_line = "─" * width
    label_width = max((len(label) for label, _ in rows), default=0) + 2

    _console.print()
    _console.print(rule_line, style="dim cyan", highlight=False)
    _console.print(title.center(width), style="bold cyan", highlight=False)
    _console.print(rule_line, style="dim cyan", highlight=False)
    _console.print()
    for label, value in rows:
        _console.print(f"  {(label + ':').ljust(label_width)} {value}", highlight=False)
    _console.print()
