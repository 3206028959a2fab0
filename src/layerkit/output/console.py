"""Rich Console factory and theme for layerkit output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

LAYERKIT_THEME = Theme(
    {
        "lk.ok": "bold green",
        "lk.error": "bold red",
        "lk.warning": "bold yellow",
        "lk.op": "bold cyan",
        "lk.key": "dim",
        "lk.name": "bold blue",
        "lk.required": "bold",
        "lk.optional": "dim",
        "lk.event.success": "green",
        "lk.event.failure": "red",
    }
)

_EVENT_STYLES: dict[str, str] = {
    "success": "lk.event.success",
    "failure": "lk.event.failure",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=LAYERKIT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_event(event: str) -> str:
    """Return the Rich style name for an observer event."""
    return _EVENT_STYLES.get(event, "")
