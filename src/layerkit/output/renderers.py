"""Operation-specific Rich renderers for LayerResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops (every ``run`` result is named after its Layer) fall through to
a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from layerkit.output.console import create_console, get_output, style_for_event

if TYPE_CHECKING:
    from rich.console import Console

    from layerkit.services.result import LayerResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: LayerResult, *, verbose: bool = False) -> str:
    """Render a LayerResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: LayerResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: LayerResult) -> None:
    """Print the OK status line."""
    console.print(Text("OK", style="lk.ok") + Text(f"  {result.op}", style="lk.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="lk.key")
    if isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":"), default=repr))
    else:
        v = Text(str(value))
    console.print(k + v)


def _render_meta(console: Console, result: LayerResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(Text(f"    {k}: {v}"))


def _render_error(result: LayerResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="lk.error")
    op = Text(f"  {result.op}", style="lk.op")
    sep = Text(" - ")
    console.print(label + op + sep + Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))
    if verbose:
        _render_meta(console, result)


# ── describe ──────────────────────────────────────────────────────────


def _inputs_table(inputs: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Input", style="lk.name", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Default")

    for item in inputs:
        if item.get("required"):
            kind = Text("required", style="lk.required")
        else:
            kind = Text("optional", style="lk.optional")
        default = repr(item.get("default")) if item.get("has_default") else ""
        table.add_row(str(item.get("name", "")), kind, default)
    return table


def _render_describe(result: LayerResult, console: Console, *, verbose: bool = False) -> None:
    """Render a Layer type's declarations."""
    d = result.data
    _status_line(console, result)
    _field(console, "layer", d.get("layer", ""))

    inputs = d.get("inputs") or []
    if inputs:
        console.print()
        console.print(_inputs_table(inputs))
    else:
        _field(console, "inputs", "none")

    console.print()
    for key, name in (d.get("callbacks") or {}).items():
        _field(console, key, name)

    for event, observers in (d.get("observers") or {}).items():
        label = Text(f"  observers[{event}]: ", style=style_for_event(event) or "lk.key")
        console.print(label + Text(", ".join(observers)))

    handler = d.get("observer_exception_handler")
    if handler:
        _field(console, "observer_exception_handler", handler)
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: LayerResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "describe": _render_describe,
}
