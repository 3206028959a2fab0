"""Rich/JSON output helpers.

The CLI renders a LayerResult for humans (Rich output) or machines
(``--json``). The formatter picks the mode from :class:`OutputSettings`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from layerkit.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from layerkit.services.result import LayerResult


class OutputSettings(BaseModel):
    """Output mode flags, frozen after construction."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(
    result: LayerResult,
    *,
    settings: OutputSettings | None = None,
    json_output: bool = False,
) -> str:
    """Format a LayerResult for display.

    Args:
        result: The result to format.
        settings: Output mode; when given, *json_output* is ignored.
        json_output: Shortcut for ``OutputSettings(json_output=True)``.
    """
    if settings is None:
        settings = OutputSettings(json_output=json_output)
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
