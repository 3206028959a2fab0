"""Command: report a Layer type's declared inputs, callbacks, and observers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from layerkit.commands._base import LayerkitCommand, target_argument

if TYPE_CHECKING:
    from layerkit.commands._context import AppContext


@click.command(
    cls=LayerkitCommand,
    examples=(
        "layerkit describe myapp.users:RegisterUser",
        "layerkit --json describe myapp.billing:ChargeCard",
    ),
)
@target_argument
@click.pass_obj
def describe(app: AppContext, target: str) -> None:
    """Describe the Layer at MODULE:CLASS."""
    from layerkit.services.runner import LayerService

    app.emit(LayerService().describe(target))
