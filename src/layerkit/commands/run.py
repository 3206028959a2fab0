"""Command: construct and invoke a Layer from the command line."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from layerkit.commands._base import LayerkitCommand, target_argument

if TYPE_CHECKING:
    from layerkit.commands._context import AppContext


def parse_assignments(assignments: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``NAME=VALUE`` pairs into an input mapping.

    Values are decoded as JSON when possible (``count=3``, ``tags=["a"]``,
    ``note=null``); anything else stays a string.
    """
    inputs: dict[str, Any] = {}
    for item in assignments:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            msg = f"Expected NAME=VALUE, got {item!r}"
            raise click.BadParameter(msg, param_hint="INPUTS")
        try:
            inputs[name] = json.loads(raw)
        except json.JSONDecodeError:
            inputs[name] = raw
    return inputs


@click.command(
    cls=LayerkitCommand,
    examples=(
        "layerkit run myapp.users:RegisterUser email=ada@example.com",
        "layerkit run myapp.users:RegisterUser email=ada@example.com role='\"admin\"'",
        "layerkit --json run myapp.billing:ChargeCard amount=1200 --validate",
    ),
)
@target_argument
@click.argument("inputs", nargs=-1, metavar="[NAME=VALUE]...")
@click.option(
    "--validate",
    is_flag=True,
    help="Run validation rules (and plugins) first; always on with [run] validate_inputs.",
)
@click.pass_obj
def run(app: AppContext, target: str, inputs: tuple[str, ...], validate: bool) -> None:
    """Invoke the Layer at MODULE:CLASS with NAME=VALUE inputs."""
    from layerkit.services.runner import LayerService

    validate = validate or app.settings.run.validate_inputs
    svc = LayerService(plugins=app.plugins if validate else None)
    app.emit(svc.run(target, parse_assignments(inputs), validate=validate))
