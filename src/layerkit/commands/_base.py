"""Shared Click pieces for layerkit commands.

``LayerkitCommand`` adds an eager ``--examples`` flag that prints sample
invocations and exits, keeping ``--help`` short. ``target_argument`` is the
``MODULE:CLASS`` argument every command takes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import click

TARGET_METAVAR = "MODULE:CLASS"


def target_argument[F: Callable[..., Any]](func: F) -> F:
    """The Layer a command operates on, as ``package.module:ClassName``."""
    return click.argument("target", metavar=TARGET_METAVAR)(func)


class LayerkitCommand(click.Command):
    """Command with an ``--examples`` flag.

    *examples* is a sequence of command lines, printed one per line with a
    shell prompt.
    """

    def __init__(
        self,
        *args: Any,
        examples: Sequence[str] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        for line in self.examples:
            click.echo(f"  $ {line}")
        ctx.exit(0)
