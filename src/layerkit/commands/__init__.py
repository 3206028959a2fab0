"""Subcommand modules for layerkit.

Provides register_commands() which uses deferred imports to keep
``layerkit --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from layerkit.commands.describe import describe
    from layerkit.commands.run import run

    cli.add_command(describe)
    cli.add_command(run)
