"""Root CLI group: global output/config flags and command registration."""

from __future__ import annotations

import click

from layerkit import __version__
from layerkit.commands import register_commands
from layerkit.commands._context import AppContext
from layerkit.config.settings import LayerkitSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="layerkit")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Use this layerkit.toml.")
@click.option(
    "--plugins-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Load single-file validation plugins from this directory.",
)
@click.option("--no-plugins", is_flag=True, help="Skip plugin discovery entirely.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    plugins_dir: str | None,
    no_plugins: bool,
) -> None:
    """layerkit — inspect and run Layer command objects."""
    settings = LayerkitSettings.from_cli(
        config_path=config_path,
        plugins_dir=plugins_dir,
        no_plugins=no_plugins,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
