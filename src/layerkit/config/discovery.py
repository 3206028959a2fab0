"""Locating and reading ``layerkit.toml``.

Lookup order: the ``LAYERKIT_CONFIG`` environment variable, then the first
``layerkit.toml`` found in the start directory or any of its parents.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from layerkit.config.models import LayerkitConfig

CONFIG_FILENAME = "layerkit.toml"
CONFIG_ENV_VAR = "LAYERKIT_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies to *start* (default: cwd), or None.

    A ``LAYERKIT_CONFIG`` that names a missing file disables discovery
    rather than falling back to the walk-up.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, reporting syntax errors as a ClickException."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        import click

        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> LayerkitConfig:
    """Validate the config at *path* (discovered from *cwd* when None).

    Sections absent from the file keep their defaults; no file at all yields
    ``LayerkitConfig()``.
    """
    path = path or find_config(cwd)
    if path is None:
        return LayerkitConfig()
    return LayerkitConfig.model_validate(read_toml(path))
