"""Pydantic models for the ``layerkit.toml`` sections.

Every field has a default, so a config file only lists what it changes.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PluginsConfig(BaseModel):
    """[plugins] section: where validation plugins come from."""

    model_config = {"frozen": True}

    enabled: bool = True
    # Directory of single-file plugins, relative to the working directory.
    local_dir: str | None = None


class RunConfig(BaseModel):
    """[run] section: defaults for ``layerkit run``."""

    model_config = {"frozen": True}

    validate_inputs: bool = False


class LayerkitConfig(BaseModel):
    """The whole ``layerkit.toml`` document."""

    model_config = {"frozen": True}

    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    run: RunConfig = Field(default_factory=RunConfig)
