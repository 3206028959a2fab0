"""LayerkitSettings — CLI flags, env vars, and ``layerkit.toml`` merged into one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``LAYERKIT_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``layerkit.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from layerkit.config.discovery import find_config, read_toml
from layerkit.config.models import PluginsConfig, RunConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by one TOML document (empty when there is none)."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = (
            read_toml(toml_path) if toml_path and toml_path.is_file() else {}
        )

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# The TOML path is handed to settings_customise_sources() through here,
# since pydantic-settings calls it as a classmethod.
_pending = threading.local()


class LayerkitSettings(BaseSettings):
    """Everything a CLI invocation is configured with; frozen after construction.

    Attributes:
        config_path: The TOML file that was loaded, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "LAYERKIT_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    run: RunConfig = Field(default_factory=RunConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Init kwargs, then env vars, then TOML; dotenv and secrets are not read."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_pending, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        plugins_dir: str | None = None,
        no_plugins: bool = False,
        **cli_flags: Any,
    ) -> LayerkitSettings:
        """Build settings for one CLI invocation.

        *config_path* pins the TOML file (ignored when it does not exist);
        otherwise ``layerkit.toml`` is discovered from *start* (default: cwd).
        *plugins_dir* and *no_plugins* override the ``[plugins]`` section
        field by field, leaving the rest of it as configured.
        """
        if config_path:
            pinned = Path(config_path)
            toml_path = pinned if pinned.is_file() else None
        else:
            toml_path = find_config(start)

        _pending.toml_path = toml_path
        try:
            settings = cls(config_path=toml_path, **cli_flags)
        finally:
            _pending.toml_path = None

        overrides: dict[str, Any] = {}
        if plugins_dir is not None:
            overrides["local_dir"] = plugins_dir
        if no_plugins:
            overrides["enabled"] = False
        if overrides:
            plugins = settings.plugins.model_copy(update=overrides)
            settings = settings.model_copy(update={"plugins": plugins})
        return settings
