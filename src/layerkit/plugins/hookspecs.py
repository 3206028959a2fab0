"""Pluggy hook specifications for layerkit.

Plugins contribute field-level validation rules that run when a Layer's
``validate()`` is called with a plugin manager.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from layerkit.services.base import Layer

PROJECT_NAME = "layerkit"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class LayerkitHookSpec:
    """Hook specifications for the layerkit plugin system."""

    @hookspec
    def validate_layer(self, layer: Layer) -> list[str] | None:
        """Return error messages for *layer*, or None when it passes."""
