"""Plugin discovery and loading for validation rules.

Two sources, loaded in order:

1. Installed distributions advertising the ``layerkit.plugins`` entry point.
2. An optional local directory of single-file plugins (``*.py``, skipping
   ``_``-prefixed names). Every class defined in such a file that carries a
   ``@hookimpl`` method is instantiated and registered.

A plugin that fails to import or instantiate is logged and skipped.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

import pluggy

from layerkit.plugins.hookspecs import PROJECT_NAME, LayerkitHookSpec

ENTRY_POINT_GROUP = "layerkit.plugins"
LOCAL_MODULE_PREFIX = "layerkit_local_plugin_"

logger = logging.getLogger(__name__)


class PluginManager:
    """Owns the pluggy manager whose ``hook`` relay Layer.validate() calls."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(LayerkitHookSpec)
        self._loaded = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then those in *local_dir*; return all plugin names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_entry_point_classes()
        if local_dir is not None:
            for module in self._import_local_modules(local_dir):
                self._register_module_plugins(module)
        self._loaded = True
        names = self.list_plugin_names()
        logger.debug("Plugins loaded: %s", ", ".join(names) or "none")
        return names

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        resolved_name = name or type(plugin).__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has run."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def has_hook_impls(self, cls: type) -> bool:
        """Whether any public attribute of *cls* is marked with ``@hookimpl``."""
        return any(
            self._pm.parse_hookimpl_opts(cls, name) is not None
            for name in dir(cls)
            if not name.startswith("_")
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def _instantiate_entry_point_classes(self) -> None:
        """Swap classes registered straight from an entry point for instances.

        A registered class would leave ``self`` unbound when its hooks run.
        """
        for plugin in self.get_plugins():
            if not inspect.isclass(plugin) or not self.has_hook_impls(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)

    # ------------------------------------------------------------------
    # Local directory
    # ------------------------------------------------------------------

    def _import_local_modules(self, local_dir: Path) -> Iterator[ModuleType]:
        if not local_dir.is_dir():
            logger.debug("Plugin directory %s does not exist", local_dir)
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"{LOCAL_MODULE_PREFIX}{py_file.stem}"
            spec = importlib.util.spec_from_file_location(module_name, py_file)
            if spec is None or spec.loader is None:
                logger.warning("Could not create module spec for %s", py_file)
                continue
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            try:
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue
            yield module

    def _register_module_plugins(self, module: ModuleType) -> None:
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ != module.__name__ or not self.has_hook_impls(cls):
                continue
            try:
                plugin = cls()
            except Exception:
                logger.warning(
                    "Failed to instantiate plugin class %s from %s",
                    cls.__name__,
                    module.__file__,
                    exc_info=True,
                )
                continue
            self.register_plugin(plugin, name=f"{module.__name__}.{cls.__name__}")
