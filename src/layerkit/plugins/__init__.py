"""Extension layer — validation plugins via pluggy.

Discovery: entry_points (pip-installed) plus an optional local directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from layerkit.plugins.hookspecs import hookimpl
from layerkit.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
