# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Dynamic loading of type plugins.

A plugin is a Python file defining ``register(keeper)``, used to declare
model types that JSON input cannot express (types with customization
hooks, for example).
"""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from key_keeper.keeper import Keeper

_MODULE_NAME = "key_keeper_plugin"


class PluginLoadError(Exception):
    """Raised when a plugin cannot be loaded."""

    pass


def load_plugin(plugin_path: str) -> Callable[[Keeper], object]:
    """Load the ``register`` function from a plugin file.

    Args:
        plugin_path: Path to the plugin .py file

    Returns:
        The register callable

    Raises:
        PluginLoadError: If the plugin cannot be loaded

    Example:
        register = load_plugin("/path/to/types.py")
        register(keeper)
    """
    path = Path(plugin_path)

    if not path.exists():
        raise PluginLoadError(f"Plugin file not found: {plugin_path}")

    if not path.is_file():
        raise PluginLoadError(f"Plugin path is not a file: {plugin_path}")

    if path.suffix != ".py":
        raise PluginLoadError(f"Plugin must be a .py file: {plugin_path}")

    try:
        spec = importlib.util.spec_from_file_location(_MODULE_NAME, path)
        if spec is None or spec.loader is None:
            raise PluginLoadError(f"Cannot create module spec: {plugin_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[_MODULE_NAME] = module
        spec.loader.exec_module(module)

        register = getattr(module, "register", None)
        if register is None:
            raise PluginLoadError(f"Plugin must define a 'register' function: {plugin_path}")

        if not callable(register):
            raise PluginLoadError(f"'register' must be callable: {plugin_path}")

        return cast(Callable[["Keeper"], object], register)

    except PluginLoadError:
        raise
    except SyntaxError as e:
        raise PluginLoadError(f"Syntax error in plugin: {e}") from e
    except ImportError as e:
        raise PluginLoadError(f"Import error in plugin: {e}") from e
    except Exception as e:
        raise PluginLoadError(f"Failed to load plugin: {e}") from e
