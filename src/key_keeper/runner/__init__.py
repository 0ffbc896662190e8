# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Runner submodule for executing model commands described as JSON.

Usage:
    python -m key_keeper.runner < input.json > output.json

Exports:
    Executor: Main orchestrator for a batch of commands
    ClientFactory: Creates store clients from configuration
    RunnerInput: Input schema
    RunnerOutput: Output schema
"""

from .executor import Executor
from .factory import ClientFactory, ClientFactoryError
from .plugin import PluginLoadError, load_plugin
from .schema import (
    ClientConfigSchema,
    CommandResultSchema,
    CommandSchema,
    RunnerInput,
    RunnerOutput,
    TypeConfigSchema,
)

__all__ = [
    "ClientConfigSchema",
    "ClientFactory",
    "ClientFactoryError",
    "CommandResultSchema",
    "CommandSchema",
    "Executor",
    "PluginLoadError",
    "RunnerInput",
    "RunnerOutput",
    "TypeConfigSchema",
    "load_plugin",
]
