# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Executor for running model commands described as JSON.

Orchestrates the full execution flow:
1. Create store client from configuration
2. Build a Keeper, define extra types and load the plugin
3. Register models
4. Bind each command's model and run the command
5. Return structured result
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from key_keeper import Keeper
from key_keeper.commands import canonical_command
from key_keeper.exceptions import KeeperError

from .factory import ClientFactory, ClientFactoryError
from .plugin import PluginLoadError, load_plugin
from .schema import CommandResultSchema, CommandSchema, RunnerInput, RunnerOutput

if TYPE_CHECKING:
    from key_keeper.clients.base import StoreClient

logger = logging.getLogger(__name__)


class Executor:
    """Executes a batch of model commands.

    Responsibilities:
    - Create store client from configuration
    - Register types and models on a fresh Keeper
    - Run each command and collect its outcome
    - Translate results to output schema

    Setup failures (bad client config, unknown model type, duplicate names,
    broken plugin) fail the whole run.  Command failures (invalid key
    params, disallowed commands, store errors) are reported per command.

    Example:
        executor = Executor()
        output = await executor.execute(input_data)

        # For testing with an injected client:
        executor = Executor(client=InMemoryClient())
    """

    def __init__(self, client: StoreClient | None = None) -> None:
        """Initialize executor with optional injected client.

        Args:
            client: Optional client to use instead of creating from config.
                    Useful for testing.
        """
        self._injected_client = client

    async def execute(self, input_data: RunnerInput) -> RunnerOutput:
        """Execute the full flow.

        Args:
            input_data: Complete runner input

        Returns:
            RunnerOutput with per-command results or setup error details

        Note:
            This method catches all exceptions and returns them as
            RunnerOutput errors, ensuring valid JSON is always returned.
        """
        try:
            return await self._execute_internal(input_data)
        except (ClientFactoryError, PluginLoadError, KeeperError) as e:
            return RunnerOutput(
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )
        except Exception as e:
            logger.exception("Runner failed")
            return RunnerOutput(
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def _execute_internal(self, input_data: RunnerInput) -> RunnerOutput:
        """Internal execution logic.

        Separated from execute() to allow exception propagation
        for testing while execute() catches all errors.
        """
        client = self._injected_client or ClientFactory().create(input_data.client)
        owns_client = self._injected_client is None

        try:
            keeper = self._build_keeper(input_data, client)
            results = [await self._run_command(keeper, command) for command in input_data.commands]
            return RunnerOutput(
                success=all(r.success for r in results),
                results=results,
            )
        finally:
            if owns_client:
                await _close(client)

    def _build_keeper(self, input_data: RunnerInput, client: StoreClient) -> Keeper:
        """Create the keeper and register types, plugin types and models."""
        keeper = Keeper(client, partition=input_data.client.partition)

        for type_config in input_data.types:
            keeper.define_type(type_config.type, type_config.commands)

        if input_data.plugin_path:
            register = load_plugin(input_data.plugin_path)
            register(keeper)

        keeper.create_models(input_data.models)
        return keeper

    async def _run_command(self, keeper: Keeper, command: CommandSchema) -> CommandResultSchema:
        """Run one command, converting any failure into a result entry."""
        name = canonical_command(command.command)
        outcome = CommandResultSchema(model=command.model, command=name, success=False)

        try:
            accessor = keeper.bind(command.model, command.params)
            outcome.key = accessor.key
            if name not in accessor.commands:
                outcome.error = f"Command '{name}' is not available on model '{command.model}'"
                outcome.error_type = "CommandNotAllowed"
                return outcome

            forward = getattr(accessor, name)
            results = await forward(*command.args, **command.kwargs).gather()
        except Exception as e:
            logger.debug("Command '%s' on model '%s' failed: %s", name, command.model, e)
            outcome.error = str(e)
            outcome.error_type = type(e).__name__
            return outcome

        outcome.success = True
        outcome.result = _jsonable(results[0])
        return outcome


async def _close(client: Any) -> None:
    close = getattr(client, "aclose", None) or getattr(client, "close", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


def _jsonable(value: Any) -> Any:
    """Convert store results (sets, tuples) into JSON-friendly values."""
    if isinstance(value, set | frozenset):
        return sorted(_jsonable(v) for v in value)
    if isinstance(value, list | tuple):
        return [_jsonable(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value
