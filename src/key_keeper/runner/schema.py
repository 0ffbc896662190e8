# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Data transfer objects for runner input/output.

These Pydantic models define the JSON contract of
``python -m key_keeper.runner``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from key_keeper.definition import ModelConfigSchema


class ClientConfigSchema(BaseModel):
    """Store client configuration.

    Attributes:
        type: Client type ("memory" or "redis")
        host: Redis host.  Use an address, not "localhost", inside containers
        port: Redis port
        password: Redis password (empty for none)
        db: Redis database index
        connect_timeout: Connection timeout in seconds
        partition: Prefix added to every key as "<partition>:"
    """

    type: str = "memory"
    host: str = "0.0.0.0"
    port: int = 6379
    password: str = ""
    db: int = 0
    connect_timeout: float = 10.0
    partition: str = ""


class TypeConfigSchema(BaseModel):
    """Extra model type declared in the input.

    Attributes:
        type: Type name, normalized to uppercase snake case
        commands: Commands added on top of the generic vocabulary
    """

    type: str
    commands: list[str] = Field(default_factory=list)


class CommandSchema(BaseModel):
    """One command to run against a bound model.

    Attributes:
        model: Registered model name
        params: Key params (scalar, list or object)
        command: Command name, e.g. "hset"
        args: Positional arguments after the key
        kwargs: Keyword arguments
    """

    model: str
    params: Any = None
    command: str
    args: list[Any] = Field(default_factory=list)
    kwargs: dict[str, Any] = Field(default_factory=dict)


class RunnerInput(BaseModel):
    """Complete input read from stdin.

    Attributes:
        client: Store client configuration
        types: Extra model types to define before registering models
        plugin_path: Optional Python file whose register(keeper) defines types
        models: Model definitions keyed by model name
        commands: Commands to execute, in order
        log_level: Level for runner logs written to stderr
    """

    client: ClientConfigSchema = Field(default_factory=ClientConfigSchema)
    types: list[TypeConfigSchema] = Field(default_factory=list)
    plugin_path: str | None = None
    models: dict[str, ModelConfigSchema] = Field(default_factory=dict)
    commands: list[CommandSchema] = Field(default_factory=list)
    log_level: str = "WARNING"


class CommandResultSchema(BaseModel):
    """Outcome of a single command.

    Attributes:
        model: Model the command was issued on
        command: Command name
        key: Resolved key (None when params were invalid)
        success: Whether the command completed
        result: Store result (on success)
        error: Error message (on failure)
        error_type: Error class name (on failure)
    """

    model: str
    command: str
    key: str | None = None
    success: bool
    result: Any = None
    error: str = ""
    error_type: str = ""


class RunnerOutput(BaseModel):
    """Complete output written to stdout.

    The runner always outputs valid JSON matching this schema, even on
    errors.

    Attributes:
        success: Whether every command completed successfully
        results: Per-command outcomes, in input order
        error: Error message (on setup failure)
        error_type: Error class name (on setup failure)
    """

    success: bool
    results: list[CommandResultSchema] = Field(default_factory=list)
    error: str = ""
    error_type: str = ""
