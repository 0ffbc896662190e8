"""Keeper — the registry of model types and named models."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from key_keeper.accessor import build_accessor_class
from key_keeper.commands import CommandSet
from key_keeper.definition import ModelConfigSchema, ModelDefinition
from key_keeper.exceptions import (
    DuplicateModelNameError,
    ModelConfigError,
    ModelNotFoundError,
    UnknownModelTypeError,
)
from key_keeper.model_types import TypeCatalog, builtin_catalog
from key_keeper.template import KeyTemplate, Ready

if TYPE_CHECKING:
    from key_keeper.accessor import Accessor
    from key_keeper.clients.base import StoreClient
    from key_keeper.model_types import Customize, TypeEntry

logger = logging.getLogger(__name__)


class Keeper:
    """Holds model types and named models, and binds models to keys.

    Each keeper starts with its own copy of the built-in types
    (``GENERIC``, ``STRING``, ``HASH``, ``LIST``, ``SET``, ``SORTED_SET``).
    Registration calls are serialized by an internal lock; lookups and
    binding need no locking because registered entries never change.

    Parameters:
        client:    Store client that accessors forward commands to.  May be
                   set later with :meth:`set_client`.
        partition: Optional prefix; every rendered key becomes
                   ``"<partition>:<key>"``.
        types:     Catalog to start from instead of the built-ins.  It is
                   copied, so the caller's catalog is never mutated.
    """

    def __init__(
        self,
        client: StoreClient | None = None,
        *,
        partition: str = "",
        types: TypeCatalog | None = None,
    ) -> None:
        self._client = client
        self._partition = partition
        self._types = types.copy() if types is not None else builtin_catalog()
        self._models: dict[str, ModelDefinition] = {}
        self._lock = threading.RLock()

    # ── client ───────────────────────────────────────────────

    @property
    def client(self) -> StoreClient | None:
        return self._client

    def set_client(self, client: StoreClient | None) -> None:
        """Replace the store client used by accessors bound from now on."""
        self._client = client

    @property
    def partition(self) -> str:
        return self._partition

    def apply_partition(self, key: str) -> str:
        if self._partition:
            return f"{self._partition}:{key}"
        return key

    # ── types ────────────────────────────────────────────────

    def define_type(
        self,
        type_name: Any,
        commands: Iterable[str] = (),
        customize: Customize | None = None,
    ) -> TypeEntry:
        """Register (or replace) a storage type.

        The generic command vocabulary is always prepended to *commands*.
        Redefining an existing name overwrites it; models already created
        keep their accessor classes.
        """
        with self._lock:
            return self._types.define(type_name, commands, customize)

    def define_types(self, entries: Iterable[Mapping[str, Any]]) -> list[TypeEntry]:
        """Bulk :meth:`define_type` from ``{"type", "commands", "customize"}`` mappings."""
        return [
            self.define_type(
                entry["type"],
                entry.get("commands", ()),
                entry.get("customize"),
            )
            for entry in entries
        ]

    def get_type(self, type_name: Any) -> TypeEntry | None:
        return self._types.get(type_name)

    @property
    def types(self) -> TypeCatalog:
        return self._types

    @property
    def model_types(self) -> dict[str, str]:
        """Canonical type names, keyed by themselves."""
        return {name: name for name in self._types.names()}

    # ── models ───────────────────────────────────────────────

    def create_model(self, name: str, definition: Mapping[str, Any] | ModelConfigSchema) -> ModelDefinition:
        """Register a model under *name* and return its definition.

        Raises:
            ModelConfigError:        *definition* is malformed.
            UnknownModelTypeError:   its ``type`` is not registered.
            DuplicateModelNameError: *name* is already taken.
        """
        config = _parse_definition(name, definition)

        with self._lock:
            entry = self._types.get(config.type)
            if entry is None:
                raise UnknownModelTypeError(name, config.type, self._types.names())
            if name in self._models:
                raise DuplicateModelNameError(name)

            commands = CommandSet.compute(
                entry.commands,
                config.allowed_commands,
                config.disabled_commands,
            )
            customize = partial(entry.customize, config) if entry.customize else None
            try:
                accessor_class = build_accessor_class(name, commands, customize)
            except ValueError as e:
                raise ModelConfigError(name, str(e)) from e

            model = ModelDefinition(
                name=name,
                type=entry.name,
                template=KeyTemplate.parse(config.key),
                commands=commands,
                metadata=MappingProxyType(config.metadata),
                accessor_class=accessor_class,
                source=definition,
                keeper=self,
            )
            accessor_class.definition = model
            self._models[name] = model

        logger.debug(
            "Created model '%s' (%s, key=%r, %d commands)",
            name,
            model.type,
            model.key,
            len(commands),
        )
        return model

    def create_models(
        self,
        definitions: Mapping[str, Mapping[str, Any] | ModelConfigSchema],
    ) -> list[ModelDefinition]:
        """Register every ``name -> definition`` pair in mapping order.

        The first failure propagates; models created before it stay
        registered.
        """
        return [self.create_model(name, definition) for name, definition in definitions.items()]

    def get_model(self, name: str) -> ModelDefinition | None:
        """Look up a registered model by name."""
        return self._models.get(name)

    model = get_model

    def list_models(self) -> list[str]:
        """Return registered model names in registration order."""
        return list(self._models)

    @property
    def models(self) -> Mapping[str, ModelDefinition]:
        return MappingProxyType(self._models)

    # ── binding ──────────────────────────────────────────────

    def bind(self, model: str | ModelDefinition, params: Any = None) -> Accessor:
        """Return an accessor for *model* bound to the key rendered from *params*.

        Invalid params never raise here; the error is carried by the
        accessor and reported when a command is invoked.
        """
        if isinstance(model, str):
            definition = self._models.get(model)
            if definition is None:
                raise ModelNotFoundError(model)
        else:
            definition = model

        state = definition.template.resolve(params)
        if isinstance(state, Ready):
            state = Ready(self.apply_partition(state.key))
            logger.debug("Bound model '%s' to key '%s'", definition.name, state.key)
        else:
            logger.debug("Bound model '%s' with deferred error: %s", definition.name, state.error)
        return definition.accessor_class(state, self._client)


def _parse_definition(name: str, definition: Any) -> ModelConfigSchema:
    if isinstance(definition, ModelConfigSchema):
        return definition
    try:
        return ModelConfigSchema.model_validate(definition)
    except ValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'definition'}: {err['msg']}" for err in e.errors()
        )
        raise ModelConfigError(name, detail) from e
