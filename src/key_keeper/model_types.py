"""Model types — the catalog of storage types and their command vocabularies."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from key_keeper.commands import (
    GENERIC_COMMANDS,
    HASH_COMMANDS,
    LIST_COMMANDS,
    SET_COMMANDS,
    SORTED_SET_COMMANDS,
    STRING_COMMANDS,
    ordered_unique,
)

if TYPE_CHECKING:
    from key_keeper.accessor import AccessorBuilder
    from key_keeper.definition import ModelConfigSchema

logger = logging.getLogger(__name__)

# Hook run while a model's accessor class is being built.
Customize = Callable[["ModelConfigSchema", "AccessorBuilder"], None]


class ModelType(str, Enum):
    """Built-in storage types."""

    GENERIC = "GENERIC"
    STRING = "STRING"
    HASH = "HASH"
    LIST = "LIST"
    SET = "SET"
    SORTED_SET = "SORTED_SET"


def canonical_type_name(name: Any) -> str:
    """Normalize a type name: ``"sortedSet"`` / ``"sorted set"`` -> ``"SORTED_SET"``."""
    if isinstance(name, Enum):
        name = name.value
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", str(name).strip())
    return re.sub(r"[^A-Za-z0-9]+", "_", text).strip("_").upper()


@dataclass(frozen=True)
class TypeEntry:
    """A registered storage type.

    Attributes:
        name:      Canonical uppercase type name.
        commands:  Generic commands followed by the type's own, de-duplicated.
        customize: Optional hook ``(definition, builder) -> None``.
    """

    name: str
    commands: tuple[str, ...]
    customize: Customize | None = None


class TypeCatalog:
    """Mapping of canonical type name to :class:`TypeEntry`.

    Redefining a name replaces the previous entry.  Models created earlier
    keep the accessor class they were built with.
    """

    def __init__(self, entries: Iterable[TypeEntry] = ()) -> None:
        self._entries: dict[str, TypeEntry] = {}
        for entry in entries:
            self._entries[entry.name] = entry

    def define(
        self,
        type_name: Any,
        commands: Iterable[str] = (),
        customize: Customize | None = None,
    ) -> TypeEntry:
        name = canonical_type_name(type_name)
        if not name:
            raise ValueError(f"Invalid type name: {type_name!r}")

        entry = TypeEntry(
            name=name,
            commands=ordered_unique([*GENERIC_COMMANDS, *commands]),
            customize=customize,
        )
        if name in self._entries:
            logger.warning("Redefining model type '%s'", name)
        else:
            logger.debug("Defined model type '%s' with %d commands", name, len(entry.commands))
        self._entries[name] = entry
        return entry

    def get(self, type_name: Any) -> TypeEntry | None:
        return self._entries.get(canonical_type_name(type_name))

    def names(self) -> list[str]:
        return list(self._entries)

    def copy(self) -> TypeCatalog:
        return TypeCatalog(self._entries.values())

    def __contains__(self, type_name: object) -> bool:
        return canonical_type_name(type_name) in self._entries

    def __iter__(self) -> Iterator[TypeEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def _attach_fields(definition: ModelConfigSchema, builder: AccessorBuilder) -> None:
    """Expose a hash model's ``fields`` map on its accessor class."""
    fields = definition.metadata.get("fields")
    if fields:
        builder.set_attribute("fields", fields)


def builtin_catalog() -> TypeCatalog:
    """Return a fresh catalog holding the built-in types."""
    catalog = TypeCatalog()
    catalog.define(ModelType.GENERIC)
    catalog.define(ModelType.STRING, STRING_COMMANDS)
    catalog.define(ModelType.HASH, HASH_COMMANDS, _attach_fields)
    catalog.define(ModelType.LIST, LIST_COMMANDS)
    catalog.define(ModelType.SET, SET_COMMANDS)
    catalog.define(ModelType.SORTED_SET, SORTED_SET_COMMANDS)
    return catalog
