"""ModelDefinition — the immutable record produced by model registration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from key_keeper.commands import CommandSet
from key_keeper.template import KeyTemplate

if TYPE_CHECKING:
    from key_keeper.accessor import Accessor
    from key_keeper.keeper import Keeper


class ModelConfigSchema(BaseModel):
    """User-facing shape of a model definition.

    Attributes:
        type:              Storage type name (``"HASH"``, ``ModelType.SET`` ...).
        key:               Raw key or key template, e.g. ``"post:{postId}"``.
        allowed_commands:  Optional allow-list (alias ``allowedCommands``).
        disabled_commands: Optional deny-list (alias ``disabledCommands``).

    Any other keys are kept as type-specific metadata (``fields`` for
    hashes, for instance).
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    type: str
    key: str
    allowed_commands: list[str] | None = Field(default=None, alias="allowedCommands")
    disabled_commands: list[str] | None = Field(default=None, alias="disabledCommands")

    @field_validator("type", mode="before")
    @classmethod
    def _enum_to_str(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


@dataclass(frozen=True, eq=False)
class ModelDefinition:
    """A registered model: type, key template, command set and metadata.

    Instances are created by :meth:`Keeper.create_model` and never mutated.
    Use :meth:`get` (or :meth:`Keeper.bind`) to obtain an accessor bound to
    a concrete key.
    """

    name: str
    type: str
    template: KeyTemplate
    commands: CommandSet
    metadata: Mapping[str, Any]
    accessor_class: type[Accessor]
    source: Any = None
    keeper: Keeper | None = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> str:
        return self.template.pattern

    @property
    def fields(self) -> Any:
        return self.metadata.get("fields")

    def get_key(self, params: Any = None) -> str:
        """Render the key for *params*, raising on invalid params."""
        key = self.template.render(params)
        if self.keeper is not None:
            return self.keeper.apply_partition(key)
        return key

    def get(self, params: Any = None) -> Accessor:
        """Return an accessor bound to the key rendered from *params*."""
        if self.keeper is None:
            raise RuntimeError(f"Model '{self.name}' is not attached to a Keeper")
        return self.keeper.bind(self, params)
