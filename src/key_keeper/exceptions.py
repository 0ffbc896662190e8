"""Custom exceptions for the key_keeper package."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


def _names(items: Sequence[str]) -> str:
    return "[" + ", ".join(items) + "]"


class KeeperError(Exception):
    """Base exception for all key_keeper errors."""


class ModelConfigError(KeeperError):
    """Raised when a model definition is malformed."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Model '{name}' misconfigured: {message}")


class UnknownModelTypeError(KeeperError):
    """Raised when a model definition references an undeclared type."""

    def __init__(self, name: str, type_name: str, available: Sequence[str] = ()) -> None:
        self.name = name
        self.type_name = type_name
        msg = f"Model '{name}' has unknown type '{type_name}'"
        if available:
            msg += f". Available types: {', '.join(available)}"
        super().__init__(msg)


class DuplicateModelNameError(KeeperError):
    """Raised when a model name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Model '{name}' is already registered")


class ModelNotFoundError(KeeperError):
    """Raised when binding a model name that was never registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Model '{name}' is not registered")


class KeyResolutionError(KeeperError):
    """Base for errors raised while rendering a key template.

    These are never raised at bind time.  They are carried on the accessor
    and delivered when a command is invoked.
    """

    def __init__(self, pattern: str, message: str) -> None:
        self.pattern = pattern
        super().__init__(f"Cannot resolve key '{pattern}': {message}")


class InvalidParamTypeError(KeyResolutionError):
    """Raised when a key parameter is neither a number nor a non-empty string."""

    def __init__(self, pattern: str, value: Any) -> None:
        self.value = value
        super().__init__(
            pattern,
            f"param must be a number or a non-empty string, got {value!r}",
        )


class ParamCountMismatchError(KeyResolutionError):
    """Raised when the supplied params do not cover every placeholder.

    Attributes:
        expected: Placeholder names in declaration order.
        missing:  Placeholder names with no usable value, in declaration
                  order and without duplicates.
        received: Number of usable values that were supplied.
    """

    def __init__(
        self,
        pattern: str,
        expected: Sequence[str],
        missing: Sequence[str],
        received: int,
    ) -> None:
        self.expected = list(expected)
        self.missing = list(missing)
        self.received = received
        msg = f"expected {len(self.expected)} params for {_names(self.expected)}, got {received}"
        if self.missing:
            msg += f"; missing {_names(self.missing)}"
        super().__init__(pattern, msg)


class StoreError(KeeperError):
    """Raised when a store client operation fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
