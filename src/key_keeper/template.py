"""KeyTemplate — parse key patterns and render concrete keys from params."""

from __future__ import annotations

import numbers
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from key_keeper.exceptions import (
    InvalidParamTypeError,
    KeyResolutionError,
    ParamCountMismatchError,
)

PLACEHOLDER_RE = re.compile(r"\{([A-Za-z0-9_]+)\}")


@dataclass(frozen=True)
class Ready:
    """A successfully resolved key."""

    key: str


@dataclass(frozen=True)
class Failed:
    """A key that could not be resolved, carrying the error for later."""

    error: KeyResolutionError


Resolution = Ready | Failed


def is_valid_param(value: Any) -> bool:
    """Return ``True`` for numbers and non-empty strings."""
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Number):
        return True
    return isinstance(value, str) and value != ""


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray)


@dataclass(frozen=True)
class KeyTemplate:
    """A key pattern split into literal segments and placeholder names.

    ``"post:{postId}:comments:{commentId}"`` parses into::

        segments     = ("post:", ":comments:", "")
        placeholders = ("postId", "commentId")

    There is always exactly one more segment than there are placeholders.
    Duplicate placeholder names are kept and bound independently.
    """

    pattern: str
    segments: tuple[str, ...]
    placeholders: tuple[str, ...]

    @classmethod
    def parse(cls, pattern: str) -> KeyTemplate:
        # re.split with one capturing group alternates literal, name, literal, ...
        parts = PLACEHOLDER_RE.split(pattern)
        return cls(
            pattern=pattern,
            segments=tuple(parts[0::2]),
            placeholders=tuple(parts[1::2]),
        )

    @property
    def is_raw(self) -> bool:
        """``True`` when the pattern has no placeholders."""
        return not self.placeholders

    def resolve(self, values: Any = None) -> Resolution:
        """Render the key, returning ``Ready`` or ``Failed``.  Never raises.

        *values* may be a bare scalar (only for single-placeholder
        templates), a list/tuple bound positionally, or a mapping keyed by
        placeholder name.  Templates without placeholders ignore *values*.
        """
        if self.is_raw:
            return Ready(self.pattern)

        if len(self.placeholders) == 1 and not _is_sequence(values) and not isinstance(values, Mapping):
            if not is_valid_param(values):
                return Failed(InvalidParamTypeError(self.pattern, values))
            return Ready(self._join([values]))

        if _is_sequence(values):
            bound = list(values)
            if len(bound) != len(self.placeholders):
                return Failed(
                    ParamCountMismatchError(
                        self.pattern,
                        expected=self.placeholders,
                        missing=_dedupe(self.placeholders[len(bound) :]),
                        received=len(bound),
                    )
                )
            return Ready(self._join(bound))

        given: Mapping[str, Any] = values if isinstance(values, Mapping) else {}
        accepted = {name: given[name] for name in self.placeholders if is_valid_param(given.get(name))}
        bound = [accepted[name] for name in self.placeholders if name in accepted]
        if len(bound) != len(self.placeholders):
            return Failed(
                ParamCountMismatchError(
                    self.pattern,
                    expected=self.placeholders,
                    missing=_dedupe(n for n in self.placeholders if n not in accepted),
                    received=len(bound),
                )
            )
        return Ready(self._join(bound))

    def render(self, values: Any = None) -> str:
        """Like :meth:`resolve` but raises the resolution error."""
        result = self.resolve(values)
        if isinstance(result, Failed):
            raise result.error
        return result.key

    def _join(self, values: Sequence[Any]) -> str:
        parts = [self.segments[0]]
        for value, literal in zip(values, self.segments[1:], strict=True):
            parts.append(str(value))
            parts.append(literal)
        return "".join(parts)


def _dedupe(names: Any) -> list[str]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)
