from __future__ import annotations

import types
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable

from typing_extensions import Self

from dependency_arguments.model.errors import InvalidArgumentKeyError


class ArgumentKeyKind(Enum):
    NAME = "name"
    TYPE = "type"


def _fold_char(c: str) -> str:
    upper = c.upper()
    # only one-to-one mappings; "ß" -> "SS" and friends keep their own identity
    return upper if len(upper) == 1 else c


def normalize_argument_name(name: str) -> str:
    """
    Normalize an argument name for consistent keying.

    Each character is upper-cased on its own, independent of locale, so
    "logLevel", "LogLevel" and "LOGLEVEL" collapse to the same key while
    "straße" and "STRASSE", or the Kelvin sign and "k", stay distinct.
    """
    return "".join(_fold_char(c) for c in name)


def argument_key_kind(key: object) -> ArgumentKeyKind | None:
    """
    Kind of key ``key`` would make, or None if it can't be an argument key.

    Parameterized generics such as ``list[int]`` are not type identities, even
    on interpreters where they pass ``isinstance(..., type)``.
    """
    if isinstance(key, str):
        return ArgumentKeyKind.NAME
    if isinstance(key, type) and not isinstance(key, types.GenericAlias):
        return ArgumentKeyKind.TYPE
    return None


@dataclass(frozen=True, slots=True)
class ArgumentKey:
    """
    Tagged key for a single entry in an argument container.

    ``value`` is the key exactly as the caller supplied it; equality and hashing
    only look at ``kind`` and the normalized form, so a name never equals a type
    and a type only equals itself (no subclass or superclass matching).

    Attributes:
        kind (ArgumentKeyKind): Whether this is a named or a typed key.
        value (str | type): The original key, kept for enumeration.
        normalized (Hashable): The folded name, or the type object itself.
    """

    kind: ArgumentKeyKind
    value: str | type
    normalized: Hashable = field(init=False, repr=False)

    def __post_init__(self) -> None:
        match self.kind:
            case ArgumentKeyKind.NAME:
                object.__setattr__(
                    self, "normalized", normalize_argument_name(str(self.value))
                )
            case ArgumentKeyKind.TYPE:
                object.__setattr__(self, "normalized", self.value)

    @classmethod
    def of(cls, key: Any) -> Self:
        """
        Build a key from a name or a type.

        Raises:
            InvalidArgumentKeyError: If ``key`` is neither a str nor a type.
        """
        if isinstance(key, ArgumentKey):
            return key
        kind = argument_key_kind(key)
        if kind is None:
            raise InvalidArgumentKeyError(key)
        return cls(kind, key)

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, ArgumentKey)
            and self.kind is other.kind
            and self.normalized == other.normalized
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.normalized))

    def __str__(self) -> str:
        if self.kind is ArgumentKeyKind.TYPE:
            return f"{self.value.__module__}.{self.value.__qualname__}"
        return self.value
