from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import Any, ClassVar

from typing_extensions import Self

from dependency_arguments.model.errors import (
    ArgumentNotFoundError,
    InvalidArgumentKeyError,
    ReadOnlyArgumentsError,
)
from dependency_arguments.model.keys import ArgumentKey, ArgumentKeyKind
from dependency_arguments.properties import PropertyExtractor, public_properties

_UNSET: Any = object()


def _iter_pairs(
    values: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
) -> Iterable[tuple[Any, Any]]:
    if isinstance(values, Mapping):
        return values.items()
    return values


class Arguments(MutableMapping[Any, Any]):
    """
    Named and typed arguments handed to a dependency resolution pipeline.

    Every entry is keyed either by a name (``str``, matched without regard to
    letter case) or by an exact type (``type``, no subclass or superclass
    matching). Both key kinds live in one store, so enumeration order is not
    part of the contract.

    Inserting a key that already exists replaces the value; the key object from
    the first insertion is kept for enumeration. All builder methods return the
    container so calls can be chained:

        Arguments().add_named("hostname", "localhost").add_typed_instances(42)

    Bulk operations validate every key before writing anything, so a rejected
    call never leaves a partial merge behind.

    ``Arguments.EMPTY`` is a shared, permanently read-only instance. Mutating
    it raises ReadOnlyArgumentsError; ``clone()`` always returns a writable copy.
    """

    EMPTY: ClassVar[Arguments]

    def __init__(
        self,
        values: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None = None,
        *,
        property_extractor: PropertyExtractor | None = None,
    ) -> None:
        self._entries: dict[ArgumentKey, Any] = {}
        self._read_only = False
        self._property_extractor: PropertyExtractor = (
            property_extractor or public_properties
        )
        if values is not None:
            self._merge(_iter_pairs(values))

    @classmethod
    def named(cls, name: str, value: Any) -> Self:
        return cls().add_named(name, value)

    @classmethod
    def typed(cls, key_type: type, value: Any) -> Self:
        return cls().add_typed(key_type, value)

    # --------------------------------------------------------------------- #
    # Read-only guard
    # --------------------------------------------------------------------- #

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    @property
    def property_extractor(self) -> PropertyExtractor:
        return self._property_extractor

    def freeze(self) -> Self:
        """
        Mark this container read-only. There is no way back; use ``clone()`` to
        get a writable copy.
        """
        self._read_only = True
        return self

    def _ensure_writable(self) -> None:
        if self._read_only:
            raise ReadOnlyArgumentsError()

    def _merge(
        self,
        pairs: Iterable[tuple[Any, Any]],
        *,
        kind: ArgumentKeyKind | None = None,
    ) -> None:
        self._ensure_writable()
        staged: list[tuple[ArgumentKey, Any]] = []
        for raw_key, value in pairs:
            key = ArgumentKey.of(raw_key)
            if kind is not None and key.kind is not kind:
                raise InvalidArgumentKeyError(raw_key)
            staged.append((key, value))
        for key, value in staged:
            self._entries[key] = value

    # --------------------------------------------------------------------- #
    # Store
    # --------------------------------------------------------------------- #

    @staticmethod
    def _lookup_key(key: Any) -> ArgumentKey | None:
        try:
            return ArgumentKey.of(key)
        except InvalidArgumentKeyError:
            return None

    def __getitem__(self, key: Any) -> Any:
        lookup = self._lookup_key(key)
        if lookup is None or lookup not in self._entries:
            raise ArgumentNotFoundError(key)
        return self._entries[lookup]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._merge(((key, value),))

    def __delitem__(self, key: Any) -> None:
        self._ensure_writable()
        lookup = self._lookup_key(key)
        if lookup is None or lookup not in self._entries:
            raise ArgumentNotFoundError(key)
        del self._entries[lookup]

    def __contains__(self, key: object) -> bool:
        lookup = self._lookup_key(key)
        return lookup is not None and lookup in self._entries

    def __iter__(self) -> Iterator[str | type]:
        for key in self._entries:
            yield key.value

    def __len__(self) -> int:
        return len(self._entries)

    def remove(self, key: Any) -> None:
        """
        Remove ``key`` if present. Unlike ``del``, a missing key is not an error.
        """
        self._ensure_writable()
        lookup = self._lookup_key(key)
        if lookup is not None:
            self._entries.pop(lookup, None)

    def clear(self) -> None:
        self._ensure_writable()
        self._entries.clear()

    def keys(self) -> tuple[str | type, ...]:  # type: ignore[override]
        return tuple(key.value for key in self._entries)

    def values(self) -> tuple[Any, ...]:  # type: ignore[override]
        return tuple(self._entries.values())

    def pop(self, key: Any, default: Any = _UNSET) -> Any:
        self._ensure_writable()
        if default is _UNSET:
            return super().pop(key)
        return super().pop(key, default)

    def popitem(self) -> tuple[Any, Any]:
        self._ensure_writable()
        return super().popitem()

    def setdefault(self, key: Any, default: Any = None) -> Any:
        self._ensure_writable()
        return super().setdefault(key, default)

    def update(self, other: Any = (), /, **kwargs: Any) -> None:
        self._ensure_writable()
        pairs = list(_iter_pairs(other))
        pairs.extend(kwargs.items())
        self._merge(pairs)

    def clone(self) -> Arguments:
        """
        Return a writable copy with the same entries, whatever this container's
        read-only flag says.
        """
        other = Arguments(property_extractor=self._property_extractor)
        other._entries = dict(self._entries)
        return other

    def __copy__(self) -> Arguments:
        return self.clone()

    def __deepcopy__(self, memo: dict[int, Any]) -> Arguments:
        other = Arguments(property_extractor=self._property_extractor)
        other._entries = {
            key: copy.deepcopy(value, memo) for key, value in self._entries.items()
        }
        return other

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        try:
            normalized = {ArgumentKey.of(k): v for k, v in other.items()}
        except InvalidArgumentKeyError:
            return False
        return self._entries == normalized

    def __repr__(self) -> str:
        body = ", ".join(
            f"{key.value!r}: {value!r}" for key, value in self._entries.items()
        )
        flag = ", read_only=True" if self._read_only else ""
        return f"{type(self).__name__}({{{body}}}{flag})"

    # --------------------------------------------------------------------- #
    # Fluent builder
    # --------------------------------------------------------------------- #

    def add(self, values: Mapping[Any, Any]) -> Self:
        """
        Insert a mix of named (str) and typed (type) arguments.

        Raises:
            InvalidArgumentKeyError: If any key is neither a str nor a type. No
                entry from ``values`` is written in that case.
        """
        self._merge(_iter_pairs(values))
        return self

    def add_named(self, name: str, value: Any) -> Self:
        self._merge(((name, value),), kind=ArgumentKeyKind.NAME)
        return self

    def add_named_values(self, values: Mapping[str, Any]) -> Self:
        """
        Insert named arguments from a mapping. When two input names fold to the
        same key, the later one wins.
        """
        self._merge(_iter_pairs(values), kind=ArgumentKeyKind.NAME)
        return self

    def add_properties(self, instance: Any) -> Self:
        """
        Insert the publicly readable members of ``instance`` as named arguments.

        Extraction is delegated to the configured property extractor, so plain
        objects, dataclasses, named tuples and dicts all work with the default.
        """
        self._ensure_writable()
        self._merge(
            list(self._property_extractor(instance)), kind=ArgumentKeyKind.NAME
        )
        return self

    def add_typed(self, key_type: type, value: Any) -> Self:
        self._merge(((key_type, value),), kind=ArgumentKeyKind.TYPE)
        return self

    def add_typed_instances(self, *values: Any) -> Self:
        """
        Insert each value keyed by its own concrete runtime type.

        A later lookup must use that exact type: ``add_typed_instances(True)``
        is found under ``bool``, never under ``int``.
        """
        self._ensure_writable()
        for value in values:
            if value is None:
                raise ValueError(
                    "cannot infer an argument type from None; use add_typed() instead"
                )
        self._merge(
            ((type(value), value) for value in values), kind=ArgumentKeyKind.TYPE
        )
        return self


Arguments.EMPTY = Arguments().freeze()
