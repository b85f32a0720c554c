from __future__ import annotations

import inspect
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import fields, is_dataclass
from typing import Any, Protocol


class PropertyExtractor(Protocol):
    """
    Turns an arbitrary object into (name, value) pairs for named arguments.

    The container never introspects objects itself; it calls whatever extractor
    it was configured with and inserts the pairs like any other named entry.
    """

    def __call__(self, instance: Any, /) -> Iterable[tuple[str, Any]]: ...


def _is_public(name: str) -> bool:
    return not name.startswith("_")


def _iter_mapping(instance: Mapping[Any, Any]) -> Iterator[tuple[str, Any]]:
    for key, value in instance.items():
        if not isinstance(key, str):
            raise TypeError(
                f"property names must be str; got {type(key).__name__} key {key!r}"
            )
        yield key, value


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(s for s in slots if s not in names)
    return names


def _iter_attributes(instance: Any) -> Iterator[tuple[str, Any]]:
    seen: set[str] = set()

    instance_dict: Mapping[str, Any] = getattr(instance, "__dict__", {})
    for name, value in instance_dict.items():
        if _is_public(name):
            seen.add(name)
            yield name, value

    for name in _slot_names(type(instance)):
        if name in seen or not _is_public(name) or not hasattr(instance, name):
            continue
        seen.add(name)
        yield name, getattr(instance, name)

    # readable properties declared on the class (and its bases)
    for name, member in inspect.getmembers(type(instance)):
        if name in seen or not _is_public(name):
            continue
        if isinstance(member, property) and member.fget is not None:
            seen.add(name)
            yield name, member.fget(instance)


def public_properties(instance: Any) -> Iterable[tuple[str, Any]]:
    """
    Default extractor: publicly readable members of ``instance``.

    Supported shapes, checked in order:
      - Mapping with str keys: its items (anonymous-record style input)
      - dataclass instance: its fields
      - named tuple: its fields
      - any other object: public instance attributes (``__dict__`` and
        ``__slots__``) followed by public readable properties of its class

    Names starting with an underscore are never yielded for plain objects.
    """
    if instance is None:
        raise TypeError("cannot extract properties from None")

    if isinstance(instance, Mapping):
        return list(_iter_mapping(instance))

    if is_dataclass(instance) and not isinstance(instance, type):
        return [(f.name, getattr(instance, f.name)) for f in fields(instance)]

    if isinstance(instance, tuple) and hasattr(instance, "_asdict"):
        return list(instance._asdict().items())

    return list(_iter_attributes(instance))


def mapping_properties(instance: Any) -> Iterable[tuple[str, Any]]:
    """
    Strict extractor that only accepts mappings with str keys.
    """
    if not isinstance(instance, Mapping):
        raise TypeError(
            f"mapping extractor requires a Mapping; got {type(instance).__name__}"
        )
    return list(_iter_mapping(instance))
