from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, TypedDict

from dependency_arguments.arguments import Arguments
from dependency_arguments.internal.extractors.registry import (
    PropertyExtractorRegistry,
    select_property_extractor,
)
from dependency_arguments.internal.util.toml import load_toml_file, load_toml_text

_CONFIG_KEYS = frozenset({"property_extractor", "named"})


class ArgumentsConfigError(RuntimeError):
    pass


class ArgumentsConfig(TypedDict, total=False):
    """
    Configuration for building an Arguments container.

    Keys:
      - property_extractor: id of the extractor used by ``add_properties``
        (builtin or entry point); the default extractor when absent
      - named: named arguments to seed the container with

    Typed arguments cannot be expressed in configuration; add them in code.
    """

    property_extractor: str
    named: Mapping[str, Any]


def _validate_config(config: Mapping[str, Any]) -> None:
    if not isinstance(config, Mapping):
        raise ArgumentsConfigError(
            f"arguments config must be a mapping; got {type(config).__name__}"
        )

    unknown = set(config) - _CONFIG_KEYS
    if unknown:
        raise ArgumentsConfigError(
            f"unknown arguments config keys: {sorted(unknown)}. allowed={sorted(_CONFIG_KEYS)}"
        )

    extractor_id = config.get("property_extractor")
    if extractor_id is not None and (
        not isinstance(extractor_id, str) or not extractor_id
    ):
        raise ArgumentsConfigError("property_extractor must be a non-empty string")

    named = config.get("named", {})
    if not isinstance(named, Mapping):
        raise ArgumentsConfigError(
            f"named: expected a table, got {type(named).__name__}"
        )
    bad = [k for k in named if not isinstance(k, str)]
    if bad:
        raise ArgumentsConfigError(f"named: argument names must be strings: {bad!r}")


def arguments_from_config(
    config: ArgumentsConfig | Mapping[str, Any],
    *,
    registry: PropertyExtractorRegistry | None = None,
) -> Arguments:
    """
    Build a writable Arguments container from a configuration mapping.

    Raises:
      ArgumentsConfigError: if the mapping does not have the expected shape.
      PropertyExtractorSelectionError: if the configured extractor id is unknown.
    """
    _validate_config(config)

    selection = select_property_extractor(
        config.get("property_extractor"), registry=registry
    )
    named: Mapping[str, Any] = config.get("named", {})
    logging.debug(
        f"building arguments from config: extractor={selection.extractor_id} named={sorted(named)}"
    )
    return Arguments(property_extractor=selection.extractor).add_named_values(named)


def load_arguments_file(
    path: str | Path, *, registry: PropertyExtractorRegistry | None = None
) -> Arguments:
    logging.debug(f"loading arguments config file: {path}")
    return arguments_from_config(load_toml_file(path), registry=registry)


def load_arguments_text(
    text: str, *, registry: PropertyExtractorRegistry | None = None
) -> Arguments:
    return arguments_from_config(load_toml_text(text), registry=registry)
