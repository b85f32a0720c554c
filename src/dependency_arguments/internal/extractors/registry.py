from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Literal, Mapping

from dependency_arguments.internal.extractors.builtin import (
    BUILTIN_PROPERTY_EXTRACTORS,
    DEFAULT_PROPERTY_EXTRACTOR_ID,
)
from dependency_arguments.properties import PropertyExtractor

PROPERTY_EXTRACTOR_ENTRYPOINT_GROUP = "dependency_arguments.property_extractors"


class PropertyExtractorRegistryError(RuntimeError):
    pass


class PropertyExtractorEntrypointError(PropertyExtractorRegistryError):
    pass


class PropertyExtractorSelectionError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class PropertyExtractorRegistry:
    """
    Every way ``Arguments.add_properties`` can be told to turn an object into
    named entries, keyed by extractor id.

    ``builtins`` covers public attributes and plain mappings; ``externals``
    holds extractors other distributions contribute. An external id may never
    shadow a builtin one, so ``"public"`` always means the same thing.
    """

    builtins: Mapping[str, PropertyExtractor]
    externals: Mapping[str, PropertyExtractor]

    def merged(self) -> dict[str, PropertyExtractor]:
        shadowing = sorted(set(self.builtins).intersection(self.externals))
        if shadowing:
            raise PropertyExtractorRegistryError(
                f"entry points in group '{PROPERTY_EXTRACTOR_ENTRYPOINT_GROUP}' "
                f"reuse builtin property extractor ids: {shadowing}"
            )
        return {**self.builtins, **self.externals}


@dataclass(frozen=True, slots=True)
class PropertyExtractorSelection:
    extractor_id: str
    origin: Literal["builtin", "entrypoint"]
    extractor: PropertyExtractor


def _validate_extractor_callable(
    extractor_id: str, extractor_obj: object
) -> PropertyExtractor:
    """
    Enforce the entry point contract: a plain callable taking the instance to
    inspect as its single positional argument.

    Classes are refused even though they are callable; calling one would build
    an object instead of extracting properties.
    """
    if not callable(extractor_obj):
        raise PropertyExtractorEntrypointError(
            f"extractor entry point '{extractor_id}' must load a callable; got {type(extractor_obj).__name__}"
        )

    if inspect.isclass(extractor_obj):
        raise PropertyExtractorEntrypointError(
            f"extractor entry point '{extractor_id}' must load a callable; got class {extractor_obj.__name__}"
        )

    sig = inspect.signature(extractor_obj)
    try:
        sig.bind(object())
    except TypeError:
        raise PropertyExtractorEntrypointError(
            f"extractor entry point '{extractor_id}' must accept exactly one positional argument. Signature={sig}"
        ) from None

    return extractor_obj  # type: ignore[return-value]


def _load_entrypoint_extractors(*, group: str) -> dict[str, PropertyExtractor]:
    """
    Load extractors that third-party distributions publish under ``group``.

    The entry point name becomes the id passed to ``select_property_extractor``
    or set as ``property_extractor`` in a config file. Two distributions
    publishing the same id would make ``add_properties`` depend on install
    order, so that is rejected once every entry point has been seen.
    """
    extractors: dict[str, PropertyExtractor] = {}
    clashing: set[str] = set()

    for ep in entry_points().select(group=group):
        extractor = _validate_extractor_callable(ep.name, ep.load())

        if ep.name in extractors:
            clashing.add(ep.name)
            continue

        logging.debug(f"property extractor {ep.name!r} loaded from group {group!r}")
        extractors[ep.name] = extractor

    if clashing:
        raise PropertyExtractorEntrypointError(
            f"property extractor ids published more than once in entry point "
            f"group '{group}': {sorted(clashing)}"
        )

    return extractors


def build_property_extractor_registry() -> PropertyExtractorRegistry:
    externals = _load_entrypoint_extractors(group=PROPERTY_EXTRACTOR_ENTRYPOINT_GROUP)
    return PropertyExtractorRegistry(
        builtins=BUILTIN_PROPERTY_EXTRACTORS, externals=externals
    )


def select_property_extractor(
    extractor_id: str | None = None,
    *,
    registry: PropertyExtractorRegistry | None = None,
) -> PropertyExtractorSelection:
    """
    Pick a property extractor by id.

    Parameters:
      - extractor_id: None means "use the default"
      - registry: test seam; built from builtins and entry points when omitted

    Raises:
      PropertyExtractorSelectionError: unknown id, or the registry itself is
        inconsistent (duplicate ids).
    """
    if registry is None:
        registry = build_property_extractor_registry()

    eid = extractor_id or DEFAULT_PROPERTY_EXTRACTOR_ID

    try:
        merged = registry.merged()
    except PropertyExtractorRegistryError as e:
        raise PropertyExtractorSelectionError(str(e)) from e

    if eid not in merged:
        raise PropertyExtractorSelectionError(
            f"unknown property extractor id {eid!r}. available={sorted(merged)}"
        )

    origin: Literal["builtin", "entrypoint"] = (
        "builtin" if eid in registry.builtins else "entrypoint"
    )
    logging.debug(f"selected property extractor: {eid} origin={origin}")
    return PropertyExtractorSelection(
        extractor_id=eid, origin=origin, extractor=merged[eid]
    )
