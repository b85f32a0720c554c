from __future__ import annotations

from collections.abc import Mapping

from dependency_arguments.properties import (
    PropertyExtractor,
    mapping_properties,
    public_properties,
)

DEFAULT_PROPERTY_EXTRACTOR_ID = "public"

BUILTIN_PROPERTY_EXTRACTORS: Mapping[str, PropertyExtractor] = {
    "public": public_properties,
    "mapping": mapping_properties,
}
