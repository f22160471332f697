"""Known response variants and their field-name mappings.

Models sometimes answer with an older or abbreviated key set. Each schema
registers a table from variant to {alternate key: canonical key}; the
variant is detected from the payload and keys are renamed before merging.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ResponseVariant(StrEnum):
    """Key-naming convention a response was written in."""

    CANONICAL = "canonical"
    LEGACY = "legacy"


FieldMap = dict[str, str]
VariantTable = dict[ResponseVariant, FieldMap]


def _contains_key(payload: Any, keys: set[str]) -> bool:
    if isinstance(payload, dict):
        return any(k in keys or _contains_key(v, keys) for k, v in payload.items())
    if isinstance(payload, list):
        return any(_contains_key(item, keys) for item in payload)
    return False


def detect_variant(payload: Any, table: VariantTable) -> ResponseVariant:
    """Return the first non-canonical variant whose alternate keys appear in payload."""
    for variant, mapping in table.items():
        if variant is ResponseVariant.CANONICAL or not mapping:
            continue
        if _contains_key(payload, set(mapping)):
            return variant
    return ResponseVariant.CANONICAL


def rename_keys(payload: Any, mapping: FieldMap) -> Any:
    """Recursively rename alternate keys. A canonical key already present wins."""
    if isinstance(payload, list):
        return [rename_keys(item, mapping) for item in payload]
    if not isinstance(payload, dict):
        return payload
    renamed: dict[str, Any] = {}
    for key, value in payload.items():
        target = mapping.get(key, key)
        if target != key and target in payload:
            continue
        renamed[target] = rename_keys(value, mapping)
    return renamed
