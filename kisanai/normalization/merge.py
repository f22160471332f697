"""Group-wise default merging and leaf-level repair.

Defaults come from dumping the schema model built with no input, so the
model definition is the single documented source of default values.
"""

from __future__ import annotations

import copy
import logging
import typing
from typing import Any

from pydantic import BaseModel, ValidationError

from kisanai.errors import SchemaDefaultMissing

logger = logging.getLogger(__name__)

# Every failing leaf is removed per round; nesting depth bounds the rounds
_MAX_REPAIR_ROUNDS = 32


def deep_merge(defaults: dict[str, Any], partial: dict[str, Any]) -> dict[str, Any]:
    """Merge partial onto defaults, recursing into every nested group.

    A null in partial counts as absent. Lists and scalars replace the
    default wholesale.
    """
    merged = copy.deepcopy(defaults)
    for key, value in partial.items():
        if value is None:
            continue
        base = merged.get(key)
        if isinstance(base, dict) and isinstance(value, dict):
            merged[key] = deep_merge(base, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _drop_at(data: Any, loc: tuple[int | str, ...]) -> bool:
    """Delete the deepest existing entry along loc. Returns True if anything was removed."""
    parent = None
    step: int | str | None = None
    node = data
    for part in loc:
        if isinstance(node, dict) and isinstance(part, str) and part in node:
            parent, step, node = node, part, node[part]
        elif isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
            parent, step, node = node, part, node[part]
        else:
            break
    if parent is None:
        return False
    del parent[step]
    return True


def validate_with_defaults(model: type[BaseModel], data: dict[str, Any]) -> BaseModel:
    """Validate data, dropping invalid leaves so their defaults apply.

    Raises:
        ValidationError: If a failure cannot be attributed to a removable leaf.
    """
    for _ in range(_MAX_REPAIR_ROUNDS):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            errors = e.errors()
            removed = False
            # Reverse order so deleting list items keeps earlier indices valid
            for error in reversed(errors):
                if _drop_at(data, tuple(error["loc"])):
                    removed = True
                    logger.debug(
                        "Reset %s to default (%s)",
                        ".".join(str(p) for p in error["loc"]),
                        error["type"],
                    )
            if not removed:
                raise
    return model.model_validate(data)


def _nested_models(annotation: Any) -> list[type[BaseModel]]:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return [annotation]
    found: list[type[BaseModel]] = []
    for arg in typing.get_args(annotation):
        found.extend(_nested_models(arg))
    return found


def ensure_defaults(model: type[BaseModel], path: str = "") -> None:
    """Check that every field in the model tree declares a default.

    Raises:
        SchemaDefaultMissing: Naming the first field without a default.
    """
    prefix = path or model.__name__
    for name, info in model.model_fields.items():
        if info.is_required():
            raise SchemaDefaultMissing(f"{prefix}.{name} has no default")
        for nested in _nested_models(info.annotation):
            ensure_defaults(nested, f"{prefix}.{name}")
