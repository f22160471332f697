"""Shared base model and field types for canonical records.

Canonical records are dumped with camelCase aliases so their JSON matches
the field names the prompts ask the model to produce.
"""

from __future__ import annotations

import math
import re
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_int_lenient(value: object) -> int:
    """Coerce a confidence-like value to an int.

    Accepts ints, truncates finite floats, and reads the leading integer of
    a string ("87%" -> 87). Anything else raises ValueError so the field
    falls back to its default during normalization.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not a confidence value")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("confidence must be finite")
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match:
            return int(match.group(1))
    raise ValueError(f"unparseable confidence value: {value!r}")


Confidence = Annotated[int, BeforeValidator(parse_int_lenient)]


class CanonicalModel(BaseModel):
    """Base for the camelCase records exchanged with the model and the UI.

    Schemas registered with the normalizer must declare a default for every
    field; the registry refuses to register one that does not.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
