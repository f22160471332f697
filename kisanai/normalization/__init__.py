"""Default merging and consistency enforcement for parsed model output."""

from kisanai.normalization.normalizer import (
    CONSULT_PLAN,
    CROP_ANALYTICS,
    DISEASE_DIAGNOSIS,
    MONITORING_SCHEMAS,
    SCHEMAS,
    ResponseNormalizer,
    SchemaSpec,
    get_schema,
    normalize,
    register_schema,
)
from kisanai.normalization.variants import ResponseVariant

__all__ = [
    "CONSULT_PLAN",
    "CROP_ANALYTICS",
    "DISEASE_DIAGNOSIS",
    "MONITORING_SCHEMAS",
    "SCHEMAS",
    "ResponseNormalizer",
    "ResponseVariant",
    "SchemaSpec",
    "get_schema",
    "normalize",
    "register_schema",
]
