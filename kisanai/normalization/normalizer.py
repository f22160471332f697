"""Schema registry and the ResponseNormalizer.

A schema is a CanonicalModel plus its response-variant table and its
consistency rules. Normalizing a partial payload renames variant keys,
merges it onto the schema defaults group by group, resets invalid leaves
to their defaults and finally applies the rules in order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from kisanai.normalization.merge import deep_merge, ensure_defaults, validate_with_defaults
from kisanai.normalization.rules import CROP_RULES, DISEASE_RULES
from kisanai.normalization.variants import (
    ResponseVariant,
    VariantTable,
    detect_variant,
    rename_keys,
)
from kisanai.schemas.base import CanonicalModel
from kisanai.schemas.consult import ConsultPlan
from kisanai.schemas.crop import CropAnalytics
from kisanai.schemas.disease import DiseaseDiagnosis
from kisanai.schemas.modern_farming import ModernFarmingAnalysis
from kisanai.schemas.monitoring import (
    CropMonitoringResult,
    FieldMonitoringResult,
    MonitoringCategory,
    SoilMonitoringResult,
    ThermalMonitoringResult,
)

logger = logging.getLogger(__name__)

Rule = Callable[[Any], None]


@dataclass(frozen=True)
class SchemaSpec:
    """Everything the normalizer needs to know about one record type."""

    name: str
    model: type[CanonicalModel]
    variants: VariantTable = field(default_factory=dict)
    rules: tuple[Rule, ...] = ()


SCHEMAS: dict[str, SchemaSpec] = {}


def register_schema(spec: SchemaSpec) -> SchemaSpec:
    """Add a schema to the registry after checking its defaults.

    Raises:
        SchemaDefaultMissing: If any field in the model tree lacks a default.
    """
    ensure_defaults(spec.model)
    SCHEMAS[spec.name] = spec
    return spec


def get_schema(name: str) -> SchemaSpec:
    """Look up a registered schema by name.

    Raises:
        ValueError: If no schema with that name is registered.
    """
    try:
        return SCHEMAS[name]
    except KeyError:
        raise ValueError(
            f"Unknown schema '{name}'. Available: {', '.join(sorted(SCHEMAS))}"
        ) from None


class ResponseNormalizer:
    """Fills a partially populated payload into a complete canonical record."""

    def __init__(self, schema: SchemaSpec | str) -> None:
        self._spec = get_schema(schema) if isinstance(schema, str) else schema

    @property
    def schema(self) -> SchemaSpec:
        return self._spec

    def defaults(self) -> dict[str, Any]:
        """The documented default record, as camelCase JSON."""
        return self._spec.model().model_dump(by_alias=True)

    def normalize(self, partial: Any) -> CanonicalModel:
        """Return a fully populated record. Never raises for missing leaves."""
        if not isinstance(partial, dict):
            logger.warning(
                "Expected a JSON object for %s, got %s; using defaults",
                self._spec.name, type(partial).__name__,
            )
            partial = {}

        variant = detect_variant(partial, self._spec.variants)
        if variant is not ResponseVariant.CANONICAL:
            logger.debug("Normalizing %s from %s field names", self._spec.name, variant)
            partial = rename_keys(partial, self._spec.variants[variant])

        merged = deep_merge(self.defaults(), partial)
        record = validate_with_defaults(self._spec.model, merged)
        for rule in self._spec.rules:
            rule(record)
        return record


def normalize(partial: Any, schema: SchemaSpec | str) -> CanonicalModel:
    """Shorthand for ``ResponseNormalizer(schema).normalize(partial)``."""
    return ResponseNormalizer(schema).normalize(partial)


# ── Registered schemas ────────────────────────────────────────

_MONITORING_LEGACY = {
    "confidence": "confidenceLevel",
    "summary": "analysisSummary",
    "metrics": "realTimeMetrics",
    "phEstimate": "pHEstimate",
}

CROP_ANALYTICS = register_schema(SchemaSpec(
    name="crop_analytics",
    model=CropAnalytics,
    variants={
        ResponseVariant.LEGACY: {
            "market": "marketAnalysis",
            "quality": "qualityMetrics",
            "forecast": "forecastMetrics",
            "soil": "soilAnalysis",
            "suitability": "cropSuitability",
            "grades": "gradeDistribution",
        },
    },
    rules=CROP_RULES,
))

DISEASE_DIAGNOSIS = register_schema(SchemaSpec(
    name="disease_diagnosis",
    model=DiseaseDiagnosis,
    variants={
        ResponseVariant.LEGACY: {
            "confidence": "confidenceLevel",
            "summary": "diagnosisSummary",
            "severity": "severityLevel",
            "metrics": "realTimeMetrics",
        },
    },
    rules=DISEASE_RULES,
))

CONSULT_PLAN = register_schema(SchemaSpec(
    name="consult_plan",
    model=ConsultPlan,
    variants={
        ResponseVariant.LEGACY: {
            "priceTrend": "pricetrend",
            "nearbyMandis": "nearbyBazarSamiti",
            "recommendations": "actionableRecommendations",
        },
    },
))

MODERN_FARMING = register_schema(SchemaSpec(
    name="modern_farming",
    model=ModernFarmingAnalysis,
))

MONITORING_SCHEMAS: dict[MonitoringCategory, SchemaSpec] = {
    category: register_schema(SchemaSpec(
        name=f"{category.value}_monitoring",
        model=model,
        variants={ResponseVariant.LEGACY: _MONITORING_LEGACY},
    ))
    for category, model in (
        (MonitoringCategory.CROP, CropMonitoringResult),
        (MonitoringCategory.SOIL, SoilMonitoringResult),
        (MonitoringCategory.THERMAL, ThermalMonitoringResult),
        (MonitoringCategory.FIELD, FieldMonitoringResult),
    )
}
