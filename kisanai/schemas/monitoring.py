"""Image monitoring result schemas for the four monitoring categories."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field

from kisanai.schemas.base import CanonicalModel, Confidence

NA = "N/A"
DEFAULT_CONFIDENCE = 85

Level = Literal["low", "medium", "high"]
Evidence = Literal["none", "suspected", "evident"]


class MonitoringCategory(StrEnum):
    """What kind of image the farmer uploaded."""

    CROP = "crop"
    SOIL = "soil"
    THERMAL = "thermal"
    FIELD = "field"


class EnvironmentalFactor(CanonicalModel):
    factor: str = "Unknown Factor"
    status: Literal["optimal", "warning", "critical"] = "optimal"


# ── Crop ──────────────────────────────────────────────────────


class CropRealTimeMetrics(CanonicalModel):
    health_score: float = 0
    stress_level: float = 0
    yield_impact: float = 0


class CropMonitoringResult(CanonicalModel):
    crop_type: str = NA
    disease_detected: str = NA
    disease_severity: Literal["none", "mild", "moderate", "severe"] = "none"
    pest_infestation: str = NA
    pest_severity: Literal["none", "low", "medium", "high"] = "none"
    nutrient_deficiency: str = NA
    crop_health: Literal["excellent", "good", "fair", "poor"] = "fair"
    affected_area: float = 0
    environmental_factors: list[EnvironmentalFactor] = Field(default_factory=list)
    real_time_metrics: CropRealTimeMetrics = Field(default_factory=CropRealTimeMetrics)
    treatment_recommendations: list[str] = Field(default_factory=list)
    preventive_measures: list[str] = Field(default_factory=list)
    confidence_level: Confidence = DEFAULT_CONFIDENCE
    analysis_summary: str = NA


# ── Soil ──────────────────────────────────────────────────────


class SoilRealTimeMetrics(CanonicalModel):
    moisture_percentage: float = 0
    organic_matter_indicator: float = 0
    ph_estimate: float = Field(default=0, alias="pHEstimate")


class SoilMonitoringResult(CanonicalModel):
    soil_type: str = NA
    texture: Literal["fine", "medium", "coarse"] = "medium"
    color_description: str = NA
    moisture_level: Level = "medium"
    fertility_estimate: Level = "medium"
    erosion_risk: Level = "low"
    salinity_issue: Evidence = "none"
    composition_notes: str = NA
    environmental_factors: list[EnvironmentalFactor] = Field(default_factory=list)
    real_time_metrics: SoilRealTimeMetrics = Field(default_factory=SoilRealTimeMetrics)
    improvement_suggestions: list[str] = Field(default_factory=list)
    prevention_measures: list[str] = Field(default_factory=list)
    confidence_level: Confidence = DEFAULT_CONFIDENCE
    analysis_summary: str = NA


# ── Thermal ───────────────────────────────────────────────────


class ThermalRealTimeMetrics(CanonicalModel):
    average_temperature: float = 0
    max_temperature: float = 0
    min_temperature: float = 0
    stress_index: float = 0


class ThermalMonitoringResult(CanonicalModel):
    temperature_range: str = NA
    hot_spots: int = 0
    cold_spots: int = 0
    water_stress_zones: Level = "low"
    irrigation_leaks: Evidence = "none"
    temperature_variations: str = NA
    crop_health_impact: str = NA
    environmental_factors: list[EnvironmentalFactor] = Field(default_factory=list)
    real_time_metrics: ThermalRealTimeMetrics = Field(
        default_factory=ThermalRealTimeMetrics
    )
    mitigation_strategies: list[str] = Field(default_factory=list)
    monitoring_recommendations: list[str] = Field(default_factory=list)
    confidence_level: Confidence = DEFAULT_CONFIDENCE
    analysis_summary: str = NA


# ── Field ─────────────────────────────────────────────────────


class FieldRealTimeMetrics(CanonicalModel):
    coverage_percentage: float = 0
    weed_coverage: float = 0
    bare_soil: float = 0


class FieldMonitoringResult(CanonicalModel):
    crop_growth_stage: str = NA
    weed_density: Level = "low"
    yield_prediction: str = NA
    field_uniformity: Literal["uniform", "patchy", "irregular"] = "uniform"
    visible_issues: str = NA
    vegetation_index: float = 0
    environmental_factors: list[EnvironmentalFactor] = Field(default_factory=list)
    real_time_metrics: FieldRealTimeMetrics = Field(default_factory=FieldRealTimeMetrics)
    precision_farming_tips: list[str] = Field(default_factory=list)
    intervention_plans: list[str] = Field(default_factory=list)
    confidence_level: Confidence = DEFAULT_CONFIDENCE
    analysis_summary: str = NA


MonitoringResult = (
    CropMonitoringResult
    | SoilMonitoringResult
    | ThermalMonitoringResult
    | FieldMonitoringResult
)

RESULT_MODELS: dict[MonitoringCategory, type[CanonicalModel]] = {
    MonitoringCategory.CROP: CropMonitoringResult,
    MonitoringCategory.SOIL: SoilMonitoringResult,
    MonitoringCategory.THERMAL: ThermalMonitoringResult,
    MonitoringCategory.FIELD: FieldMonitoringResult,
}

# (field name, value) the prompts ask the model to return for a wrong image
REJECTION_SENTINELS: dict[MonitoringCategory, tuple[str, str]] = {
    MonitoringCategory.CROP: ("disease_detected", "Invalid Input"),
    MonitoringCategory.SOIL: ("soil_type", "Not Applicable"),
    MonitoringCategory.THERMAL: ("analysis_summary", "Non-thermal image detected"),
    MonitoringCategory.FIELD: ("analysis_summary", "Non-field image detected"),
}
