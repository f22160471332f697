"""Plant disease diagnosis schema.

Unlike the other records, the documented default here is a plausible
diagnosis rather than a blank one: the disease page always shows treatment
advice, even when the model response was unusable.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal

from pydantic import Field

from kisanai.schemas.base import CanonicalModel, Confidence

DEFAULT_CONFIDENCE = 75
MAX_LIST_ITEMS = 3

Status = Literal["optimal", "warning", "critical"]


class DiseaseFactor(CanonicalModel):
    factor: str = "Unknown Factor"
    current_value: str = "N/A"
    optimal_range: str = "N/A"
    status: Status = "optimal"


def _default_factors() -> list[DiseaseFactor]:
    return [
        DiseaseFactor(factor="Temperature", current_value="25°C", optimal_range="20-30°C"),
        DiseaseFactor(factor="Humidity", current_value="60%", optimal_range="50-70%"),
        DiseaseFactor(factor="Soil Moisture", current_value="40%", optimal_range="30-50%"),
        DiseaseFactor(
            factor="Light Exposure",
            current_value="Partial Sun",
            optimal_range="Full to Partial Sun",
        ),
    ]


class SpreadRisk(CanonicalModel):
    level: str = "Medium"
    value: float = 45
    trend: Literal["increasing", "stable", "decreasing"] = "stable"


class DiseaseProgression(CanonicalModel):
    stage: str = "Early"
    rate: float = 5


class EnvironmentalConditions(CanonicalModel):
    temperature: float = 25
    humidity: float = 60
    soil_moisture: float = 40
    last_updated: str = Field(default_factory=lambda: date.today().isoformat())


class DiseaseMetrics(CanonicalModel):
    spread_risk: SpreadRisk = Field(default_factory=SpreadRisk)
    disease_progression: DiseaseProgression = Field(default_factory=DiseaseProgression)
    environmental_conditions: EnvironmentalConditions = Field(
        default_factory=EnvironmentalConditions
    )


class DiseaseDiagnosis(CanonicalModel):
    """Diagnosis for a single plant image."""

    crop_name: str = "Unknown Crop"
    disease_name: str = "Unknown Disease"
    time_to_treat: str = "Immediate"
    estimated_recovery: str = "2-4 weeks"
    yield_impact: str = "Moderate"
    severity_level: Literal["mild", "medium", "severe"] = "medium"
    symptom_description: str = "Symptoms detected but analysis incomplete"
    environmental_factors: list[DiseaseFactor] = Field(default_factory=_default_factors)
    real_time_metrics: DiseaseMetrics = Field(default_factory=DiseaseMetrics)
    organic_treatments: list[str] = Field(
        default_factory=lambda: [
            "Apply neem oil spray weekly",
            "Use copper-based fungicide",
            "Improve air circulation",
        ]
    )
    ipm_strategies: list[str] = Field(
        default_factory=lambda: [
            "Monitor plant health daily",
            "Use biological control agents",
            "Implement crop rotation",
        ]
    )
    prevention_plan: list[str] = Field(
        default_factory=lambda: [
            "Ensure proper drainage",
            "Maintain optimal humidity levels",
            "Regular plant inspection",
        ]
    )
    confidence_level: Annotated[Confidence, Field(ge=0, le=100)] = DEFAULT_CONFIDENCE
    diagnosis_summary: str = (
        "Disease analysis completed with moderate confidence. "
        "Follow recommended treatment protocols."
    )
