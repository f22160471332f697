"""Crop analytics report schema.

Five top-level groups: market analysis, quality metrics, forecast metrics,
soil analysis and crop suitability. Numeric placeholders default to 0 and
text placeholders to "N/A" so an empty response renders as a blank report.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from kisanai.schemas.base import CanonicalModel, Confidence

NA = "N/A"
DEFAULT_CONFIDENCE = 85


# ── Market analysis ───────────────────────────────────────────


class MarketSummary(CanonicalModel):
    current_price: float = 0
    price_change: float = 0
    trading_volume: float = 0
    market_sentiment: str = NA
    demand_level: str = NA
    supply_status: str = NA
    price_volatility: float = 0
    market_rank: float = 0


class Visualization(CanonicalModel):
    kind: str = Field(default=NA, alias="type")
    title: str = NA
    description: str = NA
    data: list[Any] = Field(default_factory=list)
    annotations: list[Any] = Field(default_factory=list)


class Insight(CanonicalModel):
    category: str = NA
    key: str = NA
    description: str = NA
    impact: str = NA
    recommendation: str = NA
    confidence: Confidence = DEFAULT_CONFIDENCE
    timeframe: str = NA


class MarketTrends(CanonicalModel):
    short_term: str = NA
    medium_term: str = NA
    long_term: str = NA
    seasonal_pattern: str = NA


class MarketAnalysis(CanonicalModel):
    summary: MarketSummary = Field(default_factory=MarketSummary)
    visualizations: list[Visualization] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)
    market_trends: MarketTrends = Field(default_factory=MarketTrends)


# ── Quality ───────────────────────────────────────────────────


class GradeDistribution(CanonicalModel):
    """Percentage shares of the crop by grade."""

    premium: float = 0
    standard: float = 0
    substandard: float = 0


class QualityParameter(CanonicalModel):
    parameter: str = NA
    value: float = 0
    unit: str = NA
    benchmark: float = 0
    status: str = NA
    importance: str = NA


class QualityMetrics(CanonicalModel):
    grade_distribution: GradeDistribution = Field(default_factory=GradeDistribution)
    quality_parameters: list[QualityParameter] = Field(default_factory=list)
    quality_score: float = 0
    certification_status: str = NA
    export_quality: bool = False


# ── Forecast ──────────────────────────────────────────────────


class PriceProjection(CanonicalModel):
    next_week: float = 0
    next_month: float = 0
    next_quarter: float = 0
    confidence: Confidence = DEFAULT_CONFIDENCE
    risk_level: str = NA


class SupplyFactor(CanonicalModel):
    factor: str = NA
    impact: str = NA
    probability: float = 0


class SupplyOutlook(CanonicalModel):
    trend: str = NA
    factors: list[SupplyFactor] = Field(default_factory=list)
    harvest_forecast: str = NA
    storage_capacity: float = 0


class WeatherImpact(CanonicalModel):
    rainfall_prediction: str = NA
    temperature_forecast: str = NA
    pest_risk: str = NA
    disease_risk: str = NA


class YieldPrediction(CanonicalModel):
    expected_yield: float = 0
    yield_variation: float = 0
    optimal_harvest_time: str = NA
    yield_factors: list[str] = Field(default_factory=list)


class ForecastMetrics(CanonicalModel):
    price_projection: PriceProjection = Field(default_factory=PriceProjection)
    supply_outlook: SupplyOutlook = Field(default_factory=SupplyOutlook)
    weather_impact: WeatherImpact = Field(default_factory=WeatherImpact)
    yield_prediction: YieldPrediction = Field(default_factory=YieldPrediction)


# ── Soil and suitability ──────────────────────────────────────


class SoilAnalysis(CanonicalModel):
    soil_type: str = NA
    ph_level: float = 0
    organic_matter: float = 0
    nutrient_level: str = NA
    drainage: str = NA
    suitability_score: float = 0
    recommendations: list[str] = Field(default_factory=list)
    soil_health: str = NA


class CropSuitability(CanonicalModel):
    overall_score: float = 0
    climate_match: float = 0
    soil_compatibility: float = 0
    water_requirement: str = NA
    growth_period: str = NA
    risk_factors: list[str] = Field(default_factory=list)
    advantages: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)
    alternative_crops: list[str] = Field(default_factory=list)


class CropAnalytics(CanonicalModel):
    """Complete crop analytics report for one crop in one city."""

    market_analysis: MarketAnalysis = Field(default_factory=MarketAnalysis)
    quality_metrics: QualityMetrics = Field(default_factory=QualityMetrics)
    forecast_metrics: ForecastMetrics = Field(default_factory=ForecastMetrics)
    soil_analysis: SoilAnalysis = Field(default_factory=SoilAnalysis)
    crop_suitability: CropSuitability = Field(default_factory=CropSuitability)
