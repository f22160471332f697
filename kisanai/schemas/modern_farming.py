"""Modern farming technique analysis schema.

A feasibility report for adopting one technique (hydroponics, drip
irrigation, polyhouse, ...) on a farm of a given size and budget: costs,
an implementation plan, resource metrics, three years of projections,
risks, technology picks and market insights.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from kisanai.schemas.base import CanonicalModel

NA = "N/A"
MIN_PHASES = 3


class Budget(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Technique analysis ────────────────────────────────────────


class TechniqueOverview(CanonicalModel):
    name: str = NA
    estimated_cost: float = 0
    roi: float = 0
    success_rate: float = 0
    time_to_roi: str = NA
    sustainability_score: float = 0
    market_demand: float = 0
    profitability_index: float = 0
    risk_level: str = NA
    recommended_crops: list[str] = Field(default_factory=list)


class CostBreakdown(CanonicalModel):
    infrastructure: float = 0
    equipment: float = 0
    seeds: float = 0
    labor: float = 0
    maintenance: float = 0
    miscellaneous: float = 0


class TechniqueMarket(CanonicalModel):
    demand_trend: str = NA
    price_stability: float = 0
    competition_level: str = NA
    export_potential: float = 0
    local_market_share: float = 0


class TechniqueAnalysis(CanonicalModel):
    overview: TechniqueOverview = Field(default_factory=TechniqueOverview)
    cost_breakdown: CostBreakdown = Field(default_factory=CostBreakdown)
    market_analysis: TechniqueMarket = Field(default_factory=TechniqueMarket)


# ── Implementation ────────────────────────────────────────────


class ImplementationPhase(CanonicalModel):
    name: str = NA
    duration: str = NA
    description: str = NA
    key_milestones: list[str] = Field(default_factory=list)
    estimated_cost: float = 0
    priority: str = NA
    dependencies: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)


class MilestoneDates(CanonicalModel):
    planning_complete: str = NA
    infrastructure_ready: str = NA
    first_harvest: str = NA
    full_operation: str = NA


class Timeline(CanonicalModel):
    total_duration: str = NA
    critical_path: list[str] = Field(default_factory=list)
    milestone_dates: MilestoneDates = Field(default_factory=MilestoneDates)


class Implementation(CanonicalModel):
    phases: list[ImplementationPhase] = Field(default_factory=list)
    timeline: Timeline = Field(default_factory=Timeline)


# ── Metrics ───────────────────────────────────────────────────


class ResourceEfficiency(CanonicalModel):
    water: float = 0
    labor: float = 0
    energy: float = 0
    yield_gain: float = Field(default=0, alias="yield")
    sustainability: float = 0
    fertilizer: float = 0
    pesticide: float = 0


class EnvironmentalImpact(CanonicalModel):
    carbon_footprint: float = 0
    water_conservation: float = 0
    soil_health: float = 0
    biodiversity: float = 0
    pollution_reduction: float = 0


class Performance(CanonicalModel):
    yield_per_acre: float = 0
    quality_grade: str = NA
    harvest_frequency: str = NA
    storage_requirement: str = NA
    transportation: str = NA


class FarmingMetrics(CanonicalModel):
    resource_efficiency: ResourceEfficiency = Field(default_factory=ResourceEfficiency)
    environmental_impact: EnvironmentalImpact = Field(default_factory=EnvironmentalImpact)
    performance: Performance = Field(default_factory=Performance)


# ── Projections and risk ──────────────────────────────────────


class YearProjection(CanonicalModel):
    revenue: float = 0
    expenses: float = 0
    profit: float = 0


class FirstYear(YearProjection):
    break_even: str = NA


class SecondYear(YearProjection):
    growth: float = 0


class ThirdYear(YearProjection):
    cumulative_roi: float = Field(default=0, alias="cumulativeROI")


class FinancialProjections(CanonicalModel):
    year1: FirstYear = Field(default_factory=FirstYear)
    year2: SecondYear = Field(default_factory=SecondYear)
    year3: ThirdYear = Field(default_factory=ThirdYear)


class RiskAssessment(CanonicalModel):
    weather_risk: float = 0
    market_risk: float = 0
    technical_risk: float = 0
    financial_risk: float = 0
    mitigation_strategies: list[str] = Field(default_factory=list)


class TechnologyRecommendations(CanonicalModel):
    essential: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)
    future: list[str] = Field(default_factory=list)


class PriceTrends(CanonicalModel):
    current: float = 0
    projected_six_months: float = Field(default=0, alias="projected6Months")
    projected_one_year: float = Field(default=0, alias="projected1Year")
    volatility: float = 0


class DemandForecast(CanonicalModel):
    short_term: str = NA
    medium_term: str = NA
    long_term: str = NA


class MarketInsights(CanonicalModel):
    price_trends: PriceTrends = Field(default_factory=PriceTrends)
    demand_forecast: DemandForecast = Field(default_factory=DemandForecast)


class ModernFarmingAnalysis(CanonicalModel):
    """Complete modern farming report as returned to the UI."""

    technique_analysis: TechniqueAnalysis = Field(default_factory=TechniqueAnalysis)
    implementation: Implementation = Field(default_factory=Implementation)
    metrics: FarmingMetrics = Field(default_factory=FarmingMetrics)
    financial_projections: FinancialProjections = Field(default_factory=FinancialProjections)
    risk_assessment: RiskAssessment = Field(default_factory=RiskAssessment)
    technology_recommendations: TechnologyRecommendations = Field(
        default_factory=TechnologyRecommendations
    )
    market_insights: MarketInsights = Field(default_factory=MarketInsights)
