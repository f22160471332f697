"""Consult plan schema: business advice for a crop already in the ground."""

from __future__ import annotations

from pydantic import Field

from kisanai.schemas.base import CanonicalModel

NA = "N/A"

# Growth phases shown when the model returns nothing usable
FALLBACK_GROWTH_PHASES = [
    "Germination/Establishment (0-15 days)",
    "Vegetative Growth (15-40 days)",
    "Reproductive/Flowering (40-65 days)",
    "Maturation (65-90 days)",
    "Harvest Ready (90+ days)",
]


class GrowthInsights(CanonicalModel):
    total_growth_duration: str = NA
    current_day_of_growth: float = 0
    days_to_harvest: float = 0
    progress_percentage: float = 0
    next_phase: str = NA
    days_to_next_phase: float = 0


class YieldForecast(CanonicalModel):
    expected_yield_per_acre: str = NA
    total_yield_forecast: str = NA


# ── Farming schedule ──────────────────────────────────────────


class Fertilizer(CanonicalModel):
    name: str = NA
    quantity: str = NA
    timing: str = NA
    purpose: str = NA


class Irrigation(CanonicalModel):
    frequency: str = NA
    method: str = NA
    water_requirement: str = NA
    critical_periods: list[str] = Field(default_factory=list)


class PestManagement(CanonicalModel):
    common_pests: list[str] = Field(default_factory=list)
    preventive_measures: list[str] = Field(default_factory=list)


class FarmingSchedule(CanonicalModel):
    fertilizers: list[Fertilizer] = Field(default_factory=list)
    irrigation: Irrigation = Field(default_factory=Irrigation)
    pest_management: PestManagement = Field(default_factory=PestManagement)


# ── Market intelligence ───────────────────────────────────────


class NearbyMarket(CanonicalModel):
    name: str = NA
    distance: str = NA
    current_price: str = NA


class BuyerOpportunity(CanonicalModel):
    kind: str = Field(default=NA, alias="type")
    description: str = NA
    price_advantage: str = NA


class MarketIntelligence(CanonicalModel):
    current_mandi_price: str = NA
    price_trend: str = Field(default=NA, alias="pricetrend")
    peak_price_period: str = NA
    nearby_bazar_samiti: list[NearbyMarket] = Field(default_factory=list)
    buyer_opportunities: list[BuyerOpportunity] = Field(default_factory=list)
    supply_chain_tips: list[str] = Field(default_factory=list)


# ── Value addition ────────────────────────────────────────────


class ProcessingOption(CanonicalModel):
    process: str = NA
    product: str = NA
    profit_increase: str = NA
    requirements: str = NA


class Byproduct(CanonicalModel):
    name: str = NA
    use: str = NA
    revenue: str = NA


class StorageRecommendation(CanonicalModel):
    method: str = NA
    duration: str = NA
    cost_per_quintal: str = NA
    price_advantage: str = NA


class ValueAddition(CanonicalModel):
    processing_options: list[ProcessingOption] = Field(default_factory=list)
    byproducts: list[Byproduct] = Field(default_factory=list)
    storage_recommendations: StorageRecommendation = Field(
        default_factory=StorageRecommendation
    )


# ── Risk ──────────────────────────────────────────────────────


class RiskDetail(CanonicalModel):
    level: str = NA
    description: str = NA
    mitigation: str = NA


class RiskBreakdown(CanonicalModel):
    pest_risk: RiskDetail = Field(default_factory=RiskDetail)
    climate_risk: RiskDetail = Field(default_factory=RiskDetail)
    soil_risk: RiskDetail = Field(default_factory=RiskDetail)
    market_risk: RiskDetail = Field(default_factory=RiskDetail)


class RiskForecast(CanonicalModel):
    overall_risk: str = NA
    risk_breakdown: RiskBreakdown = Field(default_factory=RiskBreakdown)


class Recommendation(CanonicalModel):
    priority: str = NA
    action: str = NA
    timeline: str = NA
    expected_impact: str = NA


class ConsultPlan(CanonicalModel):
    """Full consult plan. All seven groups are required in the raw response."""

    growth_insights: GrowthInsights = Field(default_factory=GrowthInsights)
    yield_forecast: YieldForecast = Field(default_factory=YieldForecast)
    farming_schedule: FarmingSchedule = Field(default_factory=FarmingSchedule)
    market_intelligence: MarketIntelligence = Field(default_factory=MarketIntelligence)
    value_addition: ValueAddition = Field(default_factory=ValueAddition)
    risk_forecast: RiskForecast = Field(default_factory=RiskForecast)
    actionable_recommendations: list[Recommendation] = Field(default_factory=list)


REQUIRED_PLAN_GROUPS = (
    "growthInsights",
    "yieldForecast",
    "farmingSchedule",
    "marketIntelligence",
    "valueAddition",
    "riskForecast",
    "actionableRecommendations",
)
