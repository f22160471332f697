"""Market and weather data used by the market weather audit.

Weather readings follow the OpenWeatherMap current-weather payload (snake
case keys); market data follows the camelCase market feed.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from kisanai.schemas.base import CanonicalModel


class RiskLevel(StrEnum):
    """Weather risk to a crop."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# ── Weather ───────────────────────────────────────────────────


class Coordinates(BaseModel):
    lat: float = 0.0
    lon: float = 0.0


class WeatherCondition(BaseModel):
    id: int = 800
    main: str = "Clear"
    description: str = "clear sky"
    icon: str = "01d"


class WeatherReadings(BaseModel):
    temp: float = Field(description="Temperature in °C")
    feels_like: float = 0.0
    temp_min: float = 0.0
    temp_max: float = 0.0
    pressure: float = 0.0
    humidity: float = Field(description="Relative humidity in percent")


class Wind(BaseModel):
    speed: float = 0.0
    deg: float = 0.0
    gust: float | None = None


class Clouds(BaseModel):
    all: float = 0.0


class WeatherData(BaseModel):
    """Current weather for one city."""

    coord: Coordinates = Field(default_factory=Coordinates)
    weather: list[WeatherCondition] = Field(default_factory=lambda: [WeatherCondition()])
    main: WeatherReadings
    wind: Wind = Field(default_factory=Wind)
    clouds: Clouds = Field(default_factory=Clouds)
    visibility: float = 0.0
    name: str = ""


# ── Market feed ───────────────────────────────────────────────


class Market(CanonicalModel):
    name: str = ""
    crop_prices: dict[str, str] = Field(
        default_factory=dict, description="Crop name to price string, e.g. '₹2,300/quintal'"
    )


class MarketStats(CanonicalModel):
    daily_trading_volume: str = "N/A"
    active_buyers: int = 0
    average_price_per_quintal: str = "N/A"


class PriceAlert(CanonicalModel):
    crop: str = ""
    change: str = ""
    price: str = ""
    time: str = ""
    reason: str = ""


class MarketData(CanonicalModel):
    """Market snapshot for one city."""

    city: str = ""
    markets: list[Market] = Field(default_factory=list)
    market_stats: MarketStats = Field(default_factory=MarketStats)
    price_alerts: list[PriceAlert] = Field(default_factory=list)


# ── Audit result ──────────────────────────────────────────────


class WeatherFactors(CanonicalModel):
    temperature: str = ""
    humidity: str = ""
    precipitation: str = ""
    wind: str = ""


class CropWeatherAnalysis(CanonicalModel):
    crop: str
    impact: str
    recommendation: str
    risk_level: RiskLevel
    weather_factors: WeatherFactors = Field(default_factory=WeatherFactors)


class MarketAudit(CanonicalModel):
    crop_analyses: list[CropWeatherAnalysis] = Field(default_factory=list)
    weather_data: WeatherData
    overall_analysis: str = ""
