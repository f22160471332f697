"""Market weather audit.

Rates the current weather for the crops most traded in a city and turns
the rating into a one-line recommendation per crop. Purely rule based; no
model is called.
"""

from __future__ import annotations

from collections import Counter

from kisanai.schemas.audit import (
    CropWeatherAnalysis,
    MarketAudit,
    MarketData,
    RiskLevel,
    WeatherData,
    WeatherFactors,
)
from kisanai.variation import js_round

TOP_CROP_COUNT = 3

UNKNOWN_IMPACT = "Weather impact not specified for this crop"

# crop -> (temperature effect, humidity effect, precipitation effect)
CROP_WEATHER_IMPACTS: dict[str, tuple[str, str, str]] = {
    "Wheat": (
        "Cool weather generally good for wheat growth",
        "Higher humidity can cause fungal issues and spoilage",
        "Moderate rainfall is beneficial, excess rain can damage",
    ),
    "Rice": (
        "Needs warmth, optimal growth in warm conditions",
        "High humidity is beneficial for rice cultivation",
        "Requires adequate water supply",
    ),
    "Cotton": (
        "Warm weather is ideal for cotton growth",
        "Low humidity preferred to prevent disease",
        "Excess rain can be harmful to cotton crops",
    ),
    "Sugarcane": (
        "Needs heat for optimal growth and sugar content",
        "Moderate humidity is good for sugarcane",
        "Good water availability is essential",
    ),
    "Onion": (
        "Moderate temperature is preferred for onion cultivation",
        "High humidity can cause rot problems",
        "Excess water causes rot and disease",
    ),
    "Tomato": (
        "Warm weather is good for tomato growth",
        "Moderate humidity is optimal",
        "Excess rain can cause disease and cracking",
    ),
}

# risk level -> crop -> recommendation; "*" is the fallback for other crops
RECOMMENDATIONS: dict[RiskLevel, dict[str, str]] = {
    RiskLevel.HIGH: {
        "Wheat": "Apply fungicide immediately to prevent disease spread due to high humidity.",
        "Rice": "Drain excess water to prevent root rot in current high humidity conditions.",
        "Cotton": "Cover plants to protect from rain and prevent fungal infection.",
        "Sugarcane": "Reduce irrigation to avoid waterlogging in rainy conditions.",
        "Onion": "Improve drainage to prevent bulb rot from high moisture levels.",
        "Tomato": "Apply protective spray to prevent fungal diseases in humid conditions.",
        "*": "Take immediate protective measures to prevent crop damage.",
    },
    RiskLevel.MEDIUM: {
        "Wheat": "Monitor for early signs of heat stress and adjust irrigation schedule.",
        "Rice": "Maintain adequate water levels while checking for pest activity.",
        "Cotton": "Monitor for pest activity which increases in current conditions.",
        "Sugarcane": "Continue regular irrigation and watch for nutrient deficiency signs.",
        "Onion": "Check soil moisture levels and adjust irrigation accordingly.",
        "Tomato": "Ensure proper ventilation in growing areas to reduce humidity effects.",
        "*": "Monitor crops closely and maintain regular farming practices.",
    },
    RiskLevel.LOW: {
        "Wheat": "Optimal weather for wheat growth - continue with nitrogen application.",
        "Rice": "Favorable conditions for rice - maintain consistent water levels.",
        "Cotton": "Ideal weather for cotton development - continue with growth management.",
        "Sugarcane": "Perfect conditions for sugarcane growth - no additional action required.",
        "Onion": "Excellent weather for onion maturation - continue with normal schedule.",
        "Tomato": "Great conditions for tomato development - maintain regular care routine.",
        "*": "Weather conditions are favorable for crop growth - continue regular practices.",
    },
}

HIGH_RISK_SUMMARY = "High risk conditions detected. Take immediate protective measures for crops."
MANAGEABLE_SUMMARY = "Overall conditions are manageable. Monitor crops regularly."


def _num(value: float) -> str:
    """Render a reading without a trailing .0 for whole numbers."""
    return f"{value:g}"


def _rounded(value: float) -> float:
    return float(js_round(value))


def _description(weather: WeatherData) -> str:
    return weather.weather[0].description if weather.weather else ""


def normalize_weather(weather: WeatherData) -> WeatherData:
    """Return a copy with every reading rounded to a whole number."""
    main = weather.main
    wind = weather.wind
    return weather.model_copy(
        update={
            "main": main.model_copy(update={
                "temp": _rounded(main.temp),
                "feels_like": _rounded(main.feels_like),
                "temp_min": _rounded(main.temp_min),
                "temp_max": _rounded(main.temp_max),
                "pressure": _rounded(main.pressure),
                "humidity": _rounded(main.humidity),
            }),
            "wind": wind.model_copy(update={
                "speed": _rounded(wind.speed),
                "deg": _rounded(wind.deg),
                "gust": _rounded(wind.gust) if wind.gust is not None else None,
            }),
            "clouds": weather.clouds.model_copy(
                update={"all": _rounded(weather.clouds.all)}
            ),
            "visibility": _rounded(weather.visibility),
        },
        deep=True,
    )


def top_crops(market_data: MarketData, limit: int = TOP_CROP_COUNT) -> list[str]:
    """Crops listed by the most markets; ties keep first-seen order."""
    counts = Counter(
        crop for market in market_data.markets for crop in market.crop_prices
    )
    return [crop for crop, _ in counts.most_common(limit)]


def assess_risk(temperature: float, humidity: float) -> RiskLevel:
    if (temperature > 35 or temperature < 10) and humidity > 80:
        return RiskLevel.HIGH
    if temperature > 30 or temperature < 15 or humidity > 70:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _impact_text(crop: str, risk: RiskLevel, temp: float, humidity: float, desc: str) -> str:
    parts = [f"Current weather conditions are {risk.value.lower()} risk for {crop}. "]

    if temp > 35:
        parts.append(f"High temperature ({_num(temp)}°C) may stress the crop. ")
    elif temp < 10:
        parts.append(f"Low temperature ({_num(temp)}°C) may slow growth. ")
    elif temp > 30:
        parts.append(f"Temperature ({_num(temp)}°C) is at upper tolerance limit. ")

    if humidity > 80:
        parts.append(f"High humidity ({_num(humidity)}%) may cause fungal issues. ")
    elif humidity < 30:
        parts.append(f"Low humidity ({_num(humidity)}%) may stress the crop. ")

    if "rain" in desc or "storm" in desc:
        parts.append("Precipitation may affect crop quality and harvesting. ")
    return "".join(parts)


def analyze_crop(weather: WeatherData, crop: str) -> CropWeatherAnalysis:
    """Rate the weather risk for one crop and explain it."""
    temp = weather.main.temp
    humidity = weather.main.humidity
    desc = _description(weather).lower()
    risk = assess_risk(temp, humidity)

    temp_effect, humidity_effect, rain_effect = CROP_WEATHER_IMPACTS.get(
        crop, (UNKNOWN_IMPACT,) * 3
    )
    by_crop = RECOMMENDATIONS[risk]

    return CropWeatherAnalysis(
        crop=crop,
        impact=_impact_text(crop, risk, temp, humidity, desc),
        recommendation=by_crop.get(crop, by_crop["*"]),
        risk_level=risk,
        weather_factors=WeatherFactors(
            temperature=(
                f"{temp_effect}. Current: {_num(temp)}°C "
                f"(feels like {_num(weather.main.feels_like)}°C)"
            ),
            humidity=f"{humidity_effect}. Current: {_num(humidity)}%",
            precipitation=f"{rain_effect}. Current: {desc}",
            wind=f"Wind: {_num(weather.wind.speed)} m/s at {_num(weather.wind.deg)}° direction",
        ),
    )


def overall_analysis(weather: WeatherData, analyses: list[CropWeatherAnalysis]) -> str:
    """Plain-text summary of the weather and the per-crop risk."""
    main = weather.main
    lines = [
        f"Weather Analysis for {weather.name}:",
        f"Temperature: {_num(main.temp)}°C (feels like {_num(main.feels_like)}°C)",
        f"Humidity: {_num(main.humidity)}%",
        f"Conditions: {_description(weather)}",
        f"Wind: {_num(weather.wind.speed)} m/s",
        "",
        "Top 3 Crops Analysis:",
    ]
    lines.extend(
        f"{i}. {a.crop}: {a.risk_level.value} Risk" for i, a in enumerate(analyses, 1)
    )
    high = any(a.risk_level is RiskLevel.HIGH for a in analyses)
    lines.append("")
    lines.append(f"Recommendation: {HIGH_RISK_SUMMARY if high else MANAGEABLE_SUMMARY}")
    return "\n".join(lines)


def audit_market(market_data: MarketData, weather: WeatherData) -> MarketAudit:
    """Audit the top crops of a city's markets against its current weather."""
    weather = normalize_weather(weather)
    analyses = [analyze_crop(weather, crop) for crop in top_crops(market_data)]
    return MarketAudit(
        crop_analyses=analyses,
        weather_data=weather,
        overall_analysis=overall_analysis(weather, analyses),
    )
