"""Tests for kisanai.services.audit — market weather audit."""

import pytest

from kisanai.schemas.audit import (
    Market,
    MarketData,
    RiskLevel,
    WeatherCondition,
    WeatherData,
    WeatherReadings,
    Wind,
)
from kisanai.services.audit import (
    HIGH_RISK_SUMMARY,
    MANAGEABLE_SUMMARY,
    UNKNOWN_IMPACT,
    analyze_crop,
    assess_risk,
    audit_market,
    normalize_weather,
    overall_analysis,
    top_crops,
)


def _weather(temp=24.0, humidity=55.0, description="clear sky", **main) -> WeatherData:
    return WeatherData(
        name="Nashik",
        main=WeatherReadings(temp=temp, humidity=humidity, feels_like=main.pop("feels_like", temp), **main),
        weather=[WeatherCondition(main="Weather", description=description)],
        wind=Wind(speed=3.0, deg=270.0),
    )


@pytest.fixture
def market_data():
    return MarketData(
        city="Nashik",
        markets=[
            Market(name="Lasalgaon", crop_prices={"Onion": "₹2,300/quintal", "Wheat": "₹2,100/quintal"}),
            Market(name="Pimpalgaon", crop_prices={"Onion": "₹2,250/quintal", "Tomato": "₹900/quintal"}),
            Market(name="Yeola", crop_prices={
                "Onion": "₹2,280/quintal",
                "Wheat": "₹2,050/quintal",
                "Grapes": "₹6,000/quintal",
            }),
        ],
    )


class TestAssessRisk:
    @pytest.mark.parametrize("temp, humidity, expected", [
        (37, 85, RiskLevel.HIGH),
        (5, 85, RiskLevel.HIGH),
        (35, 90, RiskLevel.MEDIUM),
        (36, 80, RiskLevel.MEDIUM),
        (12, 50, RiskLevel.MEDIUM),
        (25, 75, RiskLevel.MEDIUM),
        (20, 50, RiskLevel.LOW),
        (30, 70, RiskLevel.LOW),
    ])
    def test_levels(self, temp, humidity, expected):
        assert assess_risk(temp, humidity) is expected


class TestTopCrops:
    def test_most_listed_first(self, market_data):
        assert top_crops(market_data) == ["Onion", "Wheat", "Tomato"]

    def test_fewer_than_limit(self):
        data = MarketData(markets=[Market(name="A", crop_prices={"Rice": "₹1,900/quintal"})])
        assert top_crops(data) == ["Rice"]

    def test_no_markets(self):
        assert top_crops(MarketData()) == []


class TestNormalizeWeather:
    def test_readings_rounded(self):
        weather = _weather(temp=36.6, humidity=85.4, feels_like=39.5)
        weather.wind = Wind(speed=3.46, deg=270.5)
        weather.visibility = 9999.6
        result = normalize_weather(weather)

        assert result.main.temp == 37
        assert result.main.humidity == 85
        assert result.main.feels_like == 40
        assert result.wind.speed == 3
        assert result.wind.deg == 271
        assert result.wind.gust is None
        assert result.visibility == 10000
        assert weather.main.temp == 36.6

    def test_gust_rounded_when_present(self):
        weather = _weather()
        weather.wind = Wind(speed=2, deg=90, gust=5.5)
        assert normalize_weather(weather).wind.gust == 6


class TestAnalyzeCrop:
    def test_high_risk_onion(self):
        analysis = analyze_crop(_weather(temp=37, humidity=85, description="light rain"), "Onion")

        assert analysis.risk_level is RiskLevel.HIGH
        assert analysis.impact == (
            "Current weather conditions are high risk for Onion. "
            "High temperature (37°C) may stress the crop. "
            "High humidity (85%) may cause fungal issues. "
            "Precipitation may affect crop quality and harvesting. "
        )
        assert analysis.recommendation == (
            "Improve drainage to prevent bulb rot from high moisture levels."
        )
        assert analysis.weather_factors.temperature == (
            "Moderate temperature is preferred for onion cultivation. "
            "Current: 37°C (feels like 37°C)"
        )
        assert analysis.weather_factors.humidity == (
            "High humidity can cause rot problems. Current: 85%"
        )
        assert analysis.weather_factors.precipitation == (
            "Excess water causes rot and disease. Current: light rain"
        )
        assert analysis.weather_factors.wind == "Wind: 3 m/s at 270° direction"

    def test_low_risk_wheat(self):
        analysis = analyze_crop(_weather(), "Wheat")
        assert analysis.risk_level is RiskLevel.LOW
        assert analysis.impact == "Current weather conditions are low risk for Wheat. "
        assert analysis.recommendation.startswith("Optimal weather for wheat growth")

    def test_dry_and_warm(self):
        analysis = analyze_crop(_weather(temp=32, humidity=20), "Cotton")
        assert analysis.risk_level is RiskLevel.MEDIUM
        assert "Temperature (32°C) is at upper tolerance limit. " in analysis.impact
        assert "Low humidity (20%) may stress the crop. " in analysis.impact

    def test_unknown_crop_uses_generic_text(self):
        analysis = analyze_crop(_weather(temp=8, humidity=50), "Grapes")
        assert analysis.risk_level is RiskLevel.MEDIUM
        assert analysis.weather_factors.humidity.startswith(UNKNOWN_IMPACT)
        assert analysis.recommendation == (
            "Monitor crops closely and maintain regular farming practices."
        )
        assert "Low temperature (8°C) may slow growth. " in analysis.impact


class TestOverallAnalysis:
    def test_manageable(self):
        weather = _weather()
        analyses = [analyze_crop(weather, "Onion"), analyze_crop(weather, "Wheat")]
        assert overall_analysis(weather, analyses) == "\n".join([
            "Weather Analysis for Nashik:",
            "Temperature: 24°C (feels like 24°C)",
            "Humidity: 55%",
            "Conditions: clear sky",
            "Wind: 3 m/s",
            "",
            "Top 3 Crops Analysis:",
            "1. Onion: Low Risk",
            "2. Wheat: Low Risk",
            "",
            f"Recommendation: {MANAGEABLE_SUMMARY}",
        ])

    def test_high_risk_summary(self):
        weather = _weather(temp=38, humidity=90, description="thunderstorm")
        text = overall_analysis(weather, [analyze_crop(weather, "Rice")])
        assert "1. Rice: High Risk" in text
        assert text.endswith(f"Recommendation: {HIGH_RISK_SUMMARY}")


class TestAuditMarket:
    def test_audit(self, market_data):
        result = audit_market(market_data, _weather(temp=31.4, humidity=60.2))

        assert [a.crop for a in result.crop_analyses] == ["Onion", "Wheat", "Tomato"]
        assert all(a.risk_level is RiskLevel.MEDIUM for a in result.crop_analyses)
        assert result.weather_data.main.temp == 31
        assert "Temperature: 31°C" in result.overall_analysis

    def test_dump_uses_camel_case(self, market_data):
        dumped = audit_market(market_data, _weather()).model_dump(by_alias=True)
        assert "cropAnalyses" in dumped
        assert "riskLevel" in dumped["cropAnalyses"][0]
        assert "feels_like" in dumped["weatherData"]["main"]
