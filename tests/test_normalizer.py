"""Tests for kisanai.normalization — defaults, variants and consistency rules."""

from __future__ import annotations

import pytest
from pydantic import Field

from kisanai.errors import SchemaDefaultMissing
from kisanai.normalization.merge import deep_merge, ensure_defaults, validate_with_defaults
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
from kisanai.normalization.variants import ResponseVariant, detect_variant, rename_keys
from kisanai.schemas.base import CanonicalModel
from kisanai.schemas.crop import CropAnalytics
from kisanai.schemas.disease import DiseaseDiagnosis
from kisanai.schemas.monitoring import MonitoringCategory, SoilMonitoringResult


def _crop(suitability: float, quality: float = 0, **grades) -> CropAnalytics:
    return normalize(
        {
            "cropSuitability": {"overallScore": suitability},
            "qualityMetrics": {
                "qualityScore": quality,
                "exportQuality": True,
                "gradeDistribution": grades,
            },
        },
        CROP_ANALYTICS,
    )


# ── deep_merge ────────────────────────────────────────────────


class TestDeepMerge:
    def test_nested_groups_merge(self):
        merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 3}, {"a": {"x": 10}})
        assert merged == {"a": {"x": 10, "y": 2}, "b": 3}

    def test_none_counts_as_absent(self):
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_lists_replace(self):
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_defaults_not_mutated(self):
        defaults = {"a": {"x": 1}}
        deep_merge(defaults, {"a": {"x": 2}})
        assert defaults == {"a": {"x": 1}}


class TestValidateWithDefaults:
    def test_invalid_leaf_reset(self):
        data = CropAnalytics().model_dump(by_alias=True)
        data["soilAnalysis"]["phLevel"] = "acidic"
        record = validate_with_defaults(CropAnalytics, data)
        assert record.soil_analysis.ph_level == 0

    def test_invalid_list_item_dropped(self):
        data = CropAnalytics().model_dump(by_alias=True)
        data["soilAnalysis"]["recommendations"] = ["Add lime", {"bad": 1}, "Mulch"]
        record = validate_with_defaults(CropAnalytics, data)
        assert record.soil_analysis.recommendations == ["Add lime", "Mulch"]


class TestEnsureDefaults:
    def test_registered_schemas_pass(self):
        for spec in SCHEMAS.values():
            ensure_defaults(spec.model)

    def test_missing_default_rejected(self):
        class Inner(CanonicalModel):
            value: int

        class Outer(CanonicalModel):
            inner: Inner = Field(default_factory=lambda: Inner(value=1))

        with pytest.raises(SchemaDefaultMissing, match="Outer.inner.value"):
            register_schema(SchemaSpec(name="broken", model=Outer))
        assert "broken" not in SCHEMAS


# ── Registry ──────────────────────────────────────────────────


class TestRegistry:
    def test_known_schemas(self):
        assert {"crop_analytics", "disease_diagnosis", "consult_plan", "modern_farming"} <= set(SCHEMAS)
        for category in MonitoringCategory:
            assert f"{category.value}_monitoring" in SCHEMAS

    def test_lookup_by_name(self):
        assert get_schema("crop_analytics") is CROP_ANALYTICS

    def test_unknown_schema(self):
        with pytest.raises(ValueError, match="Unknown schema"):
            get_schema("weather_forecast")


# ── Defaults ──────────────────────────────────────────────────


class TestDefaults:
    @pytest.mark.parametrize("name", sorted(SCHEMAS))
    def test_empty_payload_gives_documented_default(self, name):
        spec = SCHEMAS[name]
        record = normalize({}, spec)
        assert record.model_dump(by_alias=True) == spec.model().model_dump(by_alias=True)

    def test_non_object_payload_gives_default(self):
        record = normalize(["not", "an", "object"], CROP_ANALYTICS)
        assert record == CropAnalytics()

    def test_crop_defaults(self):
        record = normalize({}, "crop_analytics")
        assert record.market_analysis.summary.market_sentiment == "N/A"
        assert record.forecast_metrics.price_projection.confidence == 85
        assert record.quality_metrics.export_quality is False

    def test_defaults_dump_camel_case(self):
        defaults = ResponseNormalizer(CROP_ANALYTICS).defaults()
        assert "marketAnalysis" in defaults
        assert "currentPrice" in defaults["marketAnalysis"]["summary"]

    def test_disease_defaults(self):
        record = normalize({}, DISEASE_DIAGNOSIS)
        assert record.confidence_level == 75
        assert record.severity_level == "medium"
        assert len(record.environmental_factors) == 4
        assert record.real_time_metrics.spread_risk.value == 45


class TestPartialGroups:
    def test_sibling_defaults_kept(self):
        record = normalize(
            {"marketAnalysis": {"summary": {"currentPrice": 2300}}}, CROP_ANALYTICS
        )
        summary = record.market_analysis.summary
        assert summary.current_price == 2300
        assert summary.demand_level == "N/A"
        assert record.market_analysis.market_trends.short_term == "N/A"
        assert record.soil_analysis.soil_type == "N/A"

    def test_null_group_uses_default(self):
        record = normalize({"soilAnalysis": None}, CROP_ANALYTICS)
        assert record.soil_analysis.soil_type == "N/A"

    def test_unknown_keys_ignored(self):
        record = normalize({"unexpected": {"x": 1}}, CROP_ANALYTICS)
        assert record == CropAnalytics()


class TestConfidence:
    def test_percent_string_parsed(self):
        record = normalize({"confidenceLevel": "87%"}, DISEASE_DIAGNOSIS)
        assert record.confidence_level == 87

    def test_float_truncated(self):
        record = normalize({"confidenceLevel": 91.7}, DISEASE_DIAGNOSIS)
        assert record.confidence_level == 91

    def test_unparseable_uses_default(self):
        record = normalize({"confidenceLevel": "high"}, DISEASE_DIAGNOSIS)
        assert record.confidence_level == 75

    def test_out_of_range_uses_default(self):
        record = normalize({"confidenceLevel": 140}, DISEASE_DIAGNOSIS)
        assert record.confidence_level == 75

    def test_invalid_enum_uses_default(self):
        record = normalize({"severityLevel": "catastrophic"}, DISEASE_DIAGNOSIS)
        assert record.severity_level == "medium"


# ── Variants ──────────────────────────────────────────────────


class TestVariants:
    def test_detect_canonical(self):
        assert detect_variant({"marketAnalysis": {}}, CROP_ANALYTICS.variants) is (
            ResponseVariant.CANONICAL
        )

    def test_detect_legacy(self):
        assert detect_variant({"market": {}}, CROP_ANALYTICS.variants) is ResponseVariant.LEGACY

    def test_rename_nested(self):
        renamed = rename_keys({"a": {"old": 1}}, {"old": "new"})
        assert renamed == {"a": {"new": 1}}

    def test_canonical_key_wins(self):
        renamed = rename_keys({"old": 1, "new": 2}, {"old": "new"})
        assert renamed == {"new": 2}

    def test_legacy_crop_payload(self):
        record = normalize(
            {"market": {"summary": {"currentPrice": 1800}}, "grades": {"premium": 10}},
            CROP_ANALYTICS,
        )
        assert record.market_analysis.summary.current_price == 1800

    def test_legacy_monitoring_payload(self):
        record = normalize(
            {"confidence": 64, "metrics": {"phEstimate": 6.8}, "soilType": "Black cotton"},
            MONITORING_SCHEMAS[MonitoringCategory.SOIL],
        )
        assert isinstance(record, SoilMonitoringResult)
        assert record.confidence_level == 64
        assert record.real_time_metrics.ph_estimate == 6.8
        assert record.soil_type == "Black cotton"

    def test_legacy_consult_payload(self):
        record = normalize(
            {"marketIntelligence": {"priceTrend": "Rising"}}, CONSULT_PLAN
        )
        assert record.market_intelligence.price_trend == "Rising"


# ── Crop rules ────────────────────────────────────────────────


class TestCropRules:
    def test_quality_capped_to_suitability_plus_headroom(self):
        record = _crop(suitability=72, quality=95)
        assert record.quality_metrics.quality_score == 77

    def test_quality_capped_at_ceiling(self):
        record = _crop(suitability=98, quality=99)
        assert record.quality_metrics.quality_score == 95

    def test_quality_within_bound_untouched(self):
        record = _crop(suitability=90, quality=80)
        assert record.quality_metrics.quality_score == 80

    @pytest.mark.parametrize("suitability", [10, 35, 69.5])
    def test_quality_invariant(self, suitability):
        record = _crop(suitability=suitability, quality=100)
        assert record.quality_metrics.quality_score <= suitability + 5

    def test_rules_skip_when_suitability_unknown(self):
        record = _crop(suitability=0, quality=99, premium=60, standard=30, substandard=10)
        assert record.quality_metrics.quality_score == 99
        assert record.quality_metrics.grade_distribution.premium == 60
        assert record.quality_metrics.export_quality is True

    def test_low_suitability_rebalances_grades(self):
        record = _crop(suitability=60, quality=50, premium=50, standard=40, substandard=10)
        grades = record.quality_metrics.grade_distribution
        assert grades.premium == 20
        assert grades.substandard == 30
        assert grades.standard == 50

    def test_rebalanced_grades_total_100(self):
        record = _crop(suitability=40, premium=15, standard=5, substandard=95)
        grades = record.quality_metrics.grade_distribution
        assert grades.premium + grades.standard + grades.substandard == pytest.approx(100)
        assert grades.standard == pytest.approx(0)
        assert grades.premium < 15

    def test_export_disabled_below_80(self):
        assert _crop(suitability=79).quality_metrics.export_quality is False

    def test_export_kept_at_80(self):
        assert _crop(suitability=80).quality_metrics.export_quality is True


# ── Disease rules ─────────────────────────────────────────────


class TestDiseaseRules:
    def test_treatments_truncated(self):
        record = normalize(
            {"organicTreatments": ["a", "b", "c", "d", "e"], "ipmStrategies": ["x"]},
            DISEASE_DIAGNOSIS,
        )
        assert record.organic_treatments == ["a", "b", "c"]
        assert record.ipm_strategies == ["x"]

    def test_fractional_spread_risk_scaled(self):
        record = normalize(
            {"realTimeMetrics": {"spreadRisk": {"value": 0.675}}}, DISEASE_DIAGNOSIS
        )
        assert record.real_time_metrics.spread_risk.value == 68

    def test_spread_risk_clamped(self):
        record = normalize(
            {"realTimeMetrics": {"spreadRisk": {"value": 250}}}, DISEASE_DIAGNOSIS
        )
        assert record.real_time_metrics.spread_risk.value == 100

    def test_spread_risk_sibling_defaults_kept(self):
        record = normalize(
            {"realTimeMetrics": {"spreadRisk": {"value": 70}}}, DISEASE_DIAGNOSIS
        )
        assert record.real_time_metrics.spread_risk.level == "Medium"
        assert record.real_time_metrics.disease_progression.stage == "Early"

    def test_default_diagnosis_record_type(self):
        assert isinstance(normalize({}, DISEASE_DIAGNOSIS), DiseaseDiagnosis)
