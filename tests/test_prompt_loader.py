"""Tests for kisanai.prompts — Prompt template loading and rendering."""

import json

import pytest

from kisanai.normalization.normalizer import CONSULT_PLAN, ResponseNormalizer
from kisanai.prompts import json_shape, render_prompt


class TestRenderPrompt:
    def test_chat_system_context(self):
        result = render_prompt(
            "chat_system", location="Nashik", language="mr", has_history=True, thinking=False
        )
        assert "Location: Nashik" in result
        assert "Language: mr" in result
        assert "Previous context: Available" in result

    def test_chat_optional_vars_omitted_gracefully(self):
        result = render_prompt("chat_system", language="en")
        assert "Location: Not specified" in result
        assert "<think>" not in result

    def test_thinking_instructions_when_enabled(self):
        result = render_prompt("chat_system", language="en", thinking=True)
        assert "<think></think>" in result

    def test_crop_analytics(self):
        result = render_prompt(
            "crop_analytics", state="Maharashtra", crop="Onion", city="Nashik", shape="{}"
        )
        assert "**Onion**" in result
        assert "Nashik, Maharashtra" in result
        assert "Cover the period" not in result

    def test_crop_analytics_date_range(self):
        result = render_prompt(
            "crop_analytics", state="Punjab", crop="Wheat", city="Ludhiana",
            date_range="Rabi 2025", shape="{}",
        )
        assert "Cover the period: Rabi 2025." in result

    @pytest.mark.parametrize("category", ["crop", "soil", "thermal", "field"])
    def test_monitoring_categories(self, category):
        result = render_prompt(
            "monitoring", category=category, sentinel_field="analysisSummary",
            sentinel_value="Rejected", shape="{}",
        )
        assert f"Analyze the {category} image" in result
        assert '"analysisSummary" to "Rejected"' in result

    def test_growth_phases(self):
        assert "growth phases for Cotton" in render_prompt("growth_phases", crop="Cotton")

    def test_nonexistent_template_raises(self):
        with pytest.raises(FileNotFoundError, match="Prompt template not found"):
            render_prompt("nonexistent", crop="anything")


class TestJsonShape:
    def test_round_trips(self):
        defaults = ResponseNormalizer(CONSULT_PLAN).defaults()
        assert json.loads(json_shape(defaults)) == defaults

    def test_keeps_unicode(self):
        assert "₹" in json_shape({"price": "₹2,300"})

    def test_shape_embedded_in_consult_prompt(self):
        shape = json_shape(ResponseNormalizer(CONSULT_PLAN).defaults())
        result = render_prompt(
            "consult_plan", crop="Tomato", area=2, phase="Flowering", tahsil="Junnar",
            shape=shape,
        )
        assert '"growthInsights"' in result
        assert '"pricetrend"' in result
        assert "Area: 2 acres" in result
