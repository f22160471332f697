"""Cross-field consistency rules applied after defaults are merged."""

from __future__ import annotations

import logging

from kisanai.schemas.crop import CropAnalytics
from kisanai.schemas.disease import MAX_LIST_ITEMS, DiseaseDiagnosis
from kisanai.variation import js_round

logger = logging.getLogger(__name__)

QUALITY_CEILING = 95
QUALITY_HEADROOM = 5
LOW_SUITABILITY = 70
EXPORT_SUITABILITY = 80
MAX_PREMIUM_SHARE = 20
MIN_SUBSTANDARD_SHARE = 30


# ── Crop analytics ────────────────────────────────────────────


def cap_quality_score(report: CropAnalytics) -> None:
    """Quality can't exceed suitability by more than the headroom, nor the ceiling."""
    suitability = report.crop_suitability.overall_score
    if suitability <= 0:
        return
    ceiling = min(QUALITY_CEILING, suitability + QUALITY_HEADROOM)
    if report.quality_metrics.quality_score > ceiling:
        logger.debug(
            "Capping quality score %.1f to %.1f (suitability %.1f)",
            report.quality_metrics.quality_score, ceiling, suitability,
        )
        report.quality_metrics.quality_score = ceiling


def rebalance_grades(report: CropAnalytics) -> None:
    """Low suitability means fewer premium and more substandard grades.

    Standard takes the remainder so the shares total 100. When premium and
    substandard alone exceed 100 they are scaled down proportionally.
    """
    suitability = report.crop_suitability.overall_score
    if not 0 < suitability < LOW_SUITABILITY:
        return
    grades = report.quality_metrics.grade_distribution
    premium = min(MAX_PREMIUM_SHARE, grades.premium)
    substandard = max(MIN_SUBSTANDARD_SHARE, grades.substandard)
    total = premium + substandard
    if total > 100:
        premium = premium * 100 / total
        substandard = 100 - premium
    grades.premium = premium
    grades.substandard = substandard
    grades.standard = 100 - premium - substandard


def restrict_export_quality(report: CropAnalytics) -> None:
    suitability = report.crop_suitability.overall_score
    if 0 < suitability < EXPORT_SUITABILITY:
        report.quality_metrics.export_quality = False


CROP_RULES = (cap_quality_score, rebalance_grades, restrict_export_quality)


# ── Disease diagnosis ─────────────────────────────────────────


def truncate_treatments(diagnosis: DiseaseDiagnosis) -> None:
    diagnosis.organic_treatments = diagnosis.organic_treatments[:MAX_LIST_ITEMS]
    diagnosis.ipm_strategies = diagnosis.ipm_strategies[:MAX_LIST_ITEMS]
    diagnosis.prevention_plan = diagnosis.prevention_plan[:MAX_LIST_ITEMS]


def normalize_spread_risk(diagnosis: DiseaseDiagnosis) -> None:
    """Spread risk is a percentage; values below 1 are read as fractions."""
    risk = diagnosis.real_time_metrics.spread_risk
    value = risk.value
    if value < 1:
        value = js_round(value * 100)
    risk.value = max(0, min(100, value))


DISEASE_RULES = (truncate_treatments, normalize_spread_risk)
