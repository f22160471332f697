"""Modern farming: feasibility of a technique for a given farm size and budget."""

from __future__ import annotations

import asyncio
import logging
import re

from kisanai.errors import MalformedOutput, NotApplicable, TransportFailure
from kisanai.extraction.extractor import FailurePolicy, StructuredExtractor
from kisanai.normalization.normalizer import MODERN_FARMING, ResponseNormalizer
from kisanai.prompts import json_shape, render_prompt
from kisanai.providers.base import ModelProvider, user_message
from kisanai.schemas.config import Settings
from kisanai.schemas.modern_farming import (
    MIN_PHASES,
    Budget,
    ImplementationPhase,
    ModernFarmingAnalysis,
)
from kisanai.services.crop import NON_FARMING_KEYWORDS

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a world-class agricultural technology consultant with 25+ years of "
    "experience. Generate comprehensive farming analysis reports in JSON format "
    "only. Always return valid, parseable JSON."
)

INVALID_FORMAT = "invalid response format"

TECHNIQUE_KEYWORDS = (
    "organic", "farming", "agriculture", "crop", "soil", "irrigation", "harvest",
    "rainwater", "fish", "aquaculture", "hydroponic", "vertical", "greenhouse",
    "sustainable", "permaculture", "biodynamic", "precision", "smart", "modern",
    "traditional", "conventional", "natural", "ecological", "regenerative",
    "livestock", "dairy", "poultry", "aquaponics", "aeroponics", "container",
    "rooftop", "urban", "rural", "farm", "field", "plantation", "orchard",
    "vineyard", "garden", "cultivation", "planting", "seeding", "fertilizer",
    "compost", "pesticide", "herbicide", "weed", "pest", "disease", "yield",
    "production", "harvesting", "storage", "processing", "marketing", "distribution",
)

MAX_FARM_ACRES = 10_000
GIBBERISH_MIN_LENGTH = 10

_LEADING_NUMBER_RE = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_VOWEL_RE = re.compile(r"[aeiou]", re.IGNORECASE)
_CONSONANT_RE = re.compile(r"[bcdfghjklmnpqrstvwxyz]", re.IGNORECASE)


def parse_farm_size(value: str | float) -> float | None:
    """Read acres from "2.5", "2.5 acres" or a number. None when there is no number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_NUMBER_RE.match(value)
    return float(match.group()) if match else None


def is_technique_related(technique: str, farm_size: str | float) -> bool:
    """Pre-check a modern farming request before calling a model.

    The technique must mention farming, must not mention an off-topic
    subject, must not be keyboard mashing, and the farm must be more than
    0 and at most 10,000 acres.
    """
    text = technique.lower()
    if not any(keyword in text for keyword in TECHNIQUE_KEYWORDS):
        return False
    if any(keyword in text for keyword in NON_FARMING_KEYWORDS):
        return False

    acres = parse_farm_size(farm_size)
    if acres is None or not 0 < acres <= MAX_FARM_ACRES:
        return False

    gibberish = len(technique) > GIBBERISH_MIN_LENGTH and not (
        _VOWEL_RE.search(text) and _CONSONANT_RE.search(text)
    )
    return not gibberish


def _positive_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def check_report(payload: dict, raw: str) -> None:
    """Refuse a report that lacks the sections the UI cannot render without.

    Raises:
        MalformedOutput: With stage "invalid response format".
    """
    def invalid(reason: str) -> MalformedOutput:
        return MalformedOutput(reason, raw, stage=INVALID_FORMAT)

    analysis = payload.get("techniqueAnalysis")
    implementation = payload.get("implementation")
    metrics = payload.get("metrics")
    if not all(isinstance(group, dict) for group in (analysis, implementation, metrics)):
        raise invalid("missing required analysis sections")

    overview = analysis.get("overview")
    phases = implementation.get("phases")
    if (
        not isinstance(overview, dict)
        or not isinstance(phases, list)
        or not isinstance(metrics.get("resourceEfficiency"), dict)
    ):
        raise invalid("missing critical analysis data")

    if len(phases) < MIN_PHASES:
        raise invalid(f"only {len(phases)} implementation phases, need {MIN_PHASES}")
    if not _positive_number(overview.get("estimatedCost")):
        raise invalid(f"invalid cost estimate {overview.get('estimatedCost')!r}")


def _prompt_shape(normalizer: ResponseNormalizer) -> str:
    shape = normalizer.defaults()
    shape["implementation"]["phases"] = [ImplementationPhase().model_dump(by_alias=True)]
    return json_shape(shape)


async def get_modern_farming_analysis(
    provider: ModelProvider,
    technique: str,
    farm_size: str | float,
    budget: Budget | str = Budget.MEDIUM,
    *,
    settings: Settings | None = None,
) -> ModernFarmingAnalysis:
    """Ask the model for a modern farming feasibility report and normalize it.

    Output that is not JSON or fails ``check_report`` is retried like a
    transient transport failure, with a linear backoff between attempts.

    Raises:
        NotApplicable: If the request is not about farming or the farm size
            is invalid. No model call is made.
        ValueError: If ``budget`` is not low, medium or high.
        MalformedOutput: If the last attempt produced no usable report.
        TransportFailure: If the last attempt could not reach the model.
    """
    budget = Budget(budget)
    if not is_technique_related(technique, farm_size):
        raise NotApplicable("Query is not related to farming or agriculture")

    settings = settings or Settings()
    service = settings.service
    normalizer = ResponseNormalizer(MODERN_FARMING)
    extractor = StructuredExtractor(
        FailurePolicy.raise_as("extraction failed"), config=settings.extraction
    )
    prompt = render_prompt(
        "modern_farming",
        technique=technique,
        farm_size=farm_size,
        budget=budget.value,
        min_phases=MIN_PHASES,
        shape=_prompt_shape(normalizer),
    )

    last_error: MalformedOutput | TransportFailure | None = None
    for attempt in range(1, service.max_retries + 1):
        try:
            completion = await provider.complete(
                [user_message(prompt)], SYSTEM_PROMPT, timeout=service.timeout
            )
            payload = extractor.extract(completion.content)
            check_report(payload, completion.content)
            return normalizer.normalize(payload)
        except (MalformedOutput, TransportFailure) as e:
            if isinstance(e, TransportFailure) and e.permanent:
                raise
            last_error = e
            logger.warning(
                "Modern farming attempt %d/%d for %r failed: %s",
                attempt, service.max_retries, technique, e,
            )
            if attempt < service.max_retries:
                await asyncio.sleep(service.retry_backoff * attempt)

    raise last_error
