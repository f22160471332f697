"""Crop analytics: market, quality, forecast, soil and suitability for one crop."""

from __future__ import annotations

import asyncio
import logging
import re

from kisanai.errors import MalformedOutput, NotApplicable, TransportFailure
from kisanai.extraction.extractor import FailurePolicy, StructuredExtractor
from kisanai.normalization.normalizer import CROP_ANALYTICS, ResponseNormalizer
from kisanai.prompts import json_shape, render_prompt
from kisanai.providers.base import ModelProvider, user_message
from kisanai.schemas.config import Settings
from kisanai.schemas.crop import CropAnalytics

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an agricultural analyst for Indian farmers. Generate crop analysis "
    "reports in JSON format only. Always return valid, parseable JSON."
)

FARMING_KEYWORDS = (
    "rice", "wheat", "cotton", "sugarcane", "soybeans", "maize", "pulses", "groundnut",
    "millets", "potato", "onion", "jowar", "bajra", "tur", "moong", "urad", "chana",
    "tomato", "brinjal", "chilli", "cabbage", "cauliflower", "cucumber", "okra",
    "grapes", "mango", "orange", "banana", "coconut", "cashew", "pomegranate",
    "farming", "agriculture", "crop", "cultivation", "harvest", "yield",
)

NON_FARMING_KEYWORDS = (
    "porn", "sex", "adult", "gambling", "casino", "drug", "illegal", "hack",
    "crack", "virus", "malware", "spam", "scam", "fraud", "theft", "robbery",
    "murder", "kill", "violence", "weapon", "bomb", "terrorist", "extremist",
    "political", "election", "vote", "government", "policy", "law", "legal",
    "medical", "health", "disease", "cancer", "treatment", "therapy", "surgery",
    "finance", "investment", "stock", "trading", "crypto", "bitcoin", "money",
    "entertainment", "movie", "music", "game", "sport", "football", "basketball",
    "technology", "programming", "coding", "software", "app", "website", "internet",
    "social", "facebook", "twitter", "instagram", "tiktok", "youtube", "video",
)

# Longer names with no vowels (or no consonants) are treated as keyboard mashing
GIBBERISH_MIN_LENGTH = 15

_VOWEL_RE = re.compile(r"[aeiou]", re.IGNORECASE)
_CONSONANT_RE = re.compile(r"[bcdfghjklmnpqrstvwxyz]", re.IGNORECASE)


def is_farming_related(crop_name: str, city: str) -> bool:
    """Cheap pre-check that a request is about farming before calling a model."""
    crop = crop_name.lower()
    city = city.lower()

    if not any(keyword in crop for keyword in FARMING_KEYWORDS):
        return False
    if any(keyword in crop or keyword in city for keyword in NON_FARMING_KEYWORDS):
        return False

    gibberish = len(crop_name) > GIBBERISH_MIN_LENGTH and not (
        _VOWEL_RE.search(crop) and _CONSONANT_RE.search(crop)
    )
    return not gibberish


async def get_crop_analytics(
    provider: ModelProvider,
    city: str,
    state: str,
    crop_name: str,
    *,
    date_range: str | None = None,
    settings: Settings | None = None,
) -> CropAnalytics:
    """Ask the model for a crop analytics report and normalize it.

    Each attempt that fails in transport or extraction is retried after a
    linear backoff, up to ``settings.service.max_retries`` attempts.

    Raises:
        NotApplicable: If the request is not about farming. No model call is made.
        MalformedOutput: If the last attempt produced no parseable JSON.
        TransportFailure: If the last attempt could not reach the model.
    """
    if not is_farming_related(crop_name, city):
        raise NotApplicable("Query is not related to farming or agriculture")

    settings = settings or Settings()
    service = settings.service
    normalizer = ResponseNormalizer(CROP_ANALYTICS)
    extractor = StructuredExtractor(
        FailurePolicy.raise_as("extraction failed"), config=settings.extraction
    )
    prompt = render_prompt(
        "crop_analytics",
        state=state,
        crop=crop_name,
        city=city,
        date_range=date_range,
        shape=json_shape(normalizer.defaults()),
    )

    last_error: MalformedOutput | TransportFailure | None = None
    for attempt in range(1, service.max_retries + 1):
        try:
            completion = await provider.complete(
                [user_message(prompt)], SYSTEM_PROMPT, timeout=service.timeout
            )
            payload = extractor.extract(completion.content)
            return normalizer.normalize(payload)
        except (MalformedOutput, TransportFailure) as e:
            if isinstance(e, TransportFailure) and e.permanent:
                raise
            last_error = e
            logger.warning(
                "Crop analytics attempt %d/%d for %s failed: %s",
                attempt, service.max_retries, crop_name, e,
            )
            if attempt < service.max_retries:
                await asyncio.sleep(service.retry_backoff * attempt)

    raise last_error
