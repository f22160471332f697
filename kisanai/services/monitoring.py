"""Image monitoring for crop, soil, thermal and field photographs."""

from __future__ import annotations

import logging

from pydantic.alias_generators import to_camel

from kisanai.extraction.extractor import FailurePolicy, StructuredExtractor
from kisanai.normalization.normalizer import MONITORING_SCHEMAS, ResponseNormalizer
from kisanai.prompts import json_shape, render_prompt
from kisanai.providers.base import ModelProvider, as_data_url, user_message
from kisanai.schemas.config import Settings
from kisanai.schemas.monitoring import (
    REJECTION_SENTINELS,
    MonitoringCategory,
    MonitoringResult,
)

logger = logging.getLogger(__name__)


async def analyze_image(
    provider: ModelProvider,
    category: MonitoringCategory | str,
    image: str,
    *,
    mime_type: str = "image/jpeg",
    hint: str | None = None,
    settings: Settings | None = None,
) -> MonitoringResult:
    """Analyze one image and return the normalized result for its category.

    Args:
        provider: A vision-capable provider.
        category: Which monitoring analysis to run.
        image: A data URL or bare base64 payload.
        mime_type: MIME type used when ``image`` is bare base64.
        hint: Optional farmer description of the image.

    Raises:
        ValueError: If the category is unknown or the provider has no vision.
        MalformedOutput: If the model output holds no parseable JSON object.
        TransportFailure: If the model could not be reached.
    """
    category = MonitoringCategory(category)
    if not provider.supports_vision:
        raise ValueError(f"{provider.display_name} does not accept images")

    settings = settings or Settings()
    normalizer = ResponseNormalizer(MONITORING_SCHEMAS[category])
    extractor = StructuredExtractor(
        FailurePolicy.raise_as("extraction failed"), config=settings.extraction
    )

    sentinel_field, sentinel_value = REJECTION_SENTINELS[category]
    prompt = render_prompt(
        "monitoring",
        category=category.value,
        hint=hint,
        sentinel_field=to_camel(sentinel_field),
        sentinel_value=sentinel_value,
        shape=json_shape(normalizer.defaults()),
    )

    completion = await provider.complete(
        [user_message(prompt, as_data_url(image, mime_type))],
        timeout=settings.service.timeout,
    )
    result = normalizer.normalize(extractor.extract(completion.content))
    if not is_valid_image(result):
        logger.info("Model rejected the image as not a %s image", category.value)
    return result


def is_valid_image(result: MonitoringResult) -> bool:
    """False when the model reported the image as unusable (confidence 0)."""
    return result.confidence_level > 0


def is_rejected(category: MonitoringCategory | str, result: MonitoringResult) -> bool:
    """True when the model set the category's rejection marker or zero confidence."""
    field, value = REJECTION_SENTINELS[MonitoringCategory(category)]
    return not is_valid_image(result) or getattr(result, field) == value
