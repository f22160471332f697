"""Plant disease diagnosis from a photograph.

Diagnosis never fails on a bad model answer: unparseable output and
transient transport errors both produce the default diagnosis, so the
farmer always gets the general treatment advice. Credential errors still
propagate.
"""

from __future__ import annotations

import logging

from kisanai.errors import TransportFailure
from kisanai.extraction.extractor import FailurePolicy, StructuredExtractor
from kisanai.normalization.normalizer import DISEASE_DIAGNOSIS, ResponseNormalizer
from kisanai.prompts import json_shape, render_prompt
from kisanai.providers.base import ModelProvider, as_data_url, user_message
from kisanai.schemas.config import Settings
from kisanai.schemas.disease import DiseaseDiagnosis

logger = logging.getLogger(__name__)


async def diagnose_plant(
    provider: ModelProvider,
    image: str,
    *,
    mime_type: str = "image/jpeg",
    crop_type: str | None = None,
    settings: Settings | None = None,
) -> DiseaseDiagnosis:
    """Diagnose the plant in ``image`` (a data URL or bare base64 payload).

    Raises:
        TransportFailure: Only for permanent failures such as bad credentials.
    """
    settings = settings or Settings()
    normalizer = ResponseNormalizer(DISEASE_DIAGNOSIS)
    extractor = StructuredExtractor(
        FailurePolicy.use_fallback({}), config=settings.extraction
    )
    prompt = render_prompt(
        "disease_diagnosis",
        crop_type=crop_type,
        shape=json_shape(normalizer.defaults()),
    )

    try:
        completion = await provider.complete(
            [user_message(prompt, as_data_url(image, mime_type))],
            timeout=settings.service.timeout,
        )
    except TransportFailure as e:
        if e.permanent:
            raise
        logger.warning("Disease diagnosis unavailable, returning defaults: %s", e)
        return normalizer.normalize({})

    return normalizer.normalize(extractor.extract(completion.content))
