"""Consult: growth phases for a crop and a business plan for the current phase."""

from __future__ import annotations

import logging

from kisanai.errors import MalformedOutput
from kisanai.extraction.extractor import FailurePolicy, StructuredExtractor
from kisanai.normalization.normalizer import CONSULT_PLAN, ResponseNormalizer
from kisanai.normalization.variants import detect_variant, rename_keys
from kisanai.prompts import json_shape, render_prompt
from kisanai.providers.base import ModelProvider, user_message
from kisanai.schemas.config import Settings
from kisanai.schemas.consult import (
    FALLBACK_GROWTH_PHASES,
    REQUIRED_PLAN_GROUPS,
    ConsultPlan,
)

logger = logging.getLogger(__name__)

INVALID_FORMAT = "invalid response format"


async def get_growth_phases(
    provider: ModelProvider,
    crop: str,
    *,
    settings: Settings | None = None,
) -> list[str]:
    """Ask for the growth phases of ``crop``.

    Any answer that is not a non-empty list of strings yields the generic
    five-phase fallback.

    Raises:
        TransportFailure: If the model could not be reached.
    """
    settings = settings or Settings()
    extractor = StructuredExtractor(
        FailurePolicy.use_fallback(FALLBACK_GROWTH_PHASES),
        expect="array",
        config=settings.extraction,
    )
    completion = await provider.complete(
        [user_message(render_prompt("growth_phases", crop=crop))],
        timeout=settings.service.timeout,
    )
    phases = extractor.extract(completion.content)

    if not phases or not all(isinstance(phase, str) and phase for phase in phases):
        logger.warning("Unusable growth phases for %s, using generic phases", crop)
        return list(FALLBACK_GROWTH_PHASES)
    return phases


def _check_required_groups(payload: dict, raw: str) -> None:
    for group in REQUIRED_PLAN_GROUPS:
        if payload.get(group) is None:
            raise MalformedOutput(
                f"missing required field {group}", raw, stage=INVALID_FORMAT
            )


async def get_consult_plan(
    provider: ModelProvider,
    crop: str,
    area: float,
    phase: str,
    tahsil: str,
    *,
    settings: Settings | None = None,
) -> ConsultPlan:
    """Ask for a full consult plan and normalize it.

    Raises:
        MalformedOutput: With stage "invalid response format" if the output
            is not JSON or lacks one of the seven top-level groups.
        TransportFailure: If the model could not be reached.
    """
    settings = settings or Settings()
    normalizer = ResponseNormalizer(CONSULT_PLAN)
    extractor = StructuredExtractor(
        FailurePolicy.raise_as(INVALID_FORMAT), config=settings.extraction
    )
    prompt = render_prompt(
        "consult_plan",
        crop=crop,
        area=area,
        phase=phase,
        tahsil=tahsil,
        shape=json_shape(normalizer.defaults()),
    )
    completion = await provider.complete(
        [user_message(prompt)], timeout=settings.service.timeout
    )
    payload = extractor.extract(completion.content)

    variants = normalizer.schema.variants
    variant = detect_variant(payload, variants)
    _check_required_groups(
        rename_keys(payload, variants[variant]) if variant in variants else payload,
        completion.content,
    )
    return normalizer.normalize(payload)
