"""Farming assistant chat.

Streams an answer through the StreamSegmenter so reasoning models can show
their thinking separately, then tidies the visible answer for Indian
farmers: rupees instead of dollars, hectares next to acres, quintals next
to kilograms.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from kisanai.errors import TransportFailure
from kisanai.prompts import render_prompt
from kisanai.providers.base import ModelProvider, user_message
from kisanai.schemas.config import Settings, StreamConfig
from kisanai.streaming.cancellation import CancellationToken
from kisanai.streaming.segmenter import SegmentCallback, StreamSegmenter

logger = logging.getLogger(__name__)

ACRE_TO_HECTARE = 0.404686
KG_PER_QUINTAL = 100

# Returned when the model spent the whole answer thinking
EMPTY_ANSWER_REPLY = (
    "I've processed your request and provided my reasoning above. "
    "Please let me know if you need any clarification or have additional questions."
)

_DOLLAR_RE = re.compile(r"\$(\d+)")
_ACRES_RE = re.compile(r"\b(\d+)\s*acres?\b", re.IGNORECASE)
_KILOGRAMS_RE = re.compile(r"\b(\d+)\s*(?:kg|kilograms?)\b", re.IGNORECASE)


@dataclass
class ChatReply:
    """Final result of one chat exchange."""

    text: str
    thinking: str = ""
    cancelled: bool = False


def _annotation_re(config: StreamConfig) -> re.Pattern[str]:
    return re.compile(
        f"{re.escape(config.start_marker)}.*?{re.escape(config.end_marker)}",
        re.IGNORECASE | re.DOTALL,
    )


def _acres(match: re.Match[str]) -> str:
    count = match.group(1)
    return f"{count} acres ({int(count) * ACRE_TO_HECTARE:.2f} hectares)"


def _kilograms(match: re.Match[str]) -> str:
    count = match.group(1)
    return f"{count} kg ({int(count) / KG_PER_QUINTAL:.2f} quintals)"


def postprocess_answer(text: str, config: StreamConfig | None = None) -> str:
    """Clean a visible answer for display.

    Removes leftover annotation blocks, shows dollar amounts in rupees and
    annotates areas and weights with their local units. Apply once: the
    annotations are not idempotent.
    """
    config = config or StreamConfig()
    text = _annotation_re(config).sub("", text)
    text = _DOLLAR_RE.sub(r"₹\1", text)
    text = _ACRES_RE.sub(_acres, text)
    text = _KILOGRAMS_RE.sub(_kilograms, text)
    return text.strip()


def _build_request(
    question: str,
    *,
    location: str | None,
    language: str,
    history: list[dict] | None,
    thinking: bool,
) -> tuple[list[dict], str]:
    system = render_prompt(
        "chat_system",
        location=location,
        language=language,
        has_history=bool(history),
        thinking=thinking,
    )
    messages = [*(history or []), user_message(question)]
    return messages, system


async def stream_answer(
    provider: ModelProvider,
    question: str,
    *,
    on_segment: SegmentCallback | None = None,
    token: CancellationToken | None = None,
    location: str | None = None,
    language: str = "en",
    history: list[dict] | None = None,
    settings: Settings | None = None,
) -> ChatReply:
    """Stream an answer, forwarding segmented deltas to ``on_segment``.

    The callback sees every non-empty segment and one final ``done``
    segment, also when the token cancels the stream or the provider fails.

    Raises:
        TransportFailure: If the provider fails before or during the stream.
    """
    settings = settings or Settings()
    segmenter = StreamSegmenter(settings.stream)
    messages, system = _build_request(
        question,
        location=location,
        language=language,
        history=history,
        thinking=provider.supports_thinking,
    )

    deltas = provider.stream(messages, system, timeout=settings.service.timeout)
    acc = await segmenter.run(deltas, on_segment, token)

    cancelled = token is not None and token.cancelled
    text = postprocess_answer(acc.visible_so_far, settings.stream)
    if not text and not cancelled:
        logger.debug("Model returned no visible answer; using acknowledgement reply")
        text = EMPTY_ANSWER_REPLY
    return ChatReply(text=text, thinking=acc.thinking_so_far, cancelled=cancelled)


async def answer(
    provider: ModelProvider,
    question: str,
    *,
    location: str | None = None,
    language: str = "en",
    history: list[dict] | None = None,
    settings: Settings | None = None,
) -> str:
    """Non-streamed answer with the same post-processing.

    Raises:
        TransportFailure: If the provider fails or returns no content.
    """
    settings = settings or Settings()
    messages, system = _build_request(
        question, location=location, language=language, history=history, thinking=False
    )
    completion = await provider.complete(
        messages, system, timeout=settings.service.timeout
    )
    if not completion.content:
        raise TransportFailure(f"empty response from {provider.display_name}")
    return postprocess_answer(completion.content, settings.stream)
