"""LiteLLM adapter implementing the ModelProvider interface.

One class routes every KisanAI call (Groq for text, Gemini for images) through
``litellm.acompletion``. Transient failures are retried with exponential
backoff; everything that reaches a service is a TransportFailure.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator

import litellm
import openai

# Keep LiteLLM's feedback and provider-list banners out of the terminal
litellm.suppress_debug_info = True

from kisanai.errors import TransportFailure
from kisanai.providers.base import ModelProvider
from kisanai.schemas.config import ModelConfig
from kisanai.schemas.messages import Completion, TokenUsage

logger = logging.getLogger(__name__)

ATTEMPTS = 3
BACKOFF_BASE = 1.0  # seconds, doubled after each failed attempt

_RETRYABLE = (
    TimeoutError,
    litellm.Timeout,
    litellm.RateLimitError,
    litellm.ServiceUnavailableError,
    litellm.InternalServerError,
    litellm.APIConnectionError,
)

# litellm exception classes subclass the matching openai ones
_STREAM_ERRORS = (*_RETRYABLE, openai.APIError)

# (substrings of the lowered error text, short reason), first match wins
_REASONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("rate", "429"), "rate limit"),
    (("overloaded", "529"), "overloaded"),
    (("timeout", "timed out"), "timeout"),
    (("503", "unavailable"), "service unavailable"),
    (("500", "internal"), "server error"),
    (("connection",), "connection error"),
)


def describe_error(error: BaseException | None) -> str:
    """Short reason for a provider error, suitable for a log line."""
    if error is None:
        return "unknown error"
    if isinstance(error, TimeoutError):
        return "timeout"
    text = str(error).lower()
    for needles, reason in _REASONS:
        if any(needle in text for needle in needles):
            return reason
    return str(error)[:80]


class LiteLLMProvider(ModelProvider):
    """ModelProvider backed by LiteLLM.

    The API key is read once, from the environment variable named in the
    model config; an unset key is left to LiteLLM's own lookup.
    """

    def __init__(self, config: ModelConfig) -> None:
        super().__init__(config)
        self._api_key = os.environ.get(config.api_key_env, "")

    async def complete(
        self,
        messages: list[dict],
        system: str | None = None,
        *,
        timeout: int = 30,
    ) -> Completion:
        """Send a completion request.

        Raises:
            TransportFailure: After the last retry, or at once for errors
                retrying cannot fix (authentication, bad request, unknown
                model, refused access).
        """
        response = await self._acompletion(self._request(messages, system, timeout))
        return Completion(
            content=_first_message_text(response),
            model=self.model_id,
            token_usage=_usage(response),
        )

    async def stream(
        self,
        messages: list[dict],
        system: str | None = None,
        *,
        timeout: int = 30,
    ) -> AsyncIterator[str]:
        """Yield content deltas as LiteLLM delivers them.

        Only opening the stream is retried. A failure after deltas have been
        yielded cannot be replayed, so it is raised as TransportFailure.
        """
        request = self._request(messages, system, timeout)
        request["stream"] = True
        chunks = await self._acompletion(request)
        try:
            async for chunk in chunks:
                text = _delta_text(chunk)
                if text:
                    yield text
        except _STREAM_ERRORS as e:
            raise TransportFailure(
                f"stream from {self.model_id} interrupted ({describe_error(e)})"
            ) from e

    # ── Internals ─────────────────────────────────────────────

    def _request(self, messages: list[dict], system: str | None, timeout: int) -> dict:
        config = self._config
        request: dict = {
            "model": config.model,
            "messages": [{"role": "system", "content": system}, *messages]
            if system
            else list(messages),
            "timeout": float(timeout),
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_tokens,
        }
        if self._api_key:
            request["api_key"] = self._api_key
        if config.api_base:
            request["api_base"] = config.api_base
        return request

    async def _acompletion(self, request: dict):
        """Call litellm.acompletion, retrying transient failures.

        Raises:
            TransportFailure: If no attempt succeeds or the error is not
                worth retrying.
        """
        model = self._config.model
        error: BaseException | None = None

        for attempt in range(1, ATTEMPTS + 1):
            try:
                return await litellm.acompletion(**request)
            except litellm.AuthenticationError:
                raise TransportFailure(
                    f"Authentication failed for {model}. "
                    f"Check that {self._config.api_key_env} is set correctly.",
                    permanent=True,
                ) from None
            except litellm.BadRequestError as e:
                raise TransportFailure(f"Bad request to {model}: {e}") from e
            except _RETRYABLE as e:
                error = e
            except openai.APIError as e:
                raise TransportFailure(
                    f"Model call to {model} rejected: {describe_error(e)}",
                    permanent=True,
                ) from e

            if attempt < ATTEMPTS:
                delay = BACKOFF_BASE * 2 ** (attempt - 1)
                logger.warning(
                    "%s attempt %d/%d failed (%s), retrying in %.1fs",
                    self.display_name, attempt, ATTEMPTS, describe_error(error), delay,
                )
                await asyncio.sleep(delay)

        raise TransportFailure(
            f"Model call to {model} failed after {ATTEMPTS} attempts: "
            f"{describe_error(error)}"
        ) from error


def _first_message_text(response) -> str:
    if not response.choices:
        return ""
    message = response.choices[0].message
    return (message.content or "") if message else ""


def _delta_text(chunk) -> str:
    if not chunk.choices:
        return ""
    delta = chunk.choices[0].delta
    return (delta.content or "") if delta else ""


def _usage(response) -> TokenUsage:
    usage = getattr(response, "usage", None)
    return TokenUsage(
        prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
    )
