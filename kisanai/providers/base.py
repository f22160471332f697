"""Abstract base class for model providers.

Services talk to models only through this interface, so tests and
alternative transports can stand in for the LiteLLM adapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from kisanai.schemas.config import ModelConfig
from kisanai.schemas.messages import Completion


class ModelProvider(ABC):
    """Abstract interface for any LLM a service can call.

    Initialized from a ModelConfig loaded from the TOML registry.
    """

    def __init__(self, config: ModelConfig) -> None:
        self._config = config

    # ── Identity ──────────────────────────────────────────────

    @property
    def provider_id(self) -> str:
        """Provider identifier (e.g. 'groq', 'gemini')."""
        return self._config.provider

    @property
    def model_id(self) -> str:
        """LiteLLM model identifier used for routing."""
        return self._config.model

    @property
    def display_name(self) -> str:
        return self._config.display_name

    # ── Capabilities ──────────────────────────────────────────

    @property
    def supports_vision(self) -> bool:
        return self._config.supports_vision

    @property
    def supports_thinking(self) -> bool:
        return self._config.supports_thinking

    @property
    def config(self) -> ModelConfig:
        return self._config

    # ── Core interface ────────────────────────────────────────

    @abstractmethod
    async def complete(
        self,
        messages: list[dict],
        system: str | None = None,
        *,
        timeout: int = 30,
    ) -> Completion:
        """Send a completion request and return the full response text.

        Args:
            messages: Conversation messages in OpenAI format. Content may be
                      a string or a list of text/image parts.
            system: Optional system prompt prepended to the messages.
            timeout: Timeout in seconds for the model call.

        Returns:
            A Completion with the raw content and token usage.

        Raises:
            TransportFailure: If the call fails after all retries.
        """

    async def stream(
        self,
        messages: list[dict],
        system: str | None = None,
        *,
        timeout: int = 30,
    ) -> AsyncIterator[str]:
        """Yield response text deltas as they arrive.

        Default implementation yields the whole non-streamed response as a
        single delta. Providers that can stream should override this.

        Raises:
            TransportFailure: If the call fails, before or during streaming.
        """
        completion = await self.complete(messages, system, timeout=timeout)
        if completion.content:
            yield completion.content


def user_message(text: str, image_data_url: str | None = None) -> dict:
    """Build an OpenAI-format user message, optionally with one image attached."""
    if image_data_url is None:
        return {"role": "user", "content": text}
    return {
        "role": "user",
        "content": [
            {"type": "text", "text": text},
            {"type": "image_url", "image_url": {"url": image_data_url}},
        ],
    }


def as_data_url(image: str, mime_type: str = "image/jpeg") -> str:
    """Accept a data URL or bare base64 payload and return a data URL."""
    if image.startswith("data:"):
        return image
    return f"data:{mime_type};base64,{image}"
