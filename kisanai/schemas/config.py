"""Configuration schemas for the model registry and pipeline settings.

Loaded from models.toml and defaults.toml by kisanai.providers.registry.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class ModelConfig(BaseModel):
    """Configuration for a single LLM model in the registry.

    Each entry provides the LiteLLM routing information, sampling
    parameters and capability flags for one use.
    """

    provider: str = Field(description="Provider identifier (e.g. 'groq', 'gemini')")
    model: str = Field(description="LiteLLM model identifier (e.g. 'groq/openai/gpt-oss-20b')")
    display_name: str = Field(description="Human-friendly model name for CLI output")
    api_key_env: str = Field(description="Environment variable name holding the API key")
    api_base: str = Field(default="", description="Custom API base URL (empty = provider default)")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: float = Field(default=0.9, gt=0.0, le=1.0, description="Nucleus sampling mass")
    max_tokens: int = Field(default=4096, gt=0, description="Completion token limit")
    supports_vision: bool = Field(
        default=False, description="Whether the model accepts image inputs"
    )
    supports_thinking: bool = Field(
        default=False, description="Whether the model emits <think> reasoning blocks"
    )


class StreamConfig(BaseModel):
    """Annotation markers that delimit the thinking channel."""

    start_marker: str = Field(default="<think>", description="Opens a thinking block")
    end_marker: str = Field(default="</think>", description="Closes a thinking block")

    @model_validator(mode="after")
    def _check_markers(self) -> StreamConfig:
        if not self.start_marker or not self.end_marker:
            raise ValueError("stream markers must be non-empty")
        if self.start_marker == self.end_marker:
            raise ValueError("start and end markers must differ")
        return self


class ExtractionConfig(BaseModel):
    """Settings for JSON recovery from model output."""

    best_effort_repairs: bool = Field(
        default=True,
        description="Run heuristic repairs (quote swapping, bare keys) after structural ones",
    )
    preview_chars: int = Field(
        default=200, ge=0, description="Characters of failed text included in log lines"
    )


class ServiceConfig(BaseModel):
    """Call-site settings shared by the services."""

    timeout: int = Field(default=30, gt=0, description="Model call timeout in seconds")
    max_retries: int = Field(
        default=2, ge=1, le=5, description="Attempts for extraction-sensitive calls"
    )
    retry_backoff: float = Field(
        default=1.0, ge=0.0, description="Linear backoff unit between attempts, in seconds"
    )


class Settings(BaseModel):
    """Top-level pipeline settings loaded from defaults.toml."""

    stream: StreamConfig = Field(default_factory=StreamConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
