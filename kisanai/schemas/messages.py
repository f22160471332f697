"""Provider result schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    """Token consumption for a single model call."""

    prompt_tokens: int = Field(default=0, ge=0, description="Number of input tokens consumed")
    completion_tokens: int = Field(
        default=0, ge=0, description="Number of output tokens generated"
    )


class Completion(BaseModel):
    """Text returned by a non-streamed model call."""

    content: str = Field(description="Raw response text")
    model: str = Field(description="LiteLLM model identifier that answered")
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
