"""Model provider adapters and registry loading."""

from kisanai.providers.base import ModelProvider, as_data_url, user_message
from kisanai.providers.litellm_provider import LiteLLMProvider
from kisanai.providers.registry import get_model, load_models, load_settings

__all__ = [
    "LiteLLMProvider",
    "ModelProvider",
    "as_data_url",
    "get_model",
    "load_models",
    "load_settings",
    "user_message",
]
