"""Model registry and TOML configuration loader.

Loads model definitions from models.toml and pipeline settings from
defaults.toml.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from kisanai.schemas.config import ModelConfig, Settings

# Default config directory relative to the kisanai package
_CONFIG_DIR = Path(__file__).parent.parent / "config"


def config_dir() -> Path:
    return _CONFIG_DIR


def load_models(config_path: Path | None = None) -> dict[str, ModelConfig]:
    """Load the model registry from a TOML file.

    Args:
        config_path: Path to models.toml. Defaults to kisanai/config/models.toml.

    Returns:
        Dictionary mapping use keys (chat, analytics, ...) to ModelConfig.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the TOML has no [models] entries.
    """
    path = config_path or _CONFIG_DIR / "models.toml"
    if not path.exists():
        raise FileNotFoundError(f"Model registry not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    models_section = raw.get("models")
    if not models_section or not isinstance(models_section, dict):
        raise ValueError(f"No [models] section found in {path}")

    return {
        key: ModelConfig(**entry)
        for key, entry in models_section.items()
        if isinstance(entry, dict)
    }


def load_settings(config_path: Path | None = None) -> Settings:
    """Load pipeline settings from a TOML file.

    Missing sections and keys fall back to the Settings defaults.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If a value is out of range.
    """
    path = config_path or _CONFIG_DIR / "defaults.toml"
    if not path.exists():
        raise FileNotFoundError(f"Settings not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    return Settings(
        stream=raw.get("stream", {}),
        extraction=raw.get("extraction", {}),
        service=raw.get("service", {}),
    )


def get_model(registry: dict[str, ModelConfig], key: str) -> ModelConfig:
    """Look up a model by use key.

    Raises:
        ValueError: If the key is not in the registry.
    """
    if key not in registry:
        raise ValueError(
            f"Model '{key}' not in registry. Available: {', '.join(sorted(registry))}"
        )
    return registry[key]
