"""Provider API keys.

A key already exported in the shell always wins. Missing keys are filled
from ``~/.kisanai/keys.env`` and then from a project ``.env`` file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

KISANAI_HOME = Path.home() / ".kisanai"
KEYS_FILE = KISANAI_HOME / "keys.env"

# (env_var, display_name, used_for)
PROVIDERS = [
    ("GROQ_API_KEY", "Groq", "chat, crop analytics, consult"),
    ("GEMINI_API_KEY", "Google (Gemini)", "image monitoring, disease diagnosis"),
]


def _pairs(text: str):
    """Yield (name, value) for every assignment line in a dotenv file."""
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("#"):
            continue
        name, sep, value = line.partition("=")
        name = name.strip()
        if sep and name:
            yield name, value.strip().strip("'\"")


def _apply(path: Path) -> None:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Skipping %s: %s", path, e)
        return
    for name, value in _pairs(text):
        if os.environ.get(name):
            continue
        os.environ[name] = value
        logger.debug("%s set from %s", name, path)


def load_keys_env() -> None:
    """Fill unset provider variables from the keys file, then from ./.env."""
    for candidate in (KEYS_FILE, Path.cwd() / ".env"):
        if candidate.is_file():
            _apply(candidate)


def get_configured_keys() -> dict[str, str]:
    """Map every known provider variable to its value ("" when unset)."""
    load_keys_env()
    return {env_var: os.environ.get(env_var, "") for env_var, _, _ in PROVIDERS}


def has_any_key() -> bool:
    load_keys_env()
    return any(get_configured_keys().values())
