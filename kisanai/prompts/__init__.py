"""Markdown prompt templates for the advisory services.

Each service renders one ``<name>.md`` file from this directory. Variables a
caller leaves out render empty, so ``{% if %}`` sections simply drop away.
"""

from __future__ import annotations

import json
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

_TEMPLATES = Path(__file__).parent

_env = Environment(loader=FileSystemLoader(_TEMPLATES), keep_trailing_newline=True)


def render_prompt(template_name: str, **variables: object) -> str:
    """Render ``<template_name>.md`` with the given variables.

    Raises:
        FileNotFoundError: If there is no such template.
    """
    try:
        template = _env.get_template(f"{template_name}.md")
    except TemplateNotFound:
        raise FileNotFoundError(
            f"Prompt template not found: {_TEMPLATES / template_name}.md"
        ) from None
    return template.render(**variables)


def json_shape(example: dict) -> str:
    """Render a default record as the JSON structure a prompt asks for."""
    return json.dumps(example, indent=2, ensure_ascii=False)
