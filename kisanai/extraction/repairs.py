"""Pure text passes used to recover JSON from model output.

Each pass maps str -> str and never raises. Structural repairs only touch
JSON punctuation. Heuristic repairs can rewrite string content (an
apostrophe inside a value becomes a double quote), so they run last and
can be switched off.
"""

from __future__ import annotations

import re
from collections.abc import Callable

_FENCE_LINE_RE = re.compile(r"^```[\w+-]*\s*$")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_BARE_KEY_RE = re.compile(r'(?<!["\w])([A-Za-z_]\w*)(\s*):')
_WHITESPACE_RE = re.compile(r"\s+")

BRACKETS = {"object": ("{", "}"), "array": ("[", "]")}


def strip_code_fences(text: str) -> str:
    """Trim, then drop an opening fence line and a closing fence line."""
    text = text.strip()
    lines = text.split("\n")
    if lines and _FENCE_LINE_RE.match(lines[0].strip()):
        lines = lines[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def slice_outer(text: str, expect: str = "object") -> str | None:
    """Slice from the first opening bracket to the last closing one.

    Returns None when there is no bracket pair to slice.
    """
    opening, closing = BRACKETS[expect]
    first = text.find(opening)
    last = text.rfind(closing)
    if first == -1 or last < first:
        return None
    return text[first:last + 1]


# ── Structural ────────────────────────────────────────────────


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


# ── Best effort ───────────────────────────────────────────────


def single_to_double_quotes(text: str) -> str:
    return text.replace("'", '"')


def quote_bare_keys(text: str) -> str:
    """Quote identifier keys written without quotes: {a: 1} -> {"a": 1}."""
    return _BARE_KEY_RE.sub(r'"\1"\2:', text)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text)


Repair = Callable[[str], str]

STRUCTURAL_REPAIRS: tuple[tuple[str, Repair], ...] = (
    ("trailing_commas", remove_trailing_commas),
)

BEST_EFFORT_REPAIRS: tuple[tuple[str, Repair], ...] = (
    ("single_quotes", single_to_double_quotes),
    ("bare_keys", quote_bare_keys),
    ("whitespace", collapse_whitespace),
)
