"""Recover a single JSON value from free-form model output.

Runs a fixed sequence of passes: fence stripping, outer-bracket slicing,
a strict parse, then cumulative repairs with a parse attempt after each
one. Either a whole value comes back or a MalformedOutput describing the
furthest-repaired text does; partial results are never returned.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from kisanai.errors import MalformedOutput
from kisanai.extraction.repairs import (
    BEST_EFFORT_REPAIRS,
    STRUCTURAL_REPAIRS,
    slice_outer,
    strip_code_fences,
)
from kisanai.schemas.config import ExtractionConfig

logger = logging.getLogger(__name__)

Expect = Literal["object", "array"]

_NO_FALLBACK = object()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-JSON constant {name}")


def _loads(text: str) -> tuple[Any, str]:
    """Parse strictly. Returns (value, "") or (None, error message)."""
    try:
        return json.loads(text, parse_constant=_reject_constant), ""
    except ValueError as e:
        return None, str(e)


@dataclass(frozen=True)
class FailurePolicy:
    """What the extractor does when every pass fails.

    Use the constructors: ``FailurePolicy.use_fallback(value)`` returns a
    fresh copy of ``value``; ``FailurePolicy.raise_as(stage)`` raises
    MalformedOutput whose message is prefixed with ``stage``.
    """

    fallback: Any = _NO_FALLBACK
    stage: str = MalformedOutput.stage

    @classmethod
    def use_fallback(cls, value: Any) -> FailurePolicy:
        return cls(fallback=value)

    @classmethod
    def raise_as(cls, stage: str = MalformedOutput.stage) -> FailurePolicy:
        return cls(stage=stage)

    @property
    def raises(self) -> bool:
        return self.fallback is _NO_FALLBACK


@dataclass
class ExtractionOutcome:
    """Result of one extraction attempt, before the failure policy applies."""

    value: Any = None
    error: MalformedOutput | None = None
    repairs: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class StructuredExtractor:
    """Turns raw model text into a parsed JSON object or array.

    Args:
        policy: Behaviour on total failure. Defaults to raising.
        expect: Top-level JSON type to look for, "object" or "array".
        config: Extraction settings (best-effort stage toggle, log preview).
    """

    def __init__(
        self,
        policy: FailurePolicy | None = None,
        *,
        expect: Expect = "object",
        config: ExtractionConfig | None = None,
    ) -> None:
        self._policy = policy or FailurePolicy.raise_as()
        self._expect = expect
        self._config = config or ExtractionConfig()

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    def try_extract(self, raw: str) -> ExtractionOutcome:
        """Run every pass and report what happened, without applying the policy."""
        text = strip_code_fences(raw or "")

        sliced = slice_outer(text, self._expect)
        if sliced is None:
            return ExtractionOutcome(
                error=MalformedOutput(f"no JSON {self._expect} present", text)
            )
        text = sliced

        value, reason = _loads(text)
        if not reason:
            return self._check_type(value, text, [])

        applied: list[str] = []
        passes = list(STRUCTURAL_REPAIRS)
        if self._config.best_effort_repairs:
            passes.extend(BEST_EFFORT_REPAIRS)

        for name, repair in passes:
            repaired = repair(text)
            if repaired == text:
                continue
            text = repaired
            applied.append(name)
            value, reason = _loads(text)
            if not reason:
                logger.debug("Recovered JSON after repairs: %s", ", ".join(applied))
                return self._check_type(value, text, applied)

        return ExtractionOutcome(error=MalformedOutput(reason, text), repairs=applied)

    def extract(self, raw: str) -> Any:
        """Extract a value, applying the failure policy on total failure.

        Raises:
            MalformedOutput: If extraction fails and the policy raises.
        """
        outcome = self.try_extract(raw)
        if outcome.ok:
            return outcome.value

        error = outcome.error
        preview = error.attempted_text[: self._config.preview_chars]
        logger.warning("JSON extraction failed (%s): %r", error.reason, preview)

        if self._policy.raises:
            raise MalformedOutput(
                error.reason, error.attempted_text, stage=self._policy.stage
            ) from error
        return copy.deepcopy(self._policy.fallback)

    def _check_type(self, value: Any, text: str, applied: list[str]) -> ExtractionOutcome:
        expected = dict if self._expect == "object" else list
        if isinstance(value, expected):
            return ExtractionOutcome(value=value, repairs=applied)
        return ExtractionOutcome(
            error=MalformedOutput(f"top-level value is not a JSON {self._expect}", text),
            repairs=applied,
        )
