"""Exception hierarchy for the KisanAI pipeline.

Every failure that reaches a caller derives from KisanError and carries
the pipeline stage it came from. The stage is prefixed to the message so
a UI can show a useful line without inspecting the exception type.
"""

from __future__ import annotations


class KisanError(Exception):
    """Base exception for all KisanAI pipeline failures."""

    stage = "error"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        if stage:
            self.stage = stage
        self.detail = message
        super().__init__(f"{self.stage}: {message}")


class TransportFailure(KisanError):
    """The provider call failed or timed out after its own retries.

    Attributes:
        permanent: True when retrying cannot help (bad credentials).
    """

    stage = "transport failed"

    def __init__(self, message: str, *, permanent: bool = False) -> None:
        self.permanent = permanent
        super().__init__(message)


class MalformedOutput(KisanError):
    """No parseable JSON value could be recovered from model output.

    Attributes:
        attempted_text: The furthest-repaired text the extractor tried last.
        reason: Short description of why the final parse failed.
    """

    stage = "extraction failed"

    def __init__(
        self,
        reason: str,
        attempted_text: str = "",
        *,
        stage: str | None = None,
    ) -> None:
        self.reason = reason
        self.attempted_text = attempted_text
        super().__init__(reason, stage=stage)


class NotApplicable(KisanError):
    """The request was rejected before any model call as off-topic."""

    stage = "not applicable"


class SchemaDefaultMissing(KisanError):
    """A registered schema has a field with no documented default.

    Raised at import time when a schema is registered with the normalizer.
    """

    stage = "schema default missing"
