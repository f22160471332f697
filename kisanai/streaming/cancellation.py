"""Per-call cancellation for streamed exchanges.

Each streamed call gets its own token, so cancelling one exchange never
affects another that is running concurrently or was started right after.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation flag owned by one streamed call."""

    def __init__(self) -> None:
        self._cancelled = False
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled by user") -> None:
        """Request cancellation. Idempotent; the first reason wins."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        logger.debug("Stream cancellation requested (%s)", reason)
