"""Split a streamed completion into a visible channel and a thinking channel.

Reasoning models wrap their internal reasoning in annotation markers
(``<think>`` ... ``</think>`` by default). Deltas arrive in arbitrary
chunks, so a marker can straddle two deltas. The segmenter holds back any
tail that could still become a marker and resolves it on the next delta,
which makes the accumulated output independent of where the stream was cut.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Awaitable, Callable

from kisanai.schemas.config import StreamConfig
from kisanai.schemas.streaming import SegmentedAccumulator, SegmentedDelta
from kisanai.streaming.cancellation import CancellationToken

logger = logging.getLogger(__name__)

SegmentCallback = Callable[[SegmentedDelta], Awaitable[None] | None]


def _held_prefix_length(buffer: str, start: int, marker: str) -> int:
    """Length of the longest tail of buffer[start:] that is a proper prefix of marker."""
    longest = min(len(marker) - 1, len(buffer) - start)
    for k in range(longest, 0, -1):
        if buffer.endswith(marker[:k]):
            return k
    return 0


async def _emit(on_segment: SegmentCallback | None, segment: SegmentedDelta) -> None:
    if on_segment is None:
        return
    result = on_segment(segment)
    if asyncio.iscoroutine(result):
        await result


class StreamSegmenter:
    """Stateless splitter; all per-call state lives in the accumulator.

    Args:
        config: Marker configuration. Defaults to ``<think>``/``</think>``.
    """

    def __init__(self, config: StreamConfig | None = None) -> None:
        config = config or StreamConfig()
        self._start = config.start_marker
        self._end = config.end_marker

    @property
    def start_marker(self) -> str:
        return self._start

    @property
    def end_marker(self) -> str:
        return self._end

    def open(self) -> SegmentedAccumulator:
        """Create the state for a new streamed exchange."""
        return SegmentedAccumulator()

    def feed(self, acc: SegmentedAccumulator, delta: str) -> SegmentedDelta:
        """Segment one delta.

        Text before a start marker is visible, text between markers is
        thinking. A trailing partial marker is kept in ``acc.carry_over``
        and not emitted until the next delta (or close) resolves it.

        Raises:
            RuntimeError: If the accumulator was already closed.
        """
        if acc.closed:
            raise RuntimeError("Cannot feed a closed stream accumulator")

        buffer = acc.carry_over + delta
        acc.carry_over = ""
        visible: list[str] = []
        thinking: list[str] = []
        pos = 0

        while True:
            marker = self._end if acc.inside_annotation else self._start
            channel = thinking if acc.inside_annotation else visible
            idx = buffer.find(marker, pos)
            if idx == -1:
                held = _held_prefix_length(buffer, pos, marker)
                split = len(buffer) - held
                channel.append(buffer[pos:split])
                acc.carry_over = buffer[split:]
                break
            channel.append(buffer[pos:idx])
            pos = idx + len(marker)
            acc.inside_annotation = not acc.inside_annotation

        segment = SegmentedDelta(
            visible_delta="".join(visible), thinking_delta="".join(thinking)
        )
        acc.visible_so_far += segment.visible_delta
        acc.thinking_so_far += segment.thinking_delta
        return segment

    def close(self, acc: SegmentedAccumulator) -> SegmentedDelta:
        """End the stream and produce the terminal delta.

        Held carry-over is flushed into the channel the stream ended in, so
        an unterminated annotation lands in the thinking channel.

        Raises:
            RuntimeError: If the accumulator was already closed.
        """
        if acc.closed:
            raise RuntimeError("Stream accumulator closed twice")
        acc.closed = True

        flushed = acc.carry_over
        acc.carry_over = ""
        if acc.inside_annotation:
            acc.thinking_so_far += flushed
            return SegmentedDelta(thinking_delta=flushed, done=True)
        acc.visible_so_far += flushed
        return SegmentedDelta(visible_delta=flushed, done=True)

    def discard(self, acc: SegmentedAccumulator) -> SegmentedDelta:
        """End a cancelled stream: drop the carry-over, emit an empty terminal delta."""
        if acc.closed:
            raise RuntimeError("Stream accumulator closed twice")
        acc.closed = True
        acc.carry_over = ""
        return SegmentedDelta(done=True)

    async def run(
        self,
        deltas: AsyncIterable[str],
        on_segment: SegmentCallback | None = None,
        token: CancellationToken | None = None,
    ) -> SegmentedAccumulator:
        """Drive a whole stream through the segmenter.

        Calls ``on_segment`` for every non-empty segment and exactly once
        with a ``done`` segment, whether the stream finished, was cancelled,
        or the delta source raised. Errors from the source propagate after
        the terminal segment has been delivered.

        Args:
            deltas: Async iterable of raw text deltas.
            on_segment: Optional sync or async callback.
            token: Cancellation token checked before each delta.

        Returns:
            The accumulator holding the full visible and thinking text.
        """
        acc = self.open()
        cancelled = False
        try:
            async for delta in deltas:
                if token is not None and token.cancelled:
                    cancelled = True
                    break
                if not delta:
                    continue
                segment = self.feed(acc, delta)
                if not segment.is_empty:
                    await _emit(on_segment, segment)
        finally:
            if cancelled:
                logger.debug("Stream cancelled (%s)", token.reason if token else "")
                final = self.discard(acc)
                aclose = getattr(deltas, "aclose", None)
                if aclose is not None:
                    await aclose()
            else:
                final = self.close(acc)
            await _emit(on_segment, final)
        return acc
