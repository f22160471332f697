"""Tests for kisanai.streaming.segmenter — thinking/visible stream splitting."""

from __future__ import annotations

import pytest

from kisanai.errors import TransportFailure
from kisanai.schemas.config import StreamConfig
from kisanai.schemas.streaming import SegmentedDelta
from kisanai.streaming.cancellation import CancellationToken
from kisanai.streaming.segmenter import StreamSegmenter, _held_prefix_length

MARKED_TEXTS = [
    "hello world",
    "A<think>B</think>C",
    "Hello <think>reasoning here</think> world",
    "<think>only thinking</think>",
    "<think>first</think> middle <think>second</think> end",
    "less < than and <thin but not a marker",
    "text with </think> stray end marker",
    "<think>nested <think> start inside</think>after",
]


# ── Helpers ───────────────────────────────────────────────────


def _segment_all(deltas: list[str], segmenter: StreamSegmenter | None = None):
    segmenter = segmenter or StreamSegmenter()
    acc = segmenter.open()
    segments = [segmenter.feed(acc, d) for d in deltas]
    segments.append(segmenter.close(acc))
    return acc, segments


async def _agen(items, token: CancellationToken | None = None, cancel_after: int = -1):
    for i, item in enumerate(items):
        if i == cancel_after and token is not None:
            token.cancel()
        yield item


# ── Held prefix ───────────────────────────────────────────────


class TestHeldPrefixLength:
    def test_no_prefix(self):
        assert _held_prefix_length("hello", 0, "<think>") == 0

    def test_partial_marker(self):
        assert _held_prefix_length("hello <th", 0, "<think>") == 3

    def test_single_char(self):
        assert _held_prefix_length("abc<", 0, "<think>") == 1

    def test_longest_proper_prefix(self):
        assert _held_prefix_length("<think", 0, "<think>") == 6

    def test_respects_start(self):
        assert _held_prefix_length("<th", 2, "<think>") == 0


# ── feed / close ──────────────────────────────────────────────


class TestFeed:
    def test_no_markers(self):
        acc, _ = _segment_all(["hello world"])
        assert acc.visible_so_far == "hello world"
        assert acc.thinking_so_far == ""

    def test_single_chunk_with_markers(self):
        acc, _ = _segment_all(["A<think>B</think>C"])
        assert acc.visible_so_far == "AC"
        assert acc.thinking_so_far == "B"

    def test_markers_split_across_deltas(self):
        acc, _ = _segment_all(["Hello <th", "ink>reasoning here</thi", "nk> world"])
        assert acc.visible_so_far == "Hello  world"
        assert acc.thinking_so_far == "reasoning here"

    def test_partial_marker_is_held_back(self):
        segmenter = StreamSegmenter()
        acc = segmenter.open()
        segment = segmenter.feed(acc, "Hello <th")
        assert segment.visible_delta == "Hello "
        assert acc.carry_over == "<th"

    def test_held_text_released_when_not_a_marker(self):
        segmenter = StreamSegmenter()
        acc = segmenter.open()
        segmenter.feed(acc, "x <t")
        segment = segmenter.feed(acc, "able")
        assert segment.visible_delta == "<table"
        assert acc.carry_over == ""

    def test_stray_end_marker_stays_visible(self):
        acc, _ = _segment_all(["a </think> b"])
        assert acc.visible_so_far == "a </think> b"

    def test_feed_after_close_raises(self):
        segmenter = StreamSegmenter()
        acc = segmenter.open()
        segmenter.close(acc)
        with pytest.raises(RuntimeError):
            segmenter.feed(acc, "late")

    def test_custom_markers(self):
        segmenter = StreamSegmenter(StreamConfig(start_marker="[[", end_marker="]]"))
        acc, _ = _segment_all(["see [", "[hidden]", "] shown"], segmenter)
        assert acc.visible_so_far == "see  shown"
        assert acc.thinking_so_far == "hidden"


class TestSplitBoundaries:
    @pytest.mark.parametrize("text", MARKED_TEXTS)
    def test_every_two_way_split_matches_single_delta(self, text):
        expected, _ = _segment_all([text])
        for i in range(len(text) + 1):
            acc, _ = _segment_all([text[:i], text[i:]])
            assert (acc.visible_so_far, acc.thinking_so_far) == (
                expected.visible_so_far, expected.thinking_so_far,
            ), f"split at {i}"

    @pytest.mark.parametrize("text", MARKED_TEXTS)
    def test_one_char_per_delta_matches_single_delta(self, text):
        expected, _ = _segment_all([text])
        acc, _ = _segment_all(list(text))
        assert acc.visible_so_far == expected.visible_so_far
        assert acc.thinking_so_far == expected.thinking_so_far

    def test_emitted_deltas_sum_to_accumulator(self):
        text = "Hello <think>reasoning here</think> world"
        acc, segments = _segment_all(list(text))
        assert "".join(s.visible_delta for s in segments) == acc.visible_so_far
        assert "".join(s.thinking_delta for s in segments) == acc.thinking_so_far


class TestClose:
    def test_done_emitted(self):
        _, segments = _segment_all(["abc"])
        assert segments[-1].done is True
        assert [s.done for s in segments].count(True) == 1

    def test_unterminated_annotation_goes_to_thinking(self):
        acc, segments = _segment_all(["answer <think>still reasoning"])
        assert acc.visible_so_far == "answer "
        assert acc.thinking_so_far == "still reasoning"
        assert segments[-1].done

    def test_carry_over_flushed_to_visible(self):
        acc, segments = _segment_all(["ends with <thi"])
        assert acc.visible_so_far == "ends with <thi"
        assert segments[-1].visible_delta == "<thi"

    def test_carry_over_flushed_to_thinking_when_inside(self):
        acc, _ = _segment_all(["<think>almost closed </thi"])
        assert acc.thinking_so_far == "almost closed </thi"

    def test_close_twice_raises(self):
        segmenter = StreamSegmenter()
        acc = segmenter.open()
        segmenter.close(acc)
        with pytest.raises(RuntimeError):
            segmenter.close(acc)


class TestDiscard:
    def test_discard_drops_carry_over(self):
        segmenter = StreamSegmenter()
        acc = segmenter.open()
        segmenter.feed(acc, "visible <thi")
        final = segmenter.discard(acc)
        assert final == SegmentedDelta(done=True)
        assert acc.visible_so_far == "visible "
        assert acc.carry_over == ""


# ── run() ─────────────────────────────────────────────────────


class TestRun:
    @pytest.mark.asyncio
    async def test_run_collects_segments(self):
        received: list[SegmentedDelta] = []
        acc = await StreamSegmenter().run(
            _agen(["Hello <th", "ink>reasoning here</thi", "nk> world"]),
            received.append,
        )
        assert acc.visible_so_far == "Hello  world"
        assert acc.thinking_so_far == "reasoning here"
        assert received[-1].done
        assert sum(s.done for s in received) == 1
        assert all(not s.is_empty for s in received[:-1])

    @pytest.mark.asyncio
    async def test_async_callback_awaited(self):
        received: list[SegmentedDelta] = []

        async def on_segment(segment):
            received.append(segment)

        await StreamSegmenter().run(_agen(["a", "b"]), on_segment)
        assert "".join(s.visible_delta for s in received) == "ab"

    @pytest.mark.asyncio
    async def test_empty_deltas_skipped(self):
        received: list[SegmentedDelta] = []
        await StreamSegmenter().run(_agen(["", "x", ""]), received.append)
        assert [s.visible_delta for s in received] == ["x", ""]

    @pytest.mark.asyncio
    async def test_cancellation_stops_and_emits_done_once(self):
        token = CancellationToken()
        received: list[SegmentedDelta] = []
        acc = await StreamSegmenter().run(
            _agen(["one ", "two <th", "ink>three", "four"], token, cancel_after=2),
            received.append,
            token,
        )
        assert acc.visible_so_far == "one two "
        assert acc.thinking_so_far == ""
        assert received[-1] == SegmentedDelta(done=True)
        assert sum(s.done for s in received) == 1
        assert acc.closed

    @pytest.mark.asyncio
    async def test_cancelled_before_first_delta(self):
        token = CancellationToken()
        token.cancel()
        received: list[SegmentedDelta] = []
        acc = await StreamSegmenter().run(_agen(["never"]), received.append, token)
        assert acc.visible_so_far == ""
        assert received == [SegmentedDelta(done=True)]

    @pytest.mark.asyncio
    async def test_source_error_still_emits_done(self):
        async def failing():
            yield "partial <think>why"
            raise TransportFailure("stream interrupted")

        received: list[SegmentedDelta] = []
        with pytest.raises(TransportFailure):
            await StreamSegmenter().run(failing(), received.append)

        assert received[-1].done
        assert sum(s.done for s in received) == 1
        assert "".join(s.thinking_delta for s in received) == "why"
