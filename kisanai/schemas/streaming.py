"""Streaming schemas for segmented token delivery.

SegmentedDelta is what stream consumers receive; SegmentedAccumulator is
the per-call state the segmenter mutates while a stream is open.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class SegmentedDelta(BaseModel):
    """One unit of segmented output for a stream consumer."""

    visible_delta: str = Field(default="", description="New text for the visible answer")
    thinking_delta: str = Field(default="", description="New text for the thinking panel")
    done: bool = Field(default=False, description="True on the single terminal delta")

    @property
    def is_empty(self) -> bool:
        return not self.visible_delta and not self.thinking_delta


@dataclass
class SegmentedAccumulator:
    """Mutable state for one streamed exchange."""

    visible_so_far: str = ""
    thinking_so_far: str = ""
    inside_annotation: bool = False
    carry_over: str = ""
    closed: bool = False
