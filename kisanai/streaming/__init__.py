"""Streamed output segmentation and cancellation."""

from kisanai.streaming.cancellation import CancellationToken
from kisanai.streaming.segmenter import StreamSegmenter

__all__ = ["CancellationToken", "StreamSegmenter"]
