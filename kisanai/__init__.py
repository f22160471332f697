"""KisanAI — turning raw model output into trustworthy farming data."""

__version__ = "0.4.0"

from .errors import KisanError, MalformedOutput, NotApplicable, TransportFailure
from .extraction import FailurePolicy, StructuredExtractor
from .normalization import ResponseNormalizer
from .streaming import CancellationToken, StreamSegmenter

__all__ = [
    "CancellationToken",
    "FailurePolicy",
    "KisanError",
    "MalformedOutput",
    "NotApplicable",
    "ResponseNormalizer",
    "StreamSegmenter",
    "StructuredExtractor",
    "TransportFailure",
]
