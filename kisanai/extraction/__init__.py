"""JSON recovery from free-form model output."""

from kisanai.extraction.extractor import ExtractionOutcome, FailurePolicy, StructuredExtractor

__all__ = ["ExtractionOutcome", "FailurePolicy", "StructuredExtractor"]
