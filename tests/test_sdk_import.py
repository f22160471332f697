"""Smoke test: verify the public package API imports without error."""

import sys


def test_pipeline_import():
    from kisanai import (
        CancellationToken,
        FailurePolicy,
        ResponseNormalizer,
        StreamSegmenter,
        StructuredExtractor,
    )
    assert CancellationToken is not None
    assert FailurePolicy is not None
    assert ResponseNormalizer is not None
    assert StreamSegmenter is not None
    assert StructuredExtractor is not None


def test_errors_import():
    from kisanai import KisanError, MalformedOutput, NotApplicable, TransportFailure
    assert issubclass(MalformedOutput, KisanError)
    assert issubclass(NotApplicable, KisanError)
    assert issubclass(TransportFailure, KisanError)


def test_providers_import():
    from kisanai.providers import LiteLLMProvider, ModelProvider
    assert issubclass(LiteLLMProvider, ModelProvider)


def test_version():
    from kisanai import __version__
    assert __version__ == "0.4.0"


def test_no_cli_imports():
    """kisanai must not import typer, rich, or click at module level."""
    cli_packages = {"typer", "rich", "click"}
    pre_existing = cli_packages & set(sys.modules.keys())

    import kisanai  # noqa: F401

    newly_loaded = (cli_packages & set(sys.modules.keys())) - pre_existing
    assert not newly_loaded, f"kisanai imported CLI packages: {newly_loaded}"
