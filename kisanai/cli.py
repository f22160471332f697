"""KisanAI CLI: Typer + Rich terminal interface.

Commands: chat, extract, vary, crop, modern, audit, config.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import signal
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from kisanai import __version__
from kisanai.errors import KisanError, NotApplicable
from kisanai.extraction.extractor import StructuredExtractor
from kisanai.keys import PROVIDERS, load_keys_env
from kisanai.normalization.normalizer import SCHEMAS, ResponseNormalizer
from kisanai.providers.registry import config_dir, get_model, load_models, load_settings
from kisanai.schemas.audit import MarketData, WeatherData
from kisanai.schemas.config import ModelConfig, Settings
from kisanai.schemas.modern_farming import Budget
from kisanai.streaming.cancellation import CancellationToken
from kisanai.variation import (
    FieldFamily,
    InsightMode,
    adjust_display_value,
    variation_factor,
)

# Load API keys from ~/.kisanai/keys.env and .env on startup
load_keys_env()

console = Console()
err_console = Console(stderr=True)

# ── App and sub-apps ─────────────────────────────────────────────

app = typer.Typer(
    name="kisanai",
    help="Agricultural assistant pipeline: streaming chat, JSON recovery and market figures.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    name="config",
    help="Show pipeline configuration.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


# ── Version callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"kisanai {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logs from the pipeline.",
    ),
) -> None:
    """KisanAI: farming answers, crop analytics and market figures."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
        # LiteLLM is chatty at debug level
        logging.getLogger("LiteLLM").setLevel(logging.WARNING)


# ── Helpers ──────────────────────────────────────────────────────


def _load_settings() -> Settings:
    """Load pipeline settings, exit on error."""
    try:
        return load_settings()
    except (FileNotFoundError, ValidationError) as e:
        console.print(f"[red]Error loading settings:[/red] {e}")
        raise typer.Exit(1) from None


def _load_model(key: str) -> ModelConfig:
    """Look up a model config and check its API key, exit on error."""
    try:
        cfg = get_model(load_models(), key)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading models:[/red] {e}")
        raise typer.Exit(1) from None

    if not os.environ.get(cfg.api_key_env):
        console.print(
            f"[red]API key not set:[/red] {cfg.api_key_env}\n"
            f"Set it with: export {cfg.api_key_env}=your-key"
        )
        raise typer.Exit(1) from None
    return cfg


def _provider(key: str):
    from kisanai.providers.litellm_provider import LiteLLMProvider

    return LiteLLMProvider(_load_model(key))


def _read_text(path: Path, label: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Cannot read {label}:[/red] {e}")
        raise typer.Exit(1) from None


def _read_json(path: Path, label: str) -> object:
    try:
        return json.loads(_read_text(path, label))
    except json.JSONDecodeError as e:
        console.print(f"[red]Cannot read {label}:[/red] {e}")
        raise typer.Exit(1) from None


# ── kisanai chat ─────────────────────────────────────────────────


@app.command()
def chat(
    question: str = typer.Argument(..., help="Question for the farming assistant"),
    thinking: bool = typer.Option(
        True, "--thinking/--no-thinking",
        help="Show the model's reasoning in a panel above the answer.",
    ),
    location: str = typer.Option(None, "--location", "-l", help="Farmer's district or city"),
    language: str = typer.Option("en", "--language", help="Reply language code"),
    model: str = typer.Option("chat", "--model", "-m", help="Model registry key"),
) -> None:
    """Stream an answer from the farming assistant. Ctrl+C stops the stream."""
    from kisanai.cli_display import ChatStreamDisplay
    from kisanai.services.chat import stream_answer

    settings = _load_settings()
    provider = _provider(model)
    token = CancellationToken()

    async def _run():
        loop = asyncio.get_running_loop()
        # Signal handlers are unavailable on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signal.SIGINT, token.cancel, "interrupted")
        try:
            with ChatStreamDisplay(
                console, show_thinking=thinking, stream_config=settings.stream
            ) as display:
                reply = await stream_answer(
                    provider,
                    question,
                    on_segment=display.on_segment,
                    token=token,
                    location=location,
                    language=language,
                    settings=settings,
                )
                display.finish(reply)
        finally:
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(signal.SIGINT)

    try:
        asyncio.run(_run())
    except KisanError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None


# ── kisanai extract ──────────────────────────────────────────────


@app.command()
def extract(
    file: Path = typer.Argument(..., help="Text file holding raw model output", exists=True),
    schema: str = typer.Option(..., "--schema", "-s", help="Registered schema name"),
    strict: bool = typer.Option(
        False, "--strict",
        help="Skip the best-effort repairs (quotes, bare keys, whitespace).",
    ),
) -> None:
    """Recover JSON from a model answer and fill it into a canonical record."""
    if schema not in SCHEMAS:
        console.print(f"[red]Unknown schema:[/red] '{schema}'")
        console.print(f"[dim]Available: {', '.join(sorted(SCHEMAS))}[/dim]")
        raise typer.Exit(1) from None

    settings = _load_settings()
    config = settings.extraction
    if strict:
        config = config.model_copy(update={"best_effort_repairs": False})

    outcome = StructuredExtractor(config=config).try_extract(_read_text(file, "model output"))
    if not outcome.ok:
        console.print(f"[red]{outcome.error}[/red]")
        raise typer.Exit(1) from None
    if outcome.repairs:
        err_console.print(f"[dim]Repairs applied: {', '.join(outcome.repairs)}[/dim]")

    record = ResponseNormalizer(schema).normalize(outcome.value)
    console.print_json(data=record.model_dump(mode="json", by_alias=True))


# ── kisanai vary ─────────────────────────────────────────────────


@app.command()
def vary(
    identifier: str = typer.Argument(..., help="Crop-market identifier or any seed string"),
    mode: InsightMode = typer.Option(InsightMode.ESTIMATE, "--mode", help="Insight mode"),
    family: FieldFamily = typer.Option(FieldFamily.COUNT, "--family", help="Field family"),
    value: str = typer.Option(
        None, "--value",
        help="Figure to adjust, e.g. '₹2,300/quintal', '₹12.5 Cr' or 340.",
    ),
) -> None:
    """Print the deterministic variation factor for an identifier."""
    factor = variation_factor(identifier, mode, family)
    console.print(f"[bold]{factor:.6f}[/bold]  [dim]({mode.value}, {family.value})[/dim]")

    if value is not None:
        figure: str | float = value
        with contextlib.suppress(ValueError):
            figure = float(value)
        console.print(adjust_display_value(figure, mode, crop=identifier))


# ── kisanai crop ─────────────────────────────────────────────────


@app.command()
def crop(
    city: str = typer.Argument(..., help="City or district"),
    state: str = typer.Argument(..., help="State"),
    crop_name: str = typer.Argument(..., metavar="CROP", help="Crop name"),
    date_range: str = typer.Option(None, "--date-range", help="Period to cover"),
    as_json: bool = typer.Option(False, "--json", help="Print the full record as JSON"),
) -> None:
    """Run crop analytics for one crop and print a summary."""
    from kisanai.cli_display import render_crop_summary
    from kisanai.services.crop import get_crop_analytics

    settings = _load_settings()
    provider = _provider("analytics")

    try:
        with console.status("[bold blue]Analyzing market and soil...", spinner="dots"):
            report = asyncio.run(get_crop_analytics(
                provider, city, state, crop_name,
                date_range=date_range, settings=settings,
            ))
    except NotApplicable as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(2) from None
    except KisanError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None

    if as_json:
        console.print_json(data=report.model_dump(mode="json", by_alias=True))
    else:
        render_crop_summary(console, crop_name, city, report)


# ── kisanai modern ───────────────────────────────────────────────


@app.command()
def modern(
    technique: str = typer.Argument(..., help="Technique, e.g. 'hydroponic farming'"),
    farm_size: str = typer.Argument(..., help="Farm size in acres"),
    budget: Budget = typer.Option(Budget.MEDIUM, "--budget", "-b", help="Budget range"),
    as_json: bool = typer.Option(False, "--json", help="Print the full record as JSON"),
) -> None:
    """Assess a modern farming technique for a farm size and budget."""
    from kisanai.cli_display import render_modern_summary
    from kisanai.services.modern_farming import get_modern_farming_analysis

    settings = _load_settings()
    provider = _provider("analytics")

    try:
        with console.status("[bold blue]Costing the technique...", spinner="dots"):
            report = asyncio.run(get_modern_farming_analysis(
                provider, technique, farm_size, budget, settings=settings,
            ))
    except NotApplicable as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(2) from None
    except KisanError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None

    if as_json:
        console.print_json(data=report.model_dump(mode="json", by_alias=True))
    else:
        render_modern_summary(console, technique, report)


# ── kisanai audit ────────────────────────────────────────────────


@app.command()
def audit(
    market_file: Path = typer.Argument(..., help="Market data JSON file", exists=True),
    weather_file: Path = typer.Argument(..., help="Current weather JSON file", exists=True),
) -> None:
    """Rate today's weather risk for the city's most traded crops."""
    from kisanai.cli_display import render_audit
    from kisanai.services.audit import audit_market

    try:
        market_data = MarketData.model_validate(_read_json(market_file, "market data"))
        weather = WeatherData.model_validate(_read_json(weather_file, "weather data"))
    except ValidationError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(1) from None

    render_audit(console, audit_market(market_data, weather))


# ── kisanai config ───────────────────────────────────────────────


@config_app.command("show")
def config_show() -> None:
    """Show pipeline settings and the model registry."""
    settings = _load_settings()

    table = Table(title="Pipeline Settings", show_header=False, show_lines=True)
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("Thinking Markers", f"{settings.stream.start_marker} … {settings.stream.end_marker}")
    table.add_row("Best-effort Repairs", str(settings.extraction.best_effort_repairs))
    table.add_row("Log Preview", f"{settings.extraction.preview_chars} chars")
    table.add_row("Timeout", f"{settings.service.timeout}s")
    table.add_row("Max Retries", str(settings.service.max_retries))
    table.add_row("Retry Backoff", f"{settings.service.retry_backoff:.1f}s")
    console.print(table)

    try:
        registry = load_models()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading models:[/red] {e}")
        raise typer.Exit(1) from None

    models_table = Table(title="Models")
    models_table.add_column("Key", style="bold cyan")
    models_table.add_column("Display Name")
    models_table.add_column("Model ID", style="dim")
    models_table.add_column("Capabilities")
    models_table.add_column("API Key")

    for key, cfg in sorted(registry.items()):
        caps = [name for name, on in (
            ("vision", cfg.supports_vision),
            ("thinking", cfg.supports_thinking),
        ) if on]
        key_status = "[green]set[/green]" if os.environ.get(cfg.api_key_env) else "[red]not set[/red]"
        models_table.add_row(
            key, cfg.display_name, cfg.model, ", ".join(caps) or "none", key_status
        )

    console.print()
    console.print(models_table)


@config_app.command("path")
def config_path() -> None:
    """Show configuration and key file locations."""
    from kisanai.keys import KEYS_FILE

    table = Table(title="Configuration Paths", show_header=False)
    table.add_column("Config", style="bold")
    table.add_column("Path")
    table.add_column("Status")

    for label, path in (
        ("Models", config_dir() / "models.toml"),
        ("Defaults", config_dir() / "defaults.toml"),
        ("API Keys", KEYS_FILE),
    ):
        status = "[green]found[/green]" if path.exists() else "[dim]missing[/dim]"
        table.add_row(label, str(path), status)

    console.print(table)
    console.print(
        f"[dim]Keys read from: {', '.join(env for env, _, _ in PROVIDERS)}[/dim]"
    )
