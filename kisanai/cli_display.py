"""Rich display components for the KisanAI CLI.

Live rendering of a streamed chat answer with its thinking channel, and
summary tables for crop analytics, modern farming reports and the market
weather audit.
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from kisanai.schemas.audit import MarketAudit, RiskLevel
from kisanai.schemas.config import StreamConfig
from kisanai.schemas.crop import CropAnalytics
from kisanai.schemas.modern_farming import ModernFarmingAnalysis
from kisanai.schemas.streaming import SegmentedDelta
from kisanai.services.chat import ChatReply, postprocess_answer

# ── Brand Colors ──────────────────────────────────────────────────

BRAND = {
    "leaf": "#3fbf5f",
    "soil": "#b5895a",
    "sun": "#f2c14e",
    "dim": "#7a8a7a",
    "red": "#ff5555",
}

RISK_STYLE = {
    RiskLevel.LOW: "bold green",
    RiskLevel.MEDIUM: "bold yellow",
    RiskLevel.HIGH: "bold red",
}


class ChatStreamDisplay:
    """Renders a streamed answer live, with thinking in a dim panel above it.

    Pass ``on_segment`` to the chat service as the segment callback. The
    visible text is re-cleaned from the raw accumulation on every update, so
    what is on screen always matches what the final answer will look like.
    """

    def __init__(
        self,
        console: Console,
        *,
        show_thinking: bool = True,
        stream_config: StreamConfig | None = None,
    ) -> None:
        self._console = console
        self._show_thinking = show_thinking
        self._stream_config = stream_config or StreamConfig()
        self._visible = ""
        self._thinking = ""
        self._live = Live(console=console, refresh_per_second=8, transient=False)

    def __enter__(self) -> ChatStreamDisplay:
        self._live.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._live.stop()

    def on_segment(self, segment: SegmentedDelta) -> None:
        self._visible += segment.visible_delta
        self._thinking += segment.thinking_delta
        self._live.update(
            self._render(postprocess_answer(self._visible, self._stream_config))
        )

    def finish(self, reply: ChatReply) -> None:
        """Show the final answer text (which may differ when the model only thought)."""
        self._thinking = reply.thinking
        self._live.update(self._render(reply.text, cancelled=reply.cancelled))

    def _render(self, answer: str, *, cancelled: bool = False) -> Group:
        parts = []
        thinking = self._thinking.strip()
        if self._show_thinking and thinking:
            parts.append(Panel(
                Text(thinking, style="dim italic"),
                title="[dim]Thinking[/dim]",
                border_style=BRAND["dim"],
            ))
        if answer:
            parts.append(Markdown(answer))
        if cancelled:
            parts.append(Text("[cancelled]", style=f"bold {BRAND['red']}"))
        return Group(*parts)


def render_crop_summary(console: Console, crop: str, city: str, report: CropAnalytics) -> None:
    """Print the headline figures of a crop analytics report."""
    market = report.market_analysis.summary
    quality = report.quality_metrics
    forecast = report.forecast_metrics.price_projection
    suitability = report.crop_suitability

    table = Table(title=f"{crop} around {city}", show_header=False, show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value")

    table.add_row("Current Price", f"₹{market.current_price:,.0f}/quintal")
    table.add_row("Price Change", f"{market.price_change:+.1f}%")
    table.add_row("Market Sentiment", market.market_sentiment)
    table.add_row("Demand", market.demand_level)
    table.add_row("Quality Score", f"{quality.quality_score:.0f}/100")
    grades = quality.grade_distribution
    table.add_row(
        "Grades (P/S/Sub)",
        f"{grades.premium:.0f}% / {grades.standard:.0f}% / {grades.substandard:.0f}%",
    )
    table.add_row("Export Quality", "[green]yes[/green]" if quality.export_quality else "no")
    table.add_row("Next Month", f"₹{forecast.next_month:,.0f}/quintal")
    table.add_row("Forecast Confidence", f"{forecast.confidence}%")
    table.add_row("Suitability", f"{suitability.overall_score:.0f}/100")
    table.add_row("Soil", f"{report.soil_analysis.soil_type} (pH {report.soil_analysis.ph_level:g})")

    console.print(table)

    if suitability.alternative_crops:
        console.print(
            f"[dim]Alternatives: {', '.join(suitability.alternative_crops)}[/dim]"
        )


def render_modern_summary(
    console: Console, technique: str, report: ModernFarmingAnalysis
) -> None:
    """Print the cost, return and phase plan of a modern farming report."""
    overview = report.technique_analysis.overview
    projections = report.financial_projections

    title = technique if overview.name == "N/A" else overview.name
    table = Table(title=title, show_header=False, show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value")

    table.add_row("Estimated Cost", f"₹{overview.estimated_cost:,.0f}")
    table.add_row("ROI", f"{overview.roi:g}%")
    table.add_row("Time to ROI", overview.time_to_roi)
    table.add_row("Success Rate", f"{overview.success_rate:g}%")
    table.add_row("Risk Level", overview.risk_level)
    table.add_row("Year 1 Profit", f"₹{projections.year1.profit:,.0f} ({projections.year1.break_even})")
    table.add_row("Year 3 Profit", f"₹{projections.year3.profit:,.0f}")
    console.print(table)

    phases = Table(title="Implementation Phases", show_lines=True)
    phases.add_column("Phase", style=f"bold {BRAND['leaf']}")
    phases.add_column("Duration")
    phases.add_column("Cost", justify="right")
    phases.add_column("Priority", justify="center")
    for phase in report.implementation.phases:
        phases.add_row(
            phase.name, phase.duration, f"₹{phase.estimated_cost:,.0f}", phase.priority
        )
    console.print(phases)

    if overview.recommended_crops:
        console.print(f"[dim]Crops: {', '.join(overview.recommended_crops)}[/dim]")


def render_audit(console: Console, audit: MarketAudit) -> None:
    """Print the per-crop weather risk table and the overall analysis."""
    table = Table(title="Crop Weather Audit", show_lines=True)
    table.add_column("Crop", style="bold cyan")
    table.add_column("Risk", justify="center")
    table.add_column("Recommendation")

    for analysis in audit.crop_analyses:
        table.add_row(
            analysis.crop,
            Text(analysis.risk_level.value, style=RISK_STYLE[analysis.risk_level]),
            analysis.recommendation,
        )

    console.print(table)
    console.print()
    console.print(Panel(audit.overall_analysis, title="Overall", border_style=BRAND["leaf"]))
