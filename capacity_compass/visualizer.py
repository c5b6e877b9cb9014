"""
Visualizer for Sprint Capacity Compass

Renders capacity summaries and analysis results as text or HTML reports.
The HTML report is what gets handed to the PDF exporter.
"""

from datetime import date, datetime
from html import escape
from typing import Literal, Optional

from .calculator import CapacitySummary, SprintWindow
from .schemas import AnalysisResult


WIDTH = 60


def report_filename(today: Optional[date] = None) -> str:
    """File name for an exported report."""
    today = today or date.today()
    return f"sprint-analysis-report-{today.isoformat()}.pdf"


def _format_date(value: Optional[date]) -> str:
    return value.strftime("%B %d, %Y") if value else "Not set"


def _line(text: str = "") -> str:
    return f"║  {text}".ljust(WIDTH + 1) + "║"


class ASCIICharts:
    """ASCII bars for terminal output."""

    @staticmethod
    def horizontal_bar(
        value: float,
        max_value: float = 100,
        width: int = 20,
        filled_char: str = "█",
        empty_char: str = "░"
    ) -> str:
        """Create a horizontal bar chart."""
        if max_value <= 0:
            return empty_char * width

        filled = int((value / max_value) * width)
        filled = max(0, min(filled, width))
        return filled_char * filled + empty_char * (width - filled)


class TextReporter:
    """Generate text-based reports."""

    @staticmethod
    def capacity_report(window: SprintWindow, summary: CapacitySummary) -> str:
        """Text report of sprint window and resource capacity."""
        lines = []

        lines.append("╔" + "═" * WIDTH + "╗")
        lines.append("║" + "SPRINT CAPACITY REPORT".center(WIDTH) + "║")
        lines.append("╠" + "═" * WIDTH + "╣")

        metrics = summary.metrics
        lines.append(_line(f"Start: {_format_date(window.start_date)}"))
        lines.append(_line(f"End:   {_format_date(window.end_date)}"))
        lines.append(_line(
            f"Calendar: {metrics.total_calendar_days}  Weekend: {metrics.total_weekend_days}  "
            f"Holidays: {summary.public_holidays}  Working: {metrics.base_working_days}"
        ))
        lines.append("║" + "─" * WIDTH + "║")

        max_points = max([r.story_points for r in summary.resources] + [1.0])
        for resource in summary.resources:
            name = resource.name[:15].ljust(15)
            bar = ASCIICharts.horizontal_bar(resource.story_points, max_points, 15)
            lines.append(_line(f"{name} {bar} {resource.story_points:5.1f} pts ({resource.effective_days}d)"))

        lines.append("║" + "─" * WIDTH + "║")
        lines.append(_line(f"Total Available Story Points: {summary.display_total}"))
        lines.append("╚" + "═" * WIDTH + "╝")

        return "\n".join(lines)

    @staticmethod
    def analysis_report(result: AnalysisResult) -> str:
        """Text report of risks and best practices."""
        lines = ["POTENTIAL RISKS"]
        lines.extend(f"  • {risk}" for risk in result.risks)
        if not result.risks:
            lines.append("  (none identified)")

        lines.append("")
        lines.append("BEST PRACTICES")
        lines.extend(f"  • {practice}" for practice in result.best_practices)
        if not result.best_practices:
            lines.append("  (none suggested)")

        return "\n".join(lines)


class HTMLReporter:
    """Generate the HTML sprint report (for preview or PDF export)."""

    @staticmethod
    def _list_items(items: list[str]) -> str:
        return "".join(f"<li>{escape(item)}</li>" for item in items)

    @staticmethod
    def sprint_report(
        window: SprintWindow,
        summary: CapacitySummary,
        result: Optional[AnalysisResult] = None,
        generated_at: Optional[datetime] = None
    ) -> str:
        """Generate HTML report with capacity table and optional analysis."""
        generated_at = generated_at or datetime.now()
        metrics = summary.metrics

        rows = ""
        for resource in summary.resources:
            rows += f"""
                <tr>
                    <td>{escape(resource.name)}</td>
                    <td>{resource.effective_days}</td>
                    <td>{resource.availability * 100:.0f}%</td>
                    <td class="num">{resource.story_points:.1f}</td>
                </tr>"""

        analysis = ""
        if result is not None:
            analysis = f"""
            <section class="analysis">
                <h2>Potential Risks</h2>
                <ul>{HTMLReporter._list_items(result.risks)}</ul>
                <h2>Best Practices</h2>
                <ul>{HTMLReporter._list_items(result.best_practices)}</ul>
            </section>"""

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <title>Sprint Analysis Report</title>
            <style>
                body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 20px; }}
                .report {{ max-width: 800px; margin: 0 auto; }}
                .stats {{ display: grid; grid-template-columns: repeat(4, 1fr); gap: 12px; margin-bottom: 20px; }}
                .stat-value {{ font-size: 24px; font-weight: bold; }}
                .stat-label {{ color: #64748b; font-size: 12px; }}
                table {{ width: 100%; border-collapse: collapse; }}
                th, td {{ text-align: left; padding: 6px; border-bottom: 1px solid #e2e8f0; }}
                .num {{ text-align: right; }}
                .total {{ font-size: 32px; font-weight: bold; text-align: center; margin: 20px 0; }}
            </style>
        </head>
        <body>
            <div class="report">
                <h1>Sprint Analysis Report</h1>
                <p>{_format_date(window.start_date)} to {_format_date(window.end_date)} &middot; Generated {generated_at.strftime('%Y-%m-%d %H:%M')}</p>

                <div class="stats">
                    <div><div class="stat-value">{metrics.total_calendar_days}</div><div class="stat-label">Calendar Days</div></div>
                    <div><div class="stat-value">{metrics.total_weekend_days}</div><div class="stat-label">Weekend Days</div></div>
                    <div><div class="stat-value">{summary.public_holidays}</div><div class="stat-label">Public Holidays</div></div>
                    <div><div class="stat-value">{metrics.base_working_days}</div><div class="stat-label">Base Working Days</div></div>
                </div>

                <table>
                    <thead>
                        <tr><th>Resource</th><th>Effective Days</th><th>Availability</th><th class="num">Story Points</th></tr>
                    </thead>
                    <tbody>{rows}
                    </tbody>
                </table>

                <div class="total">{summary.display_total} story points</div>
                {analysis}
            </div>
        </body>
        </html>
        """


# Main visualization class
class Visualizer:
    """
    Renders sprint reports in multiple formats.

    Usage:
        viz = Visualizer()
        print(viz.report(window, summary, result, format="text"))
        html = viz.report(window, summary, result, format="html")
    """

    def __init__(self):
        self.text = TextReporter()
        self.html = HTMLReporter()

    def report(
        self,
        window: SprintWindow,
        summary: CapacitySummary,
        result: Optional[AnalysisResult] = None,
        format: Literal["text", "html"] = "text"
    ) -> str:
        """Generate a sprint report in the specified format."""
        if format == "text":
            report = self.text.capacity_report(window, summary)
            if result is not None:
                report += "\n\n" + self.text.analysis_report(result)
            return report
        elif format == "html":
            return self.html.sprint_report(window, summary, result)
        else:
            raise ValueError(f"Unknown format: {format}")
