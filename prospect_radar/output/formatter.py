"""Output formatting for prospecting runs.

Writes the relevance matrix and derived opportunities both as JSON
(structured) and Markdown (human-readable).
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..matrix.models import RelevanceRow
from ..matrix.views import NewsGroup
from ..opportunities.models import SelectedOpportunity
from ..utils.cost_tracker import PipelineCosts


@dataclass
class RunReport:
    """Everything one CLI run produced."""

    matrix: list[RelevanceRow]
    groups: list[NewsGroup]
    white_space: list[str]
    opportunities: list[SelectedOpportunity]
    oracle_name: str
    news_count: int = 0
    costs: Optional[PipelineCosts] = None
    run_timestamp: datetime = field(default_factory=datetime.now)


class OutputFormatter:
    """Formats run output in multiple formats."""

    def __init__(self, output_dir: Path):
        """
        Initialize formatter.

        Args:
            output_dir: Base directory for output files
        """
        self.output_dir = output_dir

    def save_run(self, report: RunReport) -> Path:
        """
        Save complete run output.

        Creates:
        - matrix.json: Flat relevance matrix
        - opportunities.json: White space and new opportunities
        - report.md: Human-readable summary grouped by news

        Returns:
            Path to run directory
        """
        timestamp = report.run_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
        run_dir = self.output_dir / timestamp
        run_dir.mkdir(parents=True, exist_ok=True)

        (run_dir / "matrix.json").write_text(
            json.dumps(self.format_matrix_json(report), indent=2, ensure_ascii=False, default=str)
        )
        (run_dir / "opportunities.json").write_text(
            json.dumps(
                self.format_opportunities_json(report), indent=2, ensure_ascii=False, default=str
            )
        )
        (run_dir / "report.md").write_text(self.format_markdown(report))

        return run_dir

    def format_matrix_json(self, report: RunReport) -> dict:
        return {
            "generated_at": report.run_timestamp.isoformat(),
            "oracle": report.oracle_name,
            "news_count": report.news_count,
            "rows": [row.to_dict() for row in report.matrix],
            "costs": report.costs.to_dict() if report.costs else None,
        }

    def format_opportunities_json(self, report: RunReport) -> dict:
        return {
            "white_space": report.white_space,
            "new_opportunities": [o.to_dict() for o in report.opportunities],
        }

    def format_markdown(self, report: RunReport) -> str:
        """Format the run as human-readable markdown."""
        lines = [
            f"# Prospecting run {report.run_timestamp.strftime('%d/%m/%Y %H:%M')}",
            "",
            f"**Oracle:** {report.oracle_name}  ",
            f"**News analyzed:** {report.news_count}  ",
            f"**Matrix rows:** {len(report.matrix)}",
            "",
            "## White space",
            "",
        ]
        if report.white_space:
            lines.extend(f"- {offering}" for offering in report.white_space)
        else:
            lines.append("_No uncovered offering mentioned in the news._")

        lines.extend(["", "## News", ""])
        for group in report.groups:
            marker = " (high potential)" if group.high_potential else ""
            lines.append(f"### {group.news}{marker}")
            lines.append("")
            lines.append(f"*{group.news_date} | {group.news_category}*")
            if group.news_link:
                lines.append(f"[Source]({group.news_link})")
            lines.append("")
            lines.append("| Service line | Offer | Score | Engaged |")
            lines.append("|--------------|-------|-------|---------|")
            for offer in group.offers:
                engaged = "yes" if offer.has_opportunities else "no"
                lines.append(
                    f"| {offer.category} | {offer.detail} | {offer.relevance_score}/3 | {engaged} |"
                )
            lines.append("")

        if report.costs and report.costs.steps:
            lines.append(f"---\n\n*LLM cost: ${report.costs.total_cost():.4f}*")

        return "\n".join(lines) + "\n"
