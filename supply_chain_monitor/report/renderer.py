"""
Markdown renderer for the daily supply chain report.

:func:`render_report` is a pure function of its arguments; the "Last
Updated" timestamp comes from the explicit *now* parameter so identical
inputs always produce identical output.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from supply_chain_monitor.config.sources import keyword_vocabulary
from supply_chain_monitor.models import ReportSummary, RunResult, SupplyChainReport

logger = logging.getLogger(__name__)

REPORT_TITLE = "# Supply Chain Security Daily Report"
NO_REPORTS_HEADING = "## No Relevant Reports Found Today"


def format_published(report: SupplyChainReport) -> str:
    """``M/D/YYYY`` in UTC, or the raw source value when it did not parse."""
    if report.published_at is None:
        return report.published or "Unknown"
    published = report.published_at.astimezone(timezone.utc)
    return f"{published.month}/{published.day}/{published.year}"


def format_timestamp(now: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _render_bucket(source_name: str, reports: list[SupplyChainReport]) -> list[str]:
    lines = [f"## {source_name}\n\n"]
    for index, report in enumerate(reports, start=1):
        lines.append(f"### {index}. {report.title}\n\n")
        lines.append(f"**Link:** [{report.link}]({report.link})\n\n")
        lines.append(f"**Published:** {format_published(report)}\n\n")
        summary = report.summary.replace("\n", " ")
        lines.append(f"**Summary:** {summary}\n\n")
        lines.append("---\n\n")
    return lines


def render_report(
    result: RunResult,
    date_str: str,
    report_path: str,
    now: datetime,
) -> tuple[str, ReportSummary]:
    """
    Render *result* as the daily markdown report plus its summary record.

    Args:
        result:      Sorted and grouped output of the runner.
        date_str:    Report date, ``YYYY-MM-DD``.
        report_path: Where the markdown will be written; echoed in the summary.
        now:         Render time for the "Last Updated" footer.

    Returns:
        ``(markdown, summary)``.
    """
    parts: list[str] = [
        f"{REPORT_TITLE}\n",
        f"**Date:** {date_str}\n",
        f"**Total Reports Found:** {result.total}\n\n",
    ]

    if result.total == 0:
        parts.append(f"{NO_REPORTS_HEADING}\n\n")
        parts.append(
            "No supply chain security incidents or reports were detected "
            "from monitored sources today.\n"
        )
    else:
        parts.append("## Summary\n\n")
        parts.append(
            "This automated report aggregates supply chain security-related "
            "news, vulnerabilities, and research from multiple trusted sources.\n\n"
        )
        for source_name, reports in result.buckets.items():
            parts.extend(_render_bucket(source_name, reports))

    parts.append("## About This Report\n\n")
    parts.append(
        "This report is automatically generated daily by monitoring various "
        "cybersecurity news sources, RSS feeds, and research repositories for "
        "supply chain security-related content.\n\n"
    )
    parts.append("**Monitored Sources:**\n")
    parts.extend(f"- {source.name}\n" for source in result.sources)
    parts.append(
        f"\n**Keywords Monitored:** {', '.join(keyword_vocabulary(result.sources))}\n\n"
    )
    parts.append(f"**Last Updated:** {format_timestamp(now)}\n")

    summary = ReportSummary(
        date=date_str,
        total_reports=result.total,
        sources=result.source_names if result.total > 0 else [],
        report_path=report_path,
    )
    logger.debug("Rendered report for %s with %d entries", date_str, result.total)
    return "".join(parts), summary
