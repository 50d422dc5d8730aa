"""
Central runner for the Supply Chain Security Monitor.

Visits every configured source in registry order, waits between sources
as a rate-limit courtesy, sorts the combined entries newest-first and
groups them by source. :func:`generate_daily_report` then renders and
persists the dated report pair.

Usage::

    from supply_chain_monitor.runner import run_all_fetchers

    result = run_all_fetchers()

Or from the command line::

    python -m supply_chain_monitor.runner --output-dir reports/
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx

from supply_chain_monitor.alerts import log_critical_alerts
from supply_chain_monitor.config.settings import HEADERS, REQUEST_TIMEOUT, Settings
from supply_chain_monitor.config.sources import SOURCES, Source
from supply_chain_monitor.fetchers.github_commits import fetch_commit_list
from supply_chain_monitor.fetchers.rss_feed import fetch_feed
from supply_chain_monitor.models import RunResult, SupplyChainReport
from supply_chain_monitor.notifications.base import ReportNotifier, on_report_ready
from supply_chain_monitor.notifications.telegram import resolve_notifier
from supply_chain_monitor.report.persistence import persist_report, report_path
from supply_chain_monitor.report.renderer import render_report

logger = logging.getLogger(__name__)

RATE_LIMIT_DELAY = 1.0

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fetcher dispatch table
# Maps a descriptor's ``kind`` to the callable that fetches it.
# Add new fetchers here when new source kinds are introduced.
# ---------------------------------------------------------------------------

_FETCHERS: dict[str, Callable[..., list[SupplyChainReport]]] = {
    "feed": fetch_feed,
    "api-commit-list": fetch_commit_list,
}


# ---------------------------------------------------------------------------
# Sorting and grouping
# ---------------------------------------------------------------------------

def _sort_key(report: SupplyChainReport) -> tuple[bool, datetime]:
    # Unparseable dates rank below every valid date.
    if report.published_at is None:
        return (False, _OLDEST)
    return (True, report.published_at)


def sort_reports(reports: list[SupplyChainReport]) -> list[SupplyChainReport]:
    """Newest first; stable for equal dates."""
    return sorted(reports, key=_sort_key, reverse=True)


def group_by_source(
    reports: list[SupplyChainReport],
) -> dict[str, list[SupplyChainReport]]:
    """Bucket *reports* by source name; bucket order is first appearance."""
    buckets: dict[str, list[SupplyChainReport]] = {}
    for report in reports:
        buckets.setdefault(report.source_name, []).append(report)
    return buckets


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def run_all_fetchers(
    sources: Optional[list[Source]] = None,
    client: Optional[httpx.Client] = None,
    delay: float = RATE_LIMIT_DELAY,
    sleep: Callable[[float], Any] = time.sleep,
) -> RunResult:
    """
    Fetch every source sequentially and return the sorted, grouped result.

    Args:
        sources: Registry to run. Defaults to :data:`SOURCES`.
        client:  Shared HTTP client passed to every fetcher.
        delay:   Seconds to wait after each source, whatever its outcome.
        sleep:   Sleep function, replaceable in tests.
    """
    sources = SOURCES if sources is None else sources
    all_reports: list[SupplyChainReport] = []

    for source in sources:
        fetcher_fn = _FETCHERS.get(source.kind)
        if fetcher_fn is None:
            logger.warning("No fetcher registered for kind '%s' (source: %s)", source.kind, source.name)
            continue

        logger.info("Fetching from %s...", source.name)
        try:
            reports = fetcher_fn(source, client=client)
            logger.info("  → %d entry/entries from '%s'", len(reports), source.name)
            all_reports.extend(reports)
        except Exception as exc:
            logger.error("Fetch failed for '%s': %s", source.name, exc)

        if delay > 0:
            sleep(delay)

    ordered = sort_reports(all_reports)
    logger.info("Total entries collected: %d", len(ordered))
    return RunResult(sources=sources, records=ordered, buckets=group_by_source(ordered))


def generate_daily_report(
    date_str: str,
    now: datetime,
    base_dir: Union[str, Path] = ".",
    sources: Optional[list[Source]] = None,
    client: Optional[httpx.Client] = None,
    delay: float = RATE_LIMIT_DELAY,
) -> Path:
    """Run all fetchers, then render and write the report for *date_str*."""
    logger.info("Starting daily report generation for %s", date_str)
    result = run_all_fetchers(sources, client=client, delay=delay)

    target = report_path(base_dir, date_str)
    markdown, summary = render_report(result, date_str, str(target), now)
    path = persist_report(date_str, markdown, summary, base_dir=base_dir)

    logger.info("Found %d relevant reports", result.total)
    log_critical_alerts(markdown)
    return path


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="supply-chain-monitor",
        description="Generate the daily supply chain security report.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory under which the YYYY-MM-DD report folder is created.",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=RATE_LIMIT_DELAY,
        help="Seconds to wait after each source (default: %(default)s).",
    )
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(
    argv: Optional[list[str]] = None,
    notifier: Optional[ReportNotifier] = None,
) -> int:
    """Entry point. Returns the process exit code."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if notifier is None:
        notifier = resolve_notifier(Settings.from_env())

    now = datetime.now(tz=timezone.utc)
    date_str = now.strftime("%Y-%m-%d")

    try:
        with httpx.Client(headers=HEADERS, timeout=REQUEST_TIMEOUT) as client:
            path = generate_daily_report(
                date_str,
                now,
                base_dir=args.output_dir,
                client=client,
                delay=args.delay,
            )
    except Exception:
        logger.exception("Daily report generation failed")
        return 1

    logger.info("Daily report generation completed successfully")
    on_report_ready(notifier, path)
    logger.info("All tasks completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
