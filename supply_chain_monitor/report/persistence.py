"""Writes the rendered report pair under a ``YYYY-MM-DD`` directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from supply_chain_monitor.models import ReportSummary

logger = logging.getLogger(__name__)

REPORT_FILENAME = "supply-chain-report.md"
SUMMARY_FILENAME = "summary.json"


def report_path(base_dir: Union[str, Path], date_str: str) -> Path:
    return Path(base_dir) / date_str / REPORT_FILENAME


def persist_report(
    date_str: str,
    markdown: str,
    summary: ReportSummary,
    base_dir: Union[str, Path] = ".",
) -> Path:
    """
    Write ``<date_str>/supply-chain-report.md`` and ``<date_str>/summary.json``.

    Both files are overwritten if they already exist. ``OSError`` from
    directory creation or writing propagates to the caller.

    Returns:
        Path of the markdown report.
    """
    folder = Path(base_dir) / date_str
    folder.mkdir(parents=True, exist_ok=True)

    markdown_path = folder / REPORT_FILENAME
    markdown_path.write_text(markdown, encoding="utf-8")
    logger.info("Report generated: %s", markdown_path)

    summary_path = folder / SUMMARY_FILENAME
    summary_path.write_text(summary.to_json(), encoding="utf-8")
    logger.info("Summary written: %s", summary_path)

    return markdown_path
