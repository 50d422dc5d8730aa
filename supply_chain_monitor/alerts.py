"""Critical-alert scan over a rendered report. Logs only; takes no action."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

CRITICAL_PATTERN = re.compile(r"critical|zero-day|widespread|major breach", re.IGNORECASE)


def count_critical_alerts(markdown: str) -> int:
    """Number of report lines mentioning a critical-alert term."""
    return sum(1 for line in markdown.splitlines() if CRITICAL_PATTERN.search(line))


def log_critical_alerts(markdown: str) -> int:
    count = count_critical_alerts(markdown)
    if count > 0:
        logger.warning("Found %d potential critical alerts in today's report", count)
    return count
