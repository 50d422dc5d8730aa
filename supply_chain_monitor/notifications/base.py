"""
Notification boundary.

The runner receives a :class:`ReportNotifier` at startup and calls
:func:`on_report_ready` once the report is on disk. Notifier failures are
logged and never fail the run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Raised by a notifier when the report could not be delivered."""


class ReportNotifier(Protocol):
    def send_report(self, report_path: Path) -> None: ...


class NullNotifier:
    """Used when no notification channel is configured."""

    def send_report(self, report_path: Path) -> None:
        logger.debug("No notifier configured; skipping %s", report_path)


def on_report_ready(notifier: ReportNotifier, report_path: Path) -> bool:
    """Forward *report_path* to *notifier*. Returns False if delivery failed."""
    try:
        notifier.send_report(report_path)
    except Exception as exc:
        logger.error("Report notification failed: %s", exc)
        return False
    return True
