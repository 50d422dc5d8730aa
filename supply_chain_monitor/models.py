"""
Shared data model for the Supply Chain Security Monitor.

Every fetcher maps its raw items onto :class:`SupplyChainReport`; the
runner collects them into a :class:`RunResult`, and the renderer emits a
:class:`ReportSummary` next to the markdown document.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from supply_chain_monitor.config.sources import Source

SUMMARY_LENGTH = 200


class SupplyChainReport(BaseModel):
    """A single relevant item, normalised across feed and API sources."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    published: Optional[str] = None              # Raw date string as served.
    published_at: Optional[datetime] = None      # UTC; None when unparseable.
    summary: str
    source_name: str


class RunResult(BaseModel):
    """Outcome of one pass over the source registry."""

    sources: list[Source]
    records: list[SupplyChainReport] = Field(default_factory=list)
    buckets: dict[str, list[SupplyChainReport]] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def source_names(self) -> list[str]:
        """Names of the sources that yielded at least one record, in bucket order."""
        return list(self.buckets)


class ReportSummary(BaseModel):
    """Machine-readable companion to the markdown report (``summary.json``)."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    total_reports: int = Field(alias="totalReports")
    sources: list[str] = Field(default_factory=list)
    report_path: str = Field(alias="reportPath")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse a feed or API date string into a timezone-aware UTC datetime.

    Tries RFC 2822 (RSS ``pubDate``) first, then ISO 8601 (Atom, GitHub).
    Naive values are assumed to be UTC. Returns ``None`` when *raw* is
    empty or matches neither format.
    """
    if not raw:
        return None
    raw = raw.strip()

    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
