from datetime import datetime, timezone
from typing import Optional

from supply_chain_monitor.models import SupplyChainReport


def make_report(
    title: str,
    source_name: str,
    published_at: Optional[datetime] = None,
    published: Optional[str] = None,
    summary: str = "Summary text",
) -> SupplyChainReport:
    return SupplyChainReport(
        title=title,
        link=f"https://example.com/{title.replace(' ', '-').lower()}",
        published=published,
        published_at=published_at,
        summary=summary,
        source_name=source_name,
    )


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)
