"""
Central source configuration for the Supply Chain Security Monitor.

This is the ONLY place where feed URLs and keyword sets should be
defined. Add new sources here; no other file needs to change.

Sources are visited in declaration order: every entry of
``FEED_SOURCES`` first, then every entry of ``API_SOURCES``.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Descriptor types
# ---------------------------------------------------------------------------

class FeedSource(BaseModel):
    """An RSS/Atom feed whose items are kept only when a keyword matches."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    kind: Literal["feed"] = "feed"
    keywords: tuple[str, ...]


class CommitListSource(BaseModel):
    """A GitHub commit-listing endpoint; the latest commits are reported."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    kind: Literal["api-commit-list"] = "api-commit-list"


Source = Union[FeedSource, CommitListSource]


# ---------------------------------------------------------------------------
# Security news feeds
# ---------------------------------------------------------------------------

FEED_SOURCES: list[Source] = [
    FeedSource(
        name="Bleeping Computer Security",
        url="https://www.bleepingcomputer.com/feed/",
        keywords=(
            "supply chain", "dependency", "package", "npm", "pypi",
            "malicious package", "software supply",
        ),
    ),
    FeedSource(
        name="The Hacker News",
        url="https://feeds.feedburner.com/TheHackersNews",
        keywords=(
            "supply chain", "dependency", "package", "malicious", "backdoor",
            "software supply",
        ),
    ),
    FeedSource(
        name="Schneier on Security",
        url="https://www.schneier.com/feed/",
        keywords=("supply chain", "software", "security"),
    ),
    FeedSource(
        name="Krebs on Security",
        url="https://krebsonsecurity.com/feed/",
        keywords=("supply chain", "software", "dependency"),
    ),
    FeedSource(
        name="CISA Advisories",
        url="https://www.cisa.gov/news.xml",
        keywords=("supply chain", "software", "vulnerability"),
    ),
]

# ---------------------------------------------------------------------------
# Threat intelligence and research sources
# Mixed kinds; the runner dispatches on ``kind``.
# ---------------------------------------------------------------------------

API_SOURCES: list[Source] = [
    CommitListSource(
        name="OpenSSF Package Analysis",
        url="https://api.github.com/repos/ossf/package-analysis/commits",
    ),
    FeedSource(
        name="Sonatype Security Research",
        url="https://blog.sonatype.com/rss.xml",
        keywords=("malicious", "supply chain", "vulnerability", "dependency"),
    ),
]

SOURCES: list[Source] = FEED_SOURCES + API_SOURCES


def keyword_vocabulary(sources: list[Source]) -> list[str]:
    """Union of all feed keywords, case-insensitively deduplicated, first-seen order."""
    seen: set[str] = set()
    vocabulary: list[str] = []
    for source in sources:
        if not isinstance(source, FeedSource):
            continue
        for keyword in source.keywords:
            key = keyword.lower()
            if key not in seen:
                seen.add(key)
                vocabulary.append(keyword)
    return vocabulary
