"""
Keyword-filtered RSS/Atom fetcher.

Retrieves one feed from the source registry, keeps the items whose title
or snippet mentions one of the source's keywords, and maps at most
:data:`MAX_ITEMS` of them onto :class:`SupplyChainReport`.

Usage::

    from supply_chain_monitor.config.sources import FEED_SOURCES
    from supply_chain_monitor.fetchers.rss_feed import fetch_feed

    reports = fetch_feed(FEED_SOURCES[0])
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import feedparser
import httpx
from bs4 import BeautifulSoup

from supply_chain_monitor.config.settings import HEADERS, REQUEST_TIMEOUT
from supply_chain_monitor.config.sources import FeedSource
from supply_chain_monitor.models import (
    SUMMARY_LENGTH,
    SupplyChainReport,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

MAX_ITEMS = 5
NO_SUMMARY = "No summary available"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _strip_html(raw: str) -> str:
    """Remove HTML tags and normalise whitespace."""
    text = BeautifulSoup(raw, "html.parser").get_text(separator=" ")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _snippet(item: Mapping[str, Any]) -> str:
    raw: str = item.get("summary", "") or ""
    return _strip_html(raw) if raw else ""


def _content(item: Mapping[str, Any]) -> str:
    """Full body: ``<content:encoded>`` when present, else the raw summary."""
    content_list = item.get("content") or []
    if content_list:
        value = content_list[0].get("value", "")
        if value:
            return value
    return item.get("summary", "") or ""


def _parse_pubdate(item: Mapping[str, Any]) -> Optional[datetime]:
    """
    Return a timezone-aware UTC datetime for a feed item, or ``None``.

    Tries feedparser's ``published_parsed``/``updated_parsed`` (UTC
    ``time.struct_time``) first, then the raw ``published``/``updated``
    string.
    """
    for key in ("published_parsed", "updated_parsed"):
        raw_time = item.get(key)
        if raw_time is not None:
            return datetime(*raw_time[:6], tzinfo=timezone.utc)

    return parse_timestamp(item.get("published") or item.get("updated"))


def is_relevant(item: Mapping[str, Any], keywords: tuple[str, ...]) -> bool:
    """True when any keyword is a case-insensitive substring of title + snippet."""
    title: str = item.get("title", "") or ""
    text = f"{title} {_snippet(item) or _content(item)}".lower()
    return any(keyword.lower() in text for keyword in keywords)


def build_summary(item: Mapping[str, Any]) -> str:
    snippet = _snippet(item)
    if snippet:
        return snippet

    content = _content(item)
    if content:
        return content[:SUMMARY_LENGTH] + "..."

    return NO_SUMMARY


def to_report(item: Mapping[str, Any], source_name: str) -> SupplyChainReport:
    return SupplyChainReport(
        title=(item.get("title") or "Untitled").strip(),
        link=item.get("link", "") or "",
        published=item.get("published") or item.get("updated"),
        published_at=_parse_pubdate(item),
        summary=build_summary(item),
        source_name=source_name,
    )


def _download(url: str, client: Optional[httpx.Client]) -> httpx.Response:
    if client is None:
        response = httpx.get(
            url, headers=HEADERS, timeout=REQUEST_TIMEOUT, follow_redirects=True
        )
    else:
        response = client.get(
            url, headers=HEADERS, timeout=REQUEST_TIMEOUT, follow_redirects=True
        )
    response.raise_for_status()
    return response


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fetch_feed(
    source: FeedSource,
    client: Optional[httpx.Client] = None,
) -> list[SupplyChainReport]:
    """
    Fetch *source* and return its keyword-relevant items.

    Relevant items are capped at :data:`MAX_ITEMS` in feed order. Never
    raises: network, HTTP and parse failures are logged and produce an
    empty list.

    Args:
        source: A feed-kind descriptor from the registry.
        client: Optional shared :class:`httpx.Client`; a one-off request is
                made when omitted.
    """
    logger.info("Starting fetch for %s...", source.name)
    try:
        response = _download(source.url, client)
    except httpx.HTTPStatusError as exc:
        logger.error(
            "Error fetching %s: HTTP %d", source.name, exc.response.status_code
        )
        return []
    except httpx.HTTPError as exc:
        logger.error("Error fetching %s: %s", source.name, exc)
        return []

    try:
        feed = feedparser.parse(response.content)
        if feed.bozo and not feed.entries:
            logger.warning(
                "Feed for %s is malformed or empty. bozo_exception: %s",
                source.name,
                feed.get("bozo_exception"),
            )
            return []

        relevant = [
            item for item in feed.entries if is_relevant(item, source.keywords)
        ][:MAX_ITEMS]
        reports = [to_report(item, source.name) for item in relevant]
    except Exception as exc:
        logger.error("Unexpected error parsing feed for %s: %s", source.name, exc)
        return []

    logger.info("Found %d relevant items from %s", len(reports), source.name)
    return reports
