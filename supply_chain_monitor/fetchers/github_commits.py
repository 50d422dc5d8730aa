"""
GitHub commit-list fetcher.

Reads a ``/repos/{owner}/{repo}/commits`` endpoint and reports the most
recent commits, in the order GitHub returns them (newest first).

Usage::

    from supply_chain_monitor.config.sources import API_SOURCES
    from supply_chain_monitor.fetchers.github_commits import fetch_commit_list

    reports = fetch_commit_list(API_SOURCES[0])
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from supply_chain_monitor.config.settings import HEADERS, REQUEST_TIMEOUT
from supply_chain_monitor.config.sources import CommitListSource
from supply_chain_monitor.models import (
    SUMMARY_LENGTH,
    SupplyChainReport,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

MAX_COMMITS = 3

_API_HEADERS = {**HEADERS, "Accept": "application/vnd.github.v3+json"}


def _to_report(entry: dict[str, Any], source_name: str) -> SupplyChainReport:
    message: str = entry["commit"]["message"]
    authored: str = entry["commit"]["author"]["date"]
    return SupplyChainReport(
        title=message.split("\n")[0],
        link=entry["html_url"],
        published=authored,
        published_at=parse_timestamp(authored),
        summary=message[:SUMMARY_LENGTH] + "...",
        source_name=source_name,
    )


def fetch_commit_list(
    source: CommitListSource,
    client: Optional[httpx.Client] = None,
) -> list[SupplyChainReport]:
    """
    Return the first :data:`MAX_COMMITS` commits served by *source*.

    Never raises: transport errors, non-2xx responses and payloads that do
    not look like a commit list are logged and produce an empty list.
    """
    logger.info("Starting fetch for %s...", source.name)
    try:
        if client is None:
            response = httpx.get(
                source.url, headers=_API_HEADERS, timeout=REQUEST_TIMEOUT
            )
        else:
            response = client.get(
                source.url, headers=_API_HEADERS, timeout=REQUEST_TIMEOUT
            )
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as exc:
        logger.error(
            "Error fetching %s: HTTP %d", source.name, exc.response.status_code
        )
        return []
    except httpx.HTTPError as exc:
        logger.error("Error fetching %s: %s", source.name, exc)
        return []
    except ValueError as exc:
        logger.error("Invalid JSON from %s: %s", source.name, exc)
        return []

    if not isinstance(payload, list):
        logger.error(
            "Unexpected payload from %s: expected a list, got %s",
            source.name,
            type(payload).__name__,
        )
        return []

    try:
        reports = [_to_report(entry, source.name) for entry in payload[:MAX_COMMITS]]
    except Exception as exc:
        logger.error("Malformed commit entry from %s: %r", source.name, exc)
        return []

    logger.info("Found %d commits from %s", len(reports), source.name)
    return reports
