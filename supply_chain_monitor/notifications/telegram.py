"""
Telegram delivery of the daily report.

Uploads the markdown file to every configured chat through the Bot API
``sendDocument`` method, captioned with a link to the committed report
when the repository identity is known.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from supply_chain_monitor.config.settings import Settings
from supply_chain_monitor.notifications.base import (
    NotificationError,
    NullNotifier,
    ReportNotifier,
)

logger = logging.getLogger(__name__)

_API_URL = "https://api.telegram.org/bot{token}/sendDocument"
_TIMEOUT = 30.0


class TelegramNotifier:
    """Uploads the daily report to each configured Telegram chat."""

    def __init__(
        self,
        bot_token: str,
        chat_ids: list[str],
        server_url: str = "https://github.com",
        repository: str = "",
        ref_name: str = "main",
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.bot_token = bot_token
        self.chat_ids = chat_ids
        self.server_url = server_url.rstrip("/")
        self.repository = repository
        self.ref_name = ref_name
        self._client = client

    def report_url(self, report_path: Path) -> Optional[str]:
        """Browser URL of the committed report, e.g. ``.../blob/main/2024-03-05/...``."""
        if not self.repository:
            return None
        relative = f"{report_path.parent.name}/{report_path.name}"
        return f"{self.server_url}/{self.repository}/blob/{self.ref_name}/{relative}"

    def caption(self, report_path: Path) -> str:
        text = f"Supply Chain Security Daily Report - {report_path.parent.name}"
        url = self.report_url(report_path)
        if url:
            text += f"\n{url}"
        return text

    def _post(self, chat_id: str, report_path: Path, payload: bytes) -> None:
        url = _API_URL.format(token=self.bot_token)
        data = {"chat_id": chat_id, "caption": self.caption(report_path)}
        files = {"document": (report_path.name, payload, "text/markdown")}
        if self._client is None:
            response = httpx.post(url, data=data, files=files, timeout=_TIMEOUT)
        else:
            response = self._client.post(url, data=data, files=files, timeout=_TIMEOUT)
        response.raise_for_status()

        result = response.json()
        if not result.get("ok"):
            raise NotificationError(
                f"Telegram API error: {result.get('description', 'Unknown error')}"
            )

    def send_report(self, report_path: Path) -> None:
        """
        Send *report_path* to every chat; every chat is attempted.

        Raises:
            NotificationError: If delivery to at least one chat failed.
        """
        report_path = Path(report_path)
        payload = report_path.read_bytes()

        failed: list[str] = []
        for chat_id in self.chat_ids:
            try:
                self._post(chat_id, report_path, payload)
            except (httpx.HTTPError, ValueError, NotificationError) as exc:
                logger.error("Telegram delivery to chat %s failed: %s", chat_id, exc)
                failed.append(chat_id)
            else:
                logger.info("Telegram report sent to chat %s", chat_id)

        if failed:
            raise NotificationError(
                f"Telegram delivery failed for {len(failed)} of {len(self.chat_ids)} chat(s)"
            )


def resolve_notifier(settings: Settings) -> ReportNotifier:
    """Telegram when credentials are present, otherwise a no-op notifier."""
    if not settings.telegram_configured:
        logger.info("Telegram notifications not configured, notifications will be skipped")
        return NullNotifier()

    logger.info("Telegram notifications enabled for %d chat(s)", len(settings.telegram_chat_ids))
    return TelegramNotifier(
        bot_token=settings.telegram_bot_token,
        chat_ids=settings.telegram_chat_ids,
        server_url=settings.github_server_url,
        repository=settings.github_repository,
        ref_name=settings.github_ref_name,
    )
