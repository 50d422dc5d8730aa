"""
Deployment settings read from the environment.

The aggregation pipeline itself uses none of these; they are handed
untouched to the notifier chosen at startup.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field

# Shared by every outbound request. httpx applies the timeout to each phase
# (connect, read, write, pool) separately.
REQUEST_TIMEOUT = 10.0
HEADERS = {"User-Agent": "Supply-Chain-Monitor/1.0"}


class Settings(BaseModel):
    """Notifier credentials and repository identity from the environment."""

    telegram_bot_token: str = ""
    telegram_chat_ids: list[str] = Field(default_factory=list)
    github_server_url: str = "https://github.com"
    github_repository: str = ""
    github_ref_name: str = "main"

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_ids)

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        chat_ids = [
            chat_id.strip()
            for chat_id in env.get("TELEGRAM_CHAT_IDS", "").split(",")
            if chat_id.strip()
        ]
        return cls(
            telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN", "").strip(),
            telegram_chat_ids=chat_ids,
            github_server_url=env.get("GITHUB_SERVER_URL") or "https://github.com",
            github_repository=env.get("GITHUB_REPOSITORY", ""),
            github_ref_name=env.get("GITHUB_REF_NAME") or "main",
        )
