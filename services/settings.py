# services/settings.py
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("IONO_DB_URL", "DATABASE_URL"),
    )

    SCRAPE_TIMEOUT: float = 15.0
    SCRAPE_MAX_DELAY: int = 30

    DAILY: bool = False
    DISCORD: bool = False
    SLACK: bool = False
    DAILY_DISCORDURL: Optional[str] = None
    DAILY_SLACKURL: Optional[str] = None
    POST_PAUSE_SECONDS: float = 5.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def missing_webhooks(self) -> list[str]:
        """Names of webhook variables required by the enabled targets but unset."""
        missing: list[str] = []
        if not self.DAILY:
            return missing
        if self.DISCORD and not self.DAILY_DISCORDURL:
            missing.append("DAILY_DISCORDURL")
        if self.SLACK and not self.DAILY_SLACKURL:
            missing.append("DAILY_SLACKURL")
        return missing


def get_settings() -> Settings:
    return Settings()
