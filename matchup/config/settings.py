# matchup/config/settings.py

from pydantic import Field
from pydantic_settings import BaseSettings

from matchup.domain.grouping import RemainderPolicy


class Settings(BaseSettings):
    ENV: str = "development"
    DATABASE_URL: str = "postgresql+asyncpg://matchup_user:matchup_pass@db:5432/matchup"
    LOG_LEVEL: str = "INFO"

    # Grouping
    GROUP_SIZE: int = Field(default=2, ge=2)
    MAX_GROUPS_PER_TEAM: int = Field(default=10, ge=1)
    REMAINDER_POLICY: RemainderPolicy = RemainderPolicy.MERGE

    # Messaging
    BOT_DISPLAY_NAME: str = "Matchup"
    bot_username: str = "MatchupBot"
    bot_token: str = ""
    public_base_url: str = "https://matchup.example.org"
    telegram_api_url: str = "https://api.telegram.org"

    # Key for the on-demand run endpoint; empty disables it
    PROCESS_NOW_KEY: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
