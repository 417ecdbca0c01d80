"""Application configuration via Pydantic Settings."""

from typing import List
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./pricewatch.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Auth / JWT (tokens are issued elsewhere, we only verify them)
    JWT_SECRET_KEY: str = "change-me-in-production-use-a-random-secret"
    JWT_ALGORITHM: str = "HS256"

    # Tracking cycle
    SCHEDULER_ENABLED: bool = True
    POLL_INTERVAL_MINUTES: int = 60
    ITEM_DELAY_SECONDS: float = 2.0
    CONCURRENT_LIMIT: int = 5  # Reserved: items are processed sequentially
    RECHECK_OUT_OF_STOCK: bool = False
    DEFAULT_CHECK_FREQUENCY_HOURS: int = 24
    PRICE_DROP_THRESHOLD_PCT: float = 5.0

    # Browser / extraction
    BROWSER_HEADLESS: bool = True
    NAVIGATION_TIMEOUT_MS: int = 30000
    SETTLE_DELAY_MIN_SECONDS: float = 1.0
    SETTLE_DELAY_MAX_SECONDS: float = 3.0
    DEFAULT_CURRENCY: str = "INR"
    USER_AGENTS: str = ""  # "|"-separated override of the built-in pool

    # Frontend
    FRONTEND_URL: str = "http://localhost:5173"

    def get_user_agents(self) -> List[str]:
        """Parse USER_AGENTS into a list of user-agent strings.

        User agents contain commas, so entries are separated by "|".

        Returns:
            List of user-agent strings, empty if USER_AGENTS is not set
        """
        if not self.USER_AGENTS:
            return []
        return [ua.strip() for ua in self.USER_AGENTS.split("|") if ua.strip()]

    @property
    def scheduler_active(self) -> bool:
        """Whether the background tracking scheduler should run."""
        return self.SCHEDULER_ENABLED and self.ENVIRONMENT != "test"


settings = Settings()
