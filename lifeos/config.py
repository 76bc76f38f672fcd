from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

from lifeos.features.player.tier_calculator import DEFAULT_TIER_CONFIG, TierConfig

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Postgres
    DATABASE_URL: str = "postgresql://localhost:5432/lifeos"

    # IANA zone used for "today"; unset means the host's local zone
    APP_TIMEZONE: str | None = None

    # =================================================================
    # RELATIONSHIP TIER SCORING
    # =================================================================
    TIER_INTERACTION_WEIGHT: float = DEFAULT_TIER_CONFIG.interaction_weight
    TIER_RECENCY_DECAY: float = DEFAULT_TIER_CONFIG.recency_decay
    TIER_DURATION_BONUS_MULTIPLIER: float = DEFAULT_TIER_CONFIG.duration_bonus_multiplier

    # Habit completions older than this are not loaded for streaks
    HABIT_STREAK_LOOKBACK_DAYS: int = 365

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 8
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def local_timezone(self) -> tzinfo:
        """Zone that defines the user's calendar day."""
        if self.APP_TIMEZONE:
            return ZoneInfo(self.APP_TIMEZONE)
        return datetime.now().astimezone().tzinfo

    def get_tier_config(self) -> TierConfig:
        """Tier scoring config with any environment overrides applied."""
        return TierConfig(
            interaction_weight=self.TIER_INTERACTION_WEIGHT,
            recency_decay=self.TIER_RECENCY_DECAY,
            duration_bonus_multiplier=self.TIER_DURATION_BONUS_MULTIPLIER,
            thresholds=dict(DEFAULT_TIER_CONFIG.thresholds),
        )

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            # Single user on a laptop
            config.update(
                {
                    "min_size": 1,
                    "max_size": 4,
                    "timeout": 15.0,
                }
            )

        return config


settings = Settings()
