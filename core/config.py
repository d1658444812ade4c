from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Storage
    database_url: str = Field("sqlite+aiosqlite:///./fittrack.db", alias="DATABASE_URL")
    db_echo: bool = Field(False, alias="DB_ECHO")

    # Calendar days are bucketed in the user's timezone; this is the fallback
    default_timezone: str = Field("UTC", alias="DEFAULT_TIMEZONE")

    # Analytics windows
    streak_lookback: int = Field(100, alias="STREAK_LOOKBACK")
    health_window_days: int = Field(30, alias="HEALTH_WINDOW_DAYS")
    trajectory_window_days: int = Field(90, alias="TRAJECTORY_WINDOW_DAYS")
    goal_progress_min_span_kg: float = Field(10.0, alias="GOAL_PROGRESS_MIN_SPAN_KG")

    # Post-commit achievement checks after meal/workout logging
    achievement_checks_enabled: bool = Field(True, alias="ACHIEVEMENT_CHECKS_ENABLED")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
