from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    # Server
    CORS_ORIGINS: str = "http://localhost:3000"
    MAX_REQUEST_SIZE_MB: int = 2

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_BURST: int | None = None

    # Observability
    LOG_JSON: bool = False
    METRICS_ENABLED: bool = False

    # WakaTime
    WAKATIME_API_KEY: str | None = None  # do not commit
    WAKATIME_BASE_URL: str = "https://wakatime.com/api/v1"
    WAKATIME_TIMEOUT: float = 20.0
    WAKATIME_MAX_RETRIES: int = 3

    # Caching (minutes)
    PROJECTS_CACHE_TTL_MINUTES: int = 30
    SUMMARY_CACHE_TTL_MINUTES: int = 5

    # Persistence
    STATE_FILE: str = ".workhours_state.json"

    # Form defaults
    DEFAULT_HOURLY_RATE: str = "2900"
    CURRENCY_SYMBOL: str = "Rs"

settings = Settings()
