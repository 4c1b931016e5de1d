import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Spotify application credentials
    SPOTIFY_CLIENT_ID: str = ""
    SPOTIFY_CLIENT_SECRET: str = ""
    # Falls back to APP_URL + /api/spotify/callback when unset
    SPOTIFY_REDIRECT_URI: str = ""
    SPOTIFY_MARKET: str = "US"

    # Public base URL of this service and of the web client it redirects to
    APP_URL: str = "http://localhost:8000"
    FRONTEND_URL: str = ""

    DATABASE_URL: str = "sqlite+aiosqlite:///./songroom.db"
    DB_POOL: str = "enabled"

    JWT_SECRET: str = ""
    # Lifetime of the signed OAuth state parameter
    STATE_TTL_SECONDS: int = 600

    # Default HTTP client timeout in seconds
    HTTP_CLIENT_TIMEOUT: float = 30.0

    # Refresh provider tokens this many seconds before they expire
    TOKEN_EXPIRY_BUFFER_SECONDS: int = 300

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    @property
    def spotify_redirect_uri(self) -> str:
        explicit = self.SPOTIFY_REDIRECT_URI.strip()
        if explicit:
            return explicit
        return f"{self.APP_URL.rstrip('/')}/api/spotify/callback"

    @property
    def pool_disabled(self) -> bool:
        return self.DB_POOL.strip().lower() == "disabled"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once from env and ``.env``.

    Tests that change environment variables call ``get_settings.cache_clear()``.
    """
    return Settings()
