import logging
from collections.abc import Iterable
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _split_csv(env_value: str | None, default: Iterable[str] = ()) -> list[str]:
    raw = (env_value or "").strip()
    if not raw:
        return list(default)
    return [p.strip() for p in raw.split(",") if p.strip()]


class Settings(BaseSettings):
    # Landing target when neither state nor request context gives a better one
    DEFAULT_REDIRECT_URL: str = "/"

    # Path joined onto the Referer origin for local sign-ins
    LANDING_PATH: str = "/applications"

    # Standard authentication failure page of the host application
    FAILURE_URL: str = "/user/signin?error=true"

    # Comma separated hostnames allowed as absolute redirect targets.
    # Empty means every absolute http(s) target is trusted.
    REDIRECT_ALLOWED_HOSTS: str = ""

    # Release notes version users are marked as having viewed on login
    RELEASE_NOTES_VERSION: str = "1"

    # Analytics sink; events are only counted in metrics when unset
    ANALYTICS_URL: str | None = None
    ANALYTICS_WRITE_KEY: str | None = None

    # Default HTTP client timeout in seconds
    HTTP_CLIENT_TIMEOUT: float = 10.0

    DATABASE_URL: str = "sqlite+aiosqlite:///./authflow.db"

    SESSION_COOKIE: str = "SESSION"
    SESSION_COOKIE_SECURE: bool = True
    SESSION_COOKIE_SAMESITE: str = "lax"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="AUTHFLOW_", case_sensitive=False)

    def allowed_redirect_hosts(self) -> list[str]:
        return [h.lower() for h in _split_csv(self.REDIRECT_ALLOWED_HOSTS)]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings singleton."""
    s = Settings()
    if not s.allowed_redirect_hosts():
        logger.info(
            "No redirect host allowlist configured; absolute redirect targets are trusted",
            extra={"meta": {"component": "settings"}},
        )
    return s
