from functools import lru_cache

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_RATE_PROVIDERS = {"http", "static"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    RATE_PROVIDER, RATES_CACHE_TTL_SECONDS, RATES_API_BASE_URL).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "SheetRates"
    debug: bool = False
    version: str = "0.1.0"

    # Exchange rates / caching
    rates_api_base_url: AnyHttpUrl = "https://api.frankfurter.app"  # GET {base}/latest?from=XXX
    rate_provider: str = "http"
    rates_cache_ttl_seconds: int = 60

    # Outbound HTTP
    http_timeout_seconds: float = 5.0
    http_retries: int = 1
    http_backoff_seconds: float = 0.5

    # Admin endpoints
    enable_cache_admin: bool = True

    def init_post_load(self) -> None:
        """Validate cross-field constraints pydantic does not cover."""
        if self.rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported rate_provider '{self.rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )
        if self.rates_cache_ttl_seconds <= 0:
            raise ValueError("rates_cache_ttl_seconds must be positive")
        if self.http_timeout_seconds <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        if not (0 <= self.http_retries <= 3):
            raise ValueError("http_retries must be between 0 and 3")
        if self.http_backoff_seconds < 0:
            raise ValueError("http_backoff_seconds cannot be negative")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
