from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "Booking Analytics API"
    app_version: str = "1.0.0"
    environment: str = "local"

    host: str = "0.0.0.0"
    port: int = 3000

    mongodb_uri: str | None = None
    mongodb_database: str = "visitslogs"
    mongodb_collection: str = "hotelsite"
    mongodb_server_selection_timeout_ms: int = 5000
    mongodb_socket_timeout_ms: int | None = None

    # Timezone used by $dateToString when bucketing events per calendar day.
    distribution_timezone: str = "UTC"

    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["GET"]
    cors_allow_headers: list[str] = ["*"]

    log_json: bool = False

    sentry_dsn: str | None = None
    sentry_traces_sample_rate: float = 0.0


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
