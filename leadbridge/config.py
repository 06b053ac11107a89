"""Application configuration."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine.url import URL, make_url


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # so PIXEL_ID works regardless of case
        extra="ignore",
    )

    # Database: a full connection string wins over the individual fields
    database_url: str | None = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "leadbridge"
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_ssl: bool = False
    db_pool_size: int = 5
    db_max_overflow: int = 10

    @property
    def sqlalchemy_url(self) -> URL:
        if self.database_url:
            url = make_url(self.database_url)
            if url.drivername in ("postgres", "postgresql"):
                url = url.set(drivername="postgresql+asyncpg")
            return url
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    # Meta Conversions API
    pixel_id: str | None = None
    access_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("fb_access_token", "access_token"),
    )
    graph_api_version: str = "v24.0"
    graph_api_base_url: str = "https://graph.facebook.com"
    dispatch_timeout_seconds: float = 10.0
    test_event_code: str | None = None  # Events Manager "Test events" tab

    # Server
    host: str = "0.0.0.0"
    port: int = 10000
    cors_allowed_origins: str = "*"
    max_payload_bytes: int = 50 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


settings = Settings()
