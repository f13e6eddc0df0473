"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="../.env.local",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    environment: str = "development"
    app_url: str = "http://localhost:3000"
    backend_port: int = 8000
    version: str = "0.1.0"

    # Snapshot store (hosted Postgres). Both must be set for live data;
    # otherwise every read route serves demonstration data.
    database_url: str = ""
    database_access_key: str = ""

    # Outbound integrations (P6 / SAP connection tests)
    connection_timeout: float = 10.0
    sap_probe_timeout: float = 5.0

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def store_configured(self) -> bool:
        return bool(self.database_url and self.database_access_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
