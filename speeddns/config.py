"""
Process-level settings for speeddns.

Uses Pydantic Settings to load environment variables for the data directory,
logging and the DNS API endpoint. The per-run configuration that operators
edit (credentials, domains, cfst tuning) lives in `config.json` and is handled
by `speeddns.infrastructure.config_store`.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    data_dir: Path = Field(Path("/app/data"), alias="DATA_DIR")

    # Application
    app_env: str = Field("production", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    config_poll_seconds: float = Field(5.0, alias="CONFIG_POLL_SECONDS")

    # DNS API
    dns_api_base_url: str = Field(
        "https://api.cloudflare.com/client/v4", alias="DNS_API_BASE_URL"
    )
    dns_api_timeout: Optional[float] = Field(None, alias="DNS_API_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def config_file(self) -> Path:
        return self.data_dir / "config.json"

    @property
    def log_file(self) -> Path:
        return self.data_dir / "app.log"

    @property
    def cfst_file(self) -> Path:
        return self.data_dir / "cfst"

    @property
    def ip4_file(self) -> Path:
        return self.data_dir / "ip.txt"

    @property
    def ip6_file(self) -> Path:
        return self.data_dir / "ipv6.txt"

    @property
    def combined_ip_file(self) -> Path:
        return self.data_dir / "ip_combined.txt"

    @property
    def result_file(self) -> Path:
        return self.data_dir / "result.csv"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
