"""
Service settings

Environment-driven configuration with prefix STOREFRONT_ (case-insensitive),
optionally read from a local .env file.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Upstream Order Store (Express/MongoDB API)
    order_api_base_url: str = Field("http://localhost:8000", description="Base URL of the order API")
    request_timeout: float = Field(10.0, gt=0, description="Seconds before an upstream call is abandoned")

    # Cart storage
    database_url: Optional[str] = None
    database_name: str = "storefront"

    invoice_prefix: str = "INV-"
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="STOREFRONT_",
    )


settings = Settings()
