"""Typed configuration for the CKAN client."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    catalog_url: str | None = Field(default=None, alias="CKAN_CATALOG_URL")
    api_token: str | None = Field(default=None, alias="CKAN_API_TOKEN")
    proxy_host: str | None = Field(default=None, alias="CKAN_PROXY_HOST")
    proxy_port: int | None = Field(default=None, alias="CKAN_PROXY_PORT")
    timeout: float = Field(default=30.0, alias="CKAN_TIMEOUT")
    user_agent: str = Field(default="ckan-catalog-client/0.1", alias="CKAN_USER_AGENT")
    catalogs_path: Path = Field(default=Path("catalogs.yaml"), alias="CKAN_CATALOGS")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
