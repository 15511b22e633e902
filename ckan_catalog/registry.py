"""Registry of named CKAN catalogs loaded from YAML."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ckan_catalog.client import CkanClient
from ckan_catalog.config import settings
from ckan_catalog.errors import ConfigurationError
from ckan_catalog.transport import HostPort


@dataclass(frozen=True)
class Catalog:
    id: str
    title: str
    base_url: str
    token_env: Optional[str] = None
    proxy: Optional[HostPort] = None

    @property
    def token(self) -> Optional[str]:
        if not self.token_env:
            return None
        return os.environ.get(self.token_env) or None


class CatalogRegistry:
    def __init__(self, catalogs_path: Path) -> None:
        self.catalogs_path = catalogs_path
        self._catalogs: Dict[str, Catalog] = {}

    def load(self) -> None:
        if not self.catalogs_path.exists():
            raise ConfigurationError(f"Catalogs config not found: {self.catalogs_path}")

        raw = yaml.safe_load(self.catalogs_path.read_text(encoding="utf-8")) or {}
        entries = raw.get("catalogs", [])
        parsed: Dict[str, Catalog] = {}
        for entry in entries:
            try:
                proxy = entry.get("proxy")
                catalog = Catalog(
                    id=entry["id"],
                    title=entry.get("title", entry["id"]),
                    base_url=entry["base_url"].rstrip("/"),
                    token_env=entry.get("token_env"),
                    proxy=HostPort(proxy["host"], int(proxy["port"])) if proxy else None,
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid catalog definition: {entry}") from exc
            parsed[catalog.id] = catalog

        self._catalogs = parsed

    def get(self, catalog_id: str) -> Catalog:
        if catalog_id not in self._catalogs:
            raise ConfigurationError(f"Unknown catalog_id={catalog_id}")
        return self._catalogs[catalog_id]

    def list(self) -> List[Catalog]:
        return list(self._catalogs.values())

    def client(self, catalog_id: str) -> CkanClient:
        catalog = self.get(catalog_id)
        return CkanClient(
            catalog.base_url,
            catalog.token,
            catalog.proxy,
            timeout=settings.timeout,
            user_agent=settings.user_agent,
        )


def load_registry() -> CatalogRegistry:
    registry = CatalogRegistry(settings.catalogs_path)
    registry.load()
    return registry
