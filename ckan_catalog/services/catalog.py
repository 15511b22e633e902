"""Compact catalog views used by the MCP tools."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ckan_catalog.client import CkanClient, make_dataset_url, make_resource_url
from ckan_catalog.models import CkanDataset, CkanResource
from ckan_catalog.query import CkanQuery
from ckan_catalog.registry import CatalogRegistry


def _resource_summary(resource: CkanResource, description_chars: int = 1000) -> Dict[str, Any]:
    return {
        "id": resource.id,
        "name": resource.name,
        "description": (resource.description or "")[:description_chars],
        "format": resource.format,
        "mimetype": resource.mimetype,
        "url": resource.url,
        "size": resource.size,
        "last_modified": resource.last_modified.isoformat() if resource.last_modified else None,
    }


def _dataset_summary(dataset: CkanDataset) -> Dict[str, Any]:
    org = dataset.organization
    return {
        "id": dataset.id,
        "name": dataset.name,
        "title": dataset.title,
        "publisher": (org.title or org.name) if org else None,
        "metadata_modified": (
            dataset.metadata_modified.isoformat() if dataset.metadata_modified else None
        ),
        "tags": [t.name for t in dataset.tags or []][:20],
        "resources": [
            {"id": r.id, "name": r.name, "format": r.format, "url": r.url}
            for r in (dataset.resources or [])[:10]
        ],
    }


class CatalogService:
    def __init__(self, registry: CatalogRegistry) -> None:
        self.registry = registry

    def _make_client(self, catalog_id: str) -> CkanClient:
        return self.registry.client(catalog_id)

    def list_publishers(self, catalog_id: str, query: str, limit: int) -> List[Dict[str, Any]]:
        with self._make_client(catalog_id) as client:
            orgs = client.get_organization_list()

        filtered = []
        q = (query or "").strip().lower()
        for org in orgs:
            title = (org.title or "").strip()
            name = (org.name or "").strip()
            if q and q not in title.lower() and q not in name.lower():
                continue
            filtered.append(
                {
                    "id": org.id,
                    "name": name,
                    "title": title,
                    "package_count": org.package_count,
                    "description": (org.description or "")[:500],
                }
            )
            if len(filtered) >= limit:
                break
        return filtered

    def search_datasets(
        self,
        catalog_id: str,
        query: str,
        publisher: Optional[str],
        tag: Optional[str],
        group: Optional[str],
        rows: int,
        start: int,
    ) -> Dict[str, Any]:
        ckan_query = CkanQuery.filter().by_text(query)
        if publisher:
            ckan_query = ckan_query.by_organization_names([publisher])
        if tag:
            ckan_query = ckan_query.by_tag_names([tag])
        if group:
            ckan_query = ckan_query.by_group_names([group])
        rows = max(1, min(rows, 50))
        start = max(0, start)

        with self._make_client(catalog_id) as client:
            res = client.search_datasets(ckan_query, rows, start)

        return {
            "count": res.count,
            "start": start,
            "rows": rows,
            "datasets": [_dataset_summary(ds) for ds in res.results],
        }

    def get_dataset(self, catalog_id: str, dataset_id: str) -> Dict[str, Any]:
        with self._make_client(catalog_id) as client:
            data = client.get_dataset(dataset_id)
            catalog_url = client.catalog_url

        org = data.organization
        result: Dict[str, Any] = {
            "id": data.id,
            "name": data.name,
            "title": data.title,
            "notes": (data.notes or "")[:4000],
            "license_id": data.license_id,
            "metadata_created": (
                data.metadata_created.isoformat() if data.metadata_created else None
            ),
            "metadata_modified": (
                data.metadata_modified.isoformat() if data.metadata_modified else None
            ),
            "publisher": {
                "id": org.id if org else None,
                "name": org.name if org else None,
                "title": org.title if org else None,
            },
            "tags": [t.name for t in data.tags or []],
            "groups": [g.name for g in data.groups or []],
            "extras": {pair.key: pair.value for pair in data.extras or []},
            "resources": [_resource_summary(r) for r in data.resources or []],
        }
        name = data.name or data.id
        if name:
            result["web_url"] = make_dataset_url(catalog_url, name)
        return result

    def get_resource(self, catalog_id: str, resource_id: str) -> Dict[str, Any]:
        with self._make_client(catalog_id) as client:
            data = client.get_resource(resource_id)
            catalog_url = client.catalog_url
        result = _resource_summary(data, description_chars=2000)
        if data.package_id and data.id:
            result["web_url"] = make_resource_url(catalog_url, data.package_id, data.id)
        return result

    def list_groups(self, catalog_id: str) -> List[Dict[str, Any]]:
        with self._make_client(catalog_id) as client:
            groups = client.get_group_list()
        return [
            {
                "id": g.id,
                "name": g.name,
                "title": g.title,
                "package_count": g.package_count,
            }
            for g in groups
        ]

    def list_tags(self, catalog_id: str, query: Optional[str]) -> List[str]:
        with self._make_client(catalog_id) as client:
            return client.get_tag_names_list(query or None)

    def list_licenses(self, catalog_id: str) -> List[Dict[str, Any]]:
        with self._make_client(catalog_id) as client:
            licenses = client.get_license_list()
        return [{"id": lic.id, "title": lic.title, "url": lic.url} for lic in licenses]
