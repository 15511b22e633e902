"""Typed client for the CKAN action API (version 3)."""

from __future__ import annotations

from typing import Any, List, Optional, Set, Union

import httpx

from ckan_catalog.codec import DEFAULT_CODECS, Codecs
from ckan_catalog.config import Settings, settings
from ckan_catalog.errors import ConfigurationError, ValidationError
from ckan_catalog.models import (
    CkanDataset,
    CkanGroup,
    CkanLicense,
    CkanOrganization,
    CkanResource,
    CkanTag,
    CkanUser,
    DatasetPayload,
    GroupOrgPayload,
    ResourcePayload,
    SearchResults,
)
from ckan_catalog.query import CkanQuery, build_search_params
from ckan_catalog.reconcile import reconcile_dataset, reconcile_resource
from ckan_catalog.transport import CkanConfig, HostPort, Transport

ACTION_PATH = "/api/3/action/"


def _check_not_empty(value: Optional[str], message: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(message)
    return value


def make_dataset_url(catalog_url: str, dataset_id_or_name: str) -> str:
    """URL of the dataset page, e.g. ``http://dati.trentino.it/dataset/impianti-di-risalita``."""
    _check_not_empty(catalog_url, "invalid catalog url")
    _check_not_empty(dataset_id_or_name, "invalid dataset identifier")
    return f"{catalog_url.rstrip('/')}/dataset/{dataset_id_or_name}"


def make_resource_url(catalog_url: str, dataset_id_or_name: str, resource_id: str) -> str:
    """URL of a resource page. Pass the resource id, not its name."""
    _check_not_empty(catalog_url, "invalid catalog url")
    _check_not_empty(dataset_id_or_name, "invalid dataset identifier")
    _check_not_empty(resource_id, "invalid resource id")
    return f"{catalog_url.rstrip('/')}/{dataset_id_or_name}/resource/{resource_id}"


def make_group_url(catalog_url: str, group_name_or_id: str) -> str:
    _check_not_empty(catalog_url, "invalid catalog url")
    _check_not_empty(group_name_or_id, "invalid group identifier")
    return f"{catalog_url.rstrip('/')}/group/{group_name_or_id}"


def _require(value: Optional[str], message: str) -> None:
    if value is None or not value.strip():
        raise ValidationError(message)


def check_dataset(dataset: DatasetPayload) -> None:
    """Minimal checks a dataset must pass before ``package_create``."""
    _require(
        dataset.name,
        "invalid ckan dataset name (must have no spaces and dashes as separators, "
        'i.e. "limestone-pavement-orders")',
    )
    _require(dataset.url, "invalid ckan dataset url to description page")


def check_resource(resource: ResourcePayload) -> None:
    """Minimal checks a resource must pass before ``resource_create``."""
    _require(resource.format, "Invalid Ckan resource format!")
    _require(resource.name, "Ckan resource name can't be empty!")
    _require(resource.description, "Ckan resource description must not be empty!")
    _require(resource.package_id, "Ckan resource parent dataset must not be empty!")
    _require(resource.url, "Ckan resource url must be not empty!")


def _backfill_package_id(dataset: CkanDataset) -> CkanDataset:
    for resource in dataset.resources or []:
        resource.package_id = dataset.id
    return dataset


class CkanClient:
    """Client for a single CKAN catalog.

    Configuration is fixed at construction; every call is one blocking HTTP
    round trip, so an instance can be shared between threads. Write calls
    need a token. Clients share the process-wide ``DEFAULT_CODECS`` unless
    given their own.
    """

    def __init__(
        self,
        catalog_url: str,
        token: Optional[str] = None,
        proxy: Optional[HostPort] = None,
        *,
        timeout: float = 30.0,
        user_agent: str = "ckan-catalog-client/0.1",
        transport: Optional[httpx.BaseTransport] = None,
        codecs: Optional[Codecs] = None,
    ) -> None:
        self.config = CkanConfig(
            catalog_url=catalog_url,
            token=token,
            proxy=proxy,
            user_agent=user_agent,
            timeout=timeout,
        )
        self.codecs = codecs or DEFAULT_CODECS
        self._transport = Transport(self.config, self.codecs, transport=transport)

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "CkanClient":
        if not config.catalog_url:
            raise ConfigurationError("CKAN_CATALOG_URL is not set")
        proxy = None
        if config.proxy_host and config.proxy_port:
            proxy = HostPort(config.proxy_host, config.proxy_port)
        return cls(
            config.catalog_url,
            config.api_token,
            proxy,
            timeout=config.timeout,
            user_agent=config.user_agent,
        )

    def __repr__(self) -> str:
        masked = None if self.config.token is None else "*****MASKED_TOKEN*******"
        return f"CkanClient(catalog_url={self.catalog_url!r}, token={masked!r})"

    def __enter__(self) -> "CkanClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._transport.close()

    @property
    def catalog_url(self) -> str:
        return self.config.catalog_url

    @property
    def token(self) -> Optional[str]:
        return self.config.token

    @property
    def proxy(self) -> Optional[HostPort]:
        return self.config.proxy

    def _get(self, result_type: Any, action: str, *params: Any) -> Any:
        return self._transport.get(result_type, ACTION_PATH + action, list(params))

    def _post(self, result_type: Any, action: str, entity: Any) -> Any:
        body = self.codecs.posting.encode(entity)
        return self._transport.post(result_type, ACTION_PATH + action, body)

    def _require_token(self, what: str, name: Optional[str]) -> None:
        if self.config.token is None:
            raise ConfigurationError(f"Tried to {what} {name!r}, but ckan token was not set!")

    # Reads

    def get_dataset_list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[str]:
        """Dataset names like ``limestone-pavement-orders``.

        ``offset`` starts at 0, so ``get_dataset_list(1, 0)`` returns exactly
        one name when the catalog is not empty.
        """
        params = []
        if limit is not None:
            params.append(("limit", limit))
        if offset is not None:
            params.append(("offset", offset))
        return self._get(List[str], "package_list", *params)

    def get_license_list(self) -> List[CkanLicense]:
        return self._get(List[CkanLicense], "license_list")

    def get_dataset(self, id_or_name: str) -> CkanDataset:
        dataset = self._get(CkanDataset, "package_show", ("id", id_or_name))
        return _backfill_package_id(dataset)

    def get_user_list(self) -> List[CkanUser]:
        return self._get(List[CkanUser], "user_list")

    def get_user(self, user_id: str) -> CkanUser:
        return self._get(CkanUser, "user_show", ("id", user_id))

    def get_resource(self, resource_id: str) -> CkanResource:
        return self._get(CkanResource, "resource_show", ("id", resource_id))

    def get_group_list(self) -> List[CkanGroup]:
        """Groups in the catalog. Organizations are not included."""
        return self._get(List[CkanGroup], "group_list", ("all_fields", True))

    def get_group_names(self) -> List[str]:
        return self._get(List[str], "group_list")

    def get_group(self, id_or_name: str) -> CkanGroup:
        return self._get(
            CkanGroup, "group_show", ("id", id_or_name), ("include_datasets", False)
        )

    def get_organization_list(self) -> List[CkanOrganization]:
        return self._get(List[CkanOrganization], "organization_list", ("all_fields", True))

    def get_organization_names(self) -> List[str]:
        return self._get(List[str], "organization_list")

    def get_organization(self, id_or_name: str) -> CkanOrganization:
        return self._get(
            CkanOrganization, "organization_show", ("id", id_or_name), ("include_datasets", False)
        )

    def get_formats(self) -> Set[str]:
        """All resource formats used in the catalog."""
        return self._get(Set[str], "format_autocomplete", ("q", ""), ("limit", 1000))

    def get_tag_list(self) -> List[CkanTag]:
        return self._get(List[CkanTag], "tag_list", ("all_fields", True))

    def get_tag_names_list(self, query: Optional[str] = None) -> List[str]:
        """Tag names, optionally only those containing ``query``."""
        if query is None:
            return self._get(List[str], "tag_list")
        return self._get(List[str], "tag_list", ("query", query))

    def search_datasets(
        self, query: Union[CkanQuery, str], limit: int = 10, offset: int = 0
    ) -> SearchResults[CkanDataset]:
        if isinstance(query, str):
            query = CkanQuery.filter().by_text(query)
        params = build_search_params(query, limit, offset)
        results = self._get(SearchResults[CkanDataset], "package_search?" + params)
        for dataset in results.results:
            _backfill_package_id(dataset)
        return results

    # Writes

    def create_resource(self, resource: ResourcePayload) -> CkanResource:
        self._require_token("create resource", resource.name)
        check_resource(resource)
        return self._post(CkanResource, "resource_create", resource)

    def create_dataset(self, dataset: DatasetPayload) -> CkanDataset:
        """Create ``dataset``, including any resources it carries."""
        self._require_token("create dataset", dataset.name)
        check_dataset(dataset)
        return self._post(CkanDataset, "package_create", dataset)

    def create_organization(self, organization: GroupOrgPayload) -> CkanOrganization:
        self._require_token("create organization", organization.name)
        _require(organization.name, "invalid ckan organization name")
        return self._post(CkanOrganization, "organization_create", organization)

    def update_resource(self, resource: ResourcePayload) -> CkanResource:
        """Update ``resource``. If ``others`` is unset, custom fields already on
        the server are kept instead of being erased.
        """
        self._require_token("update resource", resource.name)
        _require(resource.id, "Ckan resource id is required for updates!")
        payload = reconcile_resource(resource, lambda: self.get_resource(resource.id))
        return self._post(CkanResource, "resource_update", payload)

    def update_dataset(self, dataset: DatasetPayload) -> CkanDataset:
        """Update ``dataset``.

        Unset ``others``, ``extras`` and ``resources`` are copied from the
        server before posting, so they are not erased.
        """
        self._require_token("update dataset", dataset.name)
        _require(dataset.id, "Ckan dataset id is required for updates!")
        payload = reconcile_dataset(dataset, lambda: self.get_dataset(dataset.id))
        return self._post(CkanDataset, "package_update", payload)
