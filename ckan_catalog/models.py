"""CKAN entities as pydantic models.

Wire names are lower case with underscores, the same as the Python field
names; an alias is declared only where the wire name is not a valid
identifier. Fields the models do not know about are kept in ``others`` on
datasets, resources, groups and organizations, and written back as top level
keys when posting.

``others``, ``extras`` and ``resources`` default to ``None``, which means
"not set" and is distinct from an explicitly empty container. Updates rely
on that distinction (see ``ckan_catalog.reconcile``).

The ``*Payload`` classes carry only what CKAN accepts on create and update.
Read models extend them with server-maintained fields, and ``project``
strips those fields off again before anything is posted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    model_serializer,
    model_validator,
)

from ckan_catalog.errors import ParseError
from ckan_catalog.timestamps import NONE, format_timestamp, parse_timestamp

T = TypeVar("T")


def _model_timestamp(value: Any) -> Any:
    if value is None or not isinstance(value, str):
        return value
    if value.strip() in ("", NONE):
        return None
    try:
        return parse_timestamp(value)
    except ParseError as exc:
        raise ValueError(str(exc)) from exc


def _timestamp_to_wire(value: Optional[datetime]) -> Optional[str]:
    return None if value is None else format_timestamp(value)


CkanTimestamp = Annotated[
    Optional[datetime],
    BeforeValidator(_model_timestamp),
    PlainSerializer(_timestamp_to_wire),
]


class CkanModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class WithOthers(CkanModel):
    """Collects unknown wire fields into ``others`` and flattens them back out."""

    others: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _collect_others(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = set()
        for name, info in cls.model_fields.items():
            known.add(name)
            if info.alias:
                known.add(info.alias)
        unknown = {key: value for key, value in data.items() if key not in known}
        if not unknown:
            return data
        collected = dict(data.get("others") or {})
        for key, value in unknown.items():
            collected.setdefault(key, value)
        cleaned = {key: value for key, value in data.items() if key in known}
        cleaned["others"] = collected
        return cleaned

    @model_serializer(mode="wrap")
    def _flatten_others(self, handler: Any) -> Dict[str, Any]:
        data = handler(self)
        others = data.pop("others", None)
        if others:
            for key, value in others.items():
                data.setdefault(key, value)
        return data

    def put_others(self, key: str, value: Any) -> None:
        if self.others is None:
            self.others = {}
        self.others[key] = value


class CkanErrorInfo(CkanModel):
    """The ``error`` member of a failed envelope."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    message: Optional[str] = None
    type: Optional[str] = Field(default=None, alias="__type")

    def __str__(self) -> str:
        return self.message or self.type or "unknown CKAN error"


class CkanResponse(CkanModel):
    """Envelope wrapping every CKAN action response."""

    help: Optional[str] = None
    success: bool
    error: Optional[CkanErrorInfo] = None
    result: Any = None


class CkanPair(CkanModel):
    key: str
    value: Any = None


class CkanTag(CkanModel):
    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    vocabulary_id: Optional[str] = None
    state: Optional[str] = None


class CkanLicense(CkanModel):
    id: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    status: Optional[str] = None
    maintainer: Optional[str] = None
    family: Optional[str] = None
    domain_content: Optional[Union[bool, str]] = None
    domain_data: Optional[Union[bool, str]] = None
    domain_software: Optional[Union[bool, str]] = None
    is_generic: Optional[Union[bool, str]] = None
    is_okd_compliant: Optional[Union[bool, str]] = None
    is_osi_compliant: Optional[Union[bool, str]] = None
    od_conformance: Optional[str] = None
    osd_conformance: Optional[str] = None


class CkanUser(CkanModel):
    id: Optional[str] = None
    name: Optional[str] = None
    fullname: Optional[str] = None
    display_name: Optional[str] = None
    about: Optional[str] = None
    email: Optional[str] = None
    email_hash: Optional[str] = None
    openid: Optional[str] = None
    state: Optional[str] = None
    sysadmin: Optional[bool] = None
    created: CkanTimestamp = None
    number_of_edits: Optional[int] = None
    number_created_packages: Optional[int] = None


class ResourcePayload(WithOthers):
    id: Optional[str] = None
    package_id: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    format: Optional[str] = None
    mimetype: Optional[str] = None
    mimetype_inner: Optional[str] = None
    hash: Optional[str] = None
    size: Optional[Union[int, str]] = None
    resource_type: Optional[str] = None
    url_type: Optional[str] = None
    position: Optional[int] = None
    created: CkanTimestamp = None
    last_modified: CkanTimestamp = None
    cache_url: Optional[str] = None
    cache_last_updated: CkanTimestamp = None
    webstore_url: Optional[str] = None
    webstore_last_updated: CkanTimestamp = None

    @classmethod
    def project(cls, entity: "ResourcePayload") -> "ResourcePayload":
        values = {name: getattr(entity, name) for name in cls.model_fields}
        if entity.others is not None:
            values["others"] = dict(entity.others)
        return cls.model_validate(values)


class CkanResource(ResourcePayload):
    state: Optional[str] = None
    revision_id: Optional[str] = None
    revision_timestamp: CkanTimestamp = None
    datastore_active: Optional[bool] = None
    tracking_summary: Optional[Dict[str, Any]] = None


class GroupOrgPayload(WithOthers):
    id: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    type: Optional[str] = None
    state: Optional[str] = None
    approval_status: Optional[str] = None
    extras: Optional[List[CkanPair]] = None

    @classmethod
    def project(cls, entity: "GroupOrgPayload") -> "GroupOrgPayload":
        values = {name: getattr(entity, name) for name in cls.model_fields}
        if entity.extras is not None:
            values["extras"] = list(entity.extras)
        if entity.others is not None:
            values["others"] = dict(entity.others)
        return cls.model_validate(values)


class CkanGroup(GroupOrgPayload):
    display_name: Optional[str] = None
    image_display_url: Optional[str] = None
    created: CkanTimestamp = None
    is_organization: Optional[bool] = None
    package_count: Optional[int] = None
    num_followers: Optional[int] = None
    revision_id: Optional[str] = None
    packages: Optional[List["CkanDataset"]] = None


class CkanOrganization(CkanGroup):
    pass


class DatasetPayload(WithOthers):
    id: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    author_email: Optional[str] = None
    maintainer: Optional[str] = None
    maintainer_email: Optional[str] = None
    license_id: Optional[str] = None
    notes: Optional[str] = None
    url: Optional[str] = None
    version: Optional[str] = None
    state: Optional[str] = None
    type: Optional[str] = None
    owner_org: Optional[str] = None
    private: Optional[bool] = None
    extras: Optional[List[CkanPair]] = None
    resources: Optional[List[ResourcePayload]] = None
    tags: Optional[List[CkanTag]] = None
    groups: Optional[List[GroupOrgPayload]] = None

    @classmethod
    def project(cls, entity: "DatasetPayload") -> "DatasetPayload":
        values = {name: getattr(entity, name) for name in cls.model_fields}
        if entity.others is not None:
            values["others"] = dict(entity.others)
        if entity.extras is not None:
            values["extras"] = list(entity.extras)
        if entity.tags is not None:
            values["tags"] = list(entity.tags)
        if entity.resources is not None:
            values["resources"] = [ResourcePayload.project(r) for r in entity.resources]
        if entity.groups is not None:
            values["groups"] = [GroupOrgPayload.project(g) for g in entity.groups]
        return cls.model_validate(values)


class CkanDataset(DatasetPayload):
    resources: Optional[List[CkanResource]] = None
    groups: Optional[List[CkanGroup]] = None
    organization: Optional[CkanOrganization] = None
    metadata_created: CkanTimestamp = None
    metadata_modified: CkanTimestamp = None
    creator_user_id: Optional[str] = None
    license_title: Optional[str] = None
    license_url: Optional[str] = None
    num_resources: Optional[int] = None
    num_tags: Optional[int] = None
    isopen: Optional[bool] = None
    revision_id: Optional[str] = None
    revision_timestamp: CkanTimestamp = None
    tracking_summary: Optional[Dict[str, Any]] = None
    relationships_as_object: Optional[List[Dict[str, Any]]] = None
    relationships_as_subject: Optional[List[Dict[str, Any]]] = None


class SearchResults(CkanModel, Generic[T]):
    count: int = 0
    results: List[T] = Field(default_factory=list)
    sort: Optional[str] = None
    facets: Optional[Dict[str, Any]] = None
    search_facets: Optional[Dict[str, Any]] = None


CkanGroup.model_rebuild()
CkanOrganization.model_rebuild()
CkanDataset.model_rebuild()
