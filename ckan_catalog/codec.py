"""JSON codecs for CKAN envelopes and for create/update payloads."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ckan_catalog.errors import DecodeError
from ckan_catalog.models import (
    CkanDataset,
    CkanGroup,
    CkanLicense,
    CkanOrganization,
    CkanResource,
    CkanResponse,
    CkanTag,
    CkanUser,
    DatasetPayload,
    GroupOrgPayload,
    ResourcePayload,
    SearchResults,
)

RESULT_TYPES: tuple[Any, ...] = (
    CkanDataset,
    CkanResource,
    CkanUser,
    CkanGroup,
    CkanOrganization,
    List[str],
    Set[str],
    List[CkanUser],
    List[CkanTag],
    List[CkanGroup],
    List[CkanOrganization],
    List[CkanLicense],
    SearchResults[CkanDataset],
)

_ENVELOPE = TypeAdapter(CkanResponse)


class EnvelopeCodec:
    """Decodes response bodies. Adapters for ``RESULT_TYPES`` are built up front."""

    def __init__(self) -> None:
        self._adapters: Dict[Any, TypeAdapter[Any]] = {tp: TypeAdapter(tp) for tp in RESULT_TYPES}
        self._lock = threading.Lock()

    def _adapter(self, result_type: Any) -> TypeAdapter[Any]:
        adapter = self._adapters.get(result_type)
        if adapter is None:
            with self._lock:
                adapter = self._adapters.get(result_type)
                if adapter is None:
                    adapter = TypeAdapter(result_type)
                    self._adapters[result_type] = adapter
        return adapter

    def decode_envelope(self, body: str) -> CkanResponse:
        try:
            return _ENVELOPE.validate_json(body)
        except PydanticValidationError as exc:
            raise DecodeError("Couldn't interpret json returned by the server!", body) from exc

    def decode_result(self, result_type: Any, envelope: CkanResponse, body: str) -> Any:
        try:
            return self._adapter(result_type).validate_python(envelope.result)
        except PydanticValidationError as exc:
            raise DecodeError(
                f"CKAN result does not match the expected {result_type!r}!", body
            ) from exc


class PostingCodec:
    """Encodes entities for create/update calls: payload fields only, no nulls."""

    def project(self, entity: Any) -> Any:
        if isinstance(entity, ResourcePayload):
            return ResourcePayload.project(entity)
        if isinstance(entity, DatasetPayload):
            return DatasetPayload.project(entity)
        if isinstance(entity, GroupOrgPayload):
            return GroupOrgPayload.project(entity)
        raise TypeError(f"Don't know how to post {type(entity).__name__}")

    def encode(self, entity: Any) -> str:
        return self.project(entity).model_dump_json(exclude_none=True, by_alias=True)


@dataclass(frozen=True)
class Codecs:
    """Codec pair shared read-only by every operation of the clients using it."""

    envelope: EnvelopeCodec = field(default_factory=EnvelopeCodec)
    posting: PostingCodec = field(default_factory=PostingCodec)


DEFAULT_CODECS = Codecs()
