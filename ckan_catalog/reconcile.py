"""Read-merge-write helpers that make CKAN updates non-destructive.

CKAN erases custom fields, ``extras`` and ``resources`` that are missing from
an update call. Before posting, field groups the caller left unset (``None``)
are filled with the current server values; a group set to anything,
including an empty container, is sent as given and replaces server state.

Fetch and update are two separate calls, so a change made on the server in
between is overwritten. Callers needing stronger guarantees must serialize
their writes.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Optional, TypeVar

from ckan_catalog.models import CkanDataset, CkanResource, DatasetPayload, ResourcePayload

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyFetch(Generic[T]):
    """Calls ``fetch`` on first use only and remembers the result."""

    def __init__(self, fetch: Callable[[], T]) -> None:
        self._fetch = fetch
        self._value: Optional[T] = None
        self._fetched = False

    def __call__(self) -> T:
        if not self._fetched:
            self._value = self._fetch()
            self._fetched = True
        return self._value  # type: ignore[return-value]


def reconcile_resource(
    resource: ResourcePayload, fetch: Callable[[], CkanResource]
) -> ResourcePayload:
    payload = ResourcePayload.project(resource)
    if payload.others is not None:
        logger.info(
            "Found custom metadata on the resource to update, "
            "going to completely replace custom resource metadata on the server."
        )
        return payload

    logger.info(
        "Found no custom metadata on the resource to update, merging custom "
        "metadata from the server to prevent accidental erasures."
    )
    current = fetch()
    if current.others is not None:
        for key, value in current.others.items():
            payload.put_others(key, value)
    return payload


def reconcile_dataset(
    dataset: DatasetPayload, fetch: Callable[[], CkanDataset]
) -> DatasetPayload:
    payload = DatasetPayload.project(dataset)
    current = LazyFetch(fetch)

    if payload.others is None:
        logger.info(
            "Found no custom metadata (anything other than 'extras') on the dataset "
            "to update, merging custom metadata from the server."
        )
        if current().others is not None:
            payload.others = dict(current().others)
    else:
        logger.info(
            "Found custom metadata on the dataset to update, "
            "going to completely replace custom dataset metadata on the server."
        )

    if payload.extras is None:
        logger.info("Found no 'extras' on the dataset to update, merging 'extras' from the server.")
        if current().extras is not None:
            payload.extras = list(current().extras)
    else:
        logger.info("Found 'extras' on the dataset to update, going to replace them on the server.")

    if payload.resources is None:
        logger.info(
            "Found no 'resources' on the dataset to update, merging 'resources' from the server."
        )
        if current().resources is not None:
            payload.resources = [ResourcePayload.project(r) for r in current().resources]
    else:
        logger.info(
            "Found 'resources' on the dataset to update, going to replace them on the server."
        )

    return payload
