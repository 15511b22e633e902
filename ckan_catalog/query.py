"""Dataset search queries and the package_search parameter string."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Tuple
from urllib.parse import quote


@dataclass(frozen=True)
class CkanQuery:
    """Immutable search query. Build it with ``CkanQuery.filter()``."""

    text: str = ""
    group_names: Tuple[str, ...] = ()
    organization_names: Tuple[str, ...] = ()
    tag_names: Tuple[str, ...] = ()
    license_ids: Tuple[str, ...] = ()

    @classmethod
    def filter(cls) -> "CkanQuery":
        return cls()

    def by_text(self, text: str) -> "CkanQuery":
        return replace(self, text=text or "")

    def by_group_names(self, names: Iterable[str]) -> "CkanQuery":
        return replace(self, group_names=tuple(names))

    def by_organization_names(self, names: Iterable[str]) -> "CkanQuery":
        return replace(self, organization_names=tuple(names))

    def by_tag_names(self, names: Iterable[str]) -> "CkanQuery":
        return replace(self, tag_names=tuple(names))

    def by_license_id(self, license_id: str) -> "CkanQuery":
        return replace(self, license_ids=(license_id,))

    def by_license_ids(self, license_ids: Iterable[str]) -> "CkanQuery":
        return replace(self, license_ids=tuple(license_ids))


def url_encode(text: str) -> str:
    """Percent-encode ``text`` with spaces as ``%20``, the way CKAN's Solr proxy expects."""
    return quote(text, safe="")


def _names_clause(key: str, names: Iterable[str]) -> str:
    return "(" + " AND ".join(f'{key}:"{name}"' for name in names) + ")"


def build_filter_clause(query: CkanQuery) -> str:
    """Return the ``fq`` clause for ``query``, or an empty string if it has no filters."""
    groups: List[Tuple[str, Tuple[str, ...]]] = [
        ("groups", query.group_names),
        ("organization", query.organization_names),
        ("tags", query.tag_names),
        ("license_id", query.license_ids),
    ]
    clauses = [_names_clause(key, names) for key, names in groups if names]
    if not clauses:
        return ""
    return "(" + " AND ".join(clauses) + ")"


def build_search_params(query: CkanQuery, limit: int, offset: int) -> str:
    """Build the already-encoded query string for ``package_search``.

    ``offset`` is zero based, so ``limit=1, offset=0`` asks for the first match.
    """
    params = f"rows={limit}&start={offset}"
    if query.text:
        params += "&q=" + url_encode(query.text)
    fq = build_filter_clause(query)
    if fq:
        params += "&fq=" + url_encode(fq)
    return params
