import dataclasses
from urllib.parse import parse_qs

import pytest

from ckan_catalog.query import CkanQuery, build_filter_clause, build_search_params


def test_empty_query_only_paginates():
    assert build_search_params(CkanQuery.filter().by_text(""), 10, 0) == "rows=10&start=0"


def test_text_spaces_are_percent_encoded():
    params = build_search_params(CkanQuery.filter().by_text("open data"), 1, 0)
    assert params == "rows=1&start=0&q=open%20data"
    assert "+" not in params


def test_filter_clause_groups_and_tags():
    query = CkanQuery.filter().by_group_names(["a", "b"]).by_tag_names(["x"])
    assert build_filter_clause(query) == '((groups:"a" AND groups:"b") AND (tags:"x"))'

    params = build_search_params(query, 5, 0)
    assert params.startswith("rows=5&start=0&fq=")
    assert "%20AND%20" in params
    assert parse_qs(params)["fq"] == ['((groups:"a" AND groups:"b") AND (tags:"x"))']


def test_filter_clause_field_order_is_fixed():
    query = (
        CkanQuery.filter()
        .by_license_id("cc-by")
        .by_tag_names(["t"])
        .by_organization_names(["org"])
        .by_group_names(["g"])
    )
    assert build_filter_clause(query) == (
        '((groups:"g") AND (organization:"org") AND (tags:"t") AND (license_id:"cc-by"))'
    )


def test_text_and_filter_together():
    query = CkanQuery.filter().by_text("lakes").by_organization_names(["pat"])
    parsed = parse_qs(build_search_params(query, 10, 20))
    assert parsed == {
        "rows": ["10"],
        "start": ["20"],
        "q": ["lakes"],
        "fq": ['((organization:"pat"))'],
    }


def test_query_is_immutable():
    base = CkanQuery.filter()
    refined = base.by_text("x").by_tag_names(["t"])
    assert base.text == ""
    assert base.tag_names == ()
    assert refined.tag_names == ("t",)
    with pytest.raises(dataclasses.FrozenInstanceError):
        refined.text = "y"
