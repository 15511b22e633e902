from functools import partial

import pytest

from ckan_catalog.client import CkanClient
from ckan_catalog.codec import DEFAULT_CODECS, EnvelopeCodec
from ckan_catalog.registry import CatalogRegistry
from ckan_catalog.services.catalog import CatalogService


@pytest.fixture
def catalog(fake_ckan, monkeypatch, tmp_path):
    cfg = tmp_path / "catalogs.yaml"
    cfg.write_text(
        """
        catalogs:
          - id: demo
            type: ckan
            title: Demo
            base_url: https://example.com
        """
    )
    registry = CatalogRegistry(cfg)
    registry.load()
    monkeypatch.setattr(
        "ckan_catalog.registry.CkanClient", partial(CkanClient, transport=fake_ckan.transport)
    )
    return CatalogService(registry)


def test_catalog_service_search(fake_ckan, catalog):
    fake_ckan.results["package_search"] = {
        "count": 1,
        "results": [
            {
                "id": "ds",
                "name": "demo",
                "title": "Demo",
                "organization": {"name": "ministry", "title": "Ministry"},
                "tags": [{"name": "water"}],
                "resources": [],
            }
        ],
    }
    result = catalog.search_datasets("demo", "demo", "ministry", None, None, 10, 0)
    assert result["count"] == 1
    assert result["datasets"][0]["title"] == "Demo"
    assert result["datasets"][0]["publisher"] == "Ministry"
    assert fake_ckan.params()["fq"] == ['((organization:"ministry"))']


def test_catalog_service_dataset_detail(fake_ckan, catalog):
    fake_ckan.results["package_show"] = {
        "id": "ds",
        "name": "demo",
        "title": "Demo",
        "metadata_created": "2014-01-01T00:00:00",
        "tags": [],
        "groups": [{"name": "environment"}],
        "extras": [{"key": "source", "value": "pat"}],
        "resources": [{"id": "r", "name": "csv", "last_modified": "None"}],
    }
    result = catalog.get_dataset("demo", "demo")
    assert result["web_url"] == "https://example.com/dataset/demo"
    assert result["groups"] == ["environment"]
    assert result["extras"] == {"source": "pat"}
    assert result["metadata_created"] == "2014-01-01T00:00:00"
    assert result["resources"][0]["last_modified"] is None


def test_catalog_service_resource_and_publishers(fake_ckan, catalog):
    fake_ckan.results["resource_show"] = {"id": "r", "name": "resource", "package_id": "ds"}
    fake_ckan.results["organization_list"] = [
        {"id": "n", "name": "ministry", "title": "Ministry"},
        {"id": "m", "name": "agency", "title": "Agency"},
    ]
    resource = catalog.get_resource("demo", "r")
    assert resource["web_url"] == "https://example.com/ds/resource/r"

    publishers = catalog.list_publishers("demo", "minis", 10)
    assert [p["name"] for p in publishers] == ["ministry"]


def test_catalog_service_groups_tags_licenses(fake_ckan, catalog):
    fake_ckan.results["group_list"] = [{"id": "g", "name": "env", "package_count": 2}]
    fake_ckan.results["tag_list"] = ["water"]
    fake_ckan.results["license_list"] = [{"id": "cc-by", "title": "CC BY"}]
    assert catalog.list_groups("demo")[0]["package_count"] == 2
    assert catalog.list_tags("demo", None) == ["water"]
    assert catalog.list_licenses("demo") == [{"id": "cc-by", "title": "CC BY", "url": None}]


def test_service_calls_reuse_the_shared_codecs(fake_ckan, catalog, mocker):
    fake_ckan.results["tag_list"] = ["water"]
    built = mocker.spy(EnvelopeCodec, "__init__")
    for _ in range(3):
        assert catalog.list_tags("demo", None) == ["water"]
    assert built.call_count == 0
    with catalog.registry.client("demo") as client:
        assert client.codecs is DEFAULT_CODECS
