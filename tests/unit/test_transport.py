import httpx
import pytest

from ckan_catalog.codec import Codecs
from ckan_catalog.errors import (
    ConfigurationError,
    DecodeError,
    RemoteError,
    TransportError,
)
from ckan_catalog.models import CkanDataset
from ckan_catalog.transport import CkanConfig, HostPort, Transport, build_url

ACTION = "/api/3/action/package_show"


def make_transport(handler, token=None):
    config = CkanConfig("https://ckan.test/", token=token)
    return Transport(config, Codecs(), transport=httpx.MockTransport(handler))


def ok(result):
    def handler(request):
        return httpx.Response(200, json={"success": True, "result": result})

    return handler


def test_build_url_encodes_keys_and_values():
    url = build_url("https://ckan.test", ACTION, [("id", "a b"), ("x&y", "é=1")])
    assert url == "https://ckan.test/api/3/action/package_show?id=a+b&x%26y=%C3%A9%3D1"


def test_build_url_without_params():
    assert build_url("https://ckan.test", ACTION) == "https://ckan.test" + ACTION


def test_build_url_formats_booleans():
    url = build_url("https://ckan.test", "/p", [("all_fields", True), ("include_datasets", False)])
    assert url.endswith("?all_fields=true&include_datasets=false")


def test_config_normalizes_url_and_masks_token():
    config = CkanConfig("https://ckan.test///", token="secret")
    assert config.catalog_url == "https://ckan.test"
    assert "secret" not in repr(config)


def test_config_requires_url():
    with pytest.raises(ConfigurationError):
        CkanConfig("  ")


def test_proxy_url():
    assert HostPort("proxy.local", 3128).url == "http://proxy.local:3128"


def test_get_without_token_sends_no_authorization():
    seen = []

    def handler(request):
        seen.append(request)
        return ok({"id": "ds"})(request)

    transport = make_transport(handler)
    dataset = transport.get(CkanDataset, ACTION, [("id", "ds")])
    assert dataset.id == "ds"
    assert "authorization" not in seen[0].headers
    assert seen[0].url.params["id"] == "ds"


def test_get_with_token_sends_authorization():
    seen = []

    def handler(request):
        seen.append(request)
        return ok(["a"])(request)

    make_transport(handler, token="secret").get(list, "/api/3/action/package_list")
    assert seen[0].headers["authorization"] == "secret"


def test_post_always_sends_authorization_and_body():
    seen = []

    def handler(request):
        seen.append(request)
        return ok({"id": "ds"})(request)

    transport = make_transport(handler)
    transport.post(CkanDataset, "/api/3/action/package_create", '{"name": "n"}')
    request = seen[0]
    assert request.method == "POST"
    assert request.headers["authorization"] == ""
    assert request.headers["content-type"] == "application/json"
    assert request.content == b'{"name": "n"}'


def test_unsuccessful_envelope_raises_remote_error_even_with_result():
    def handler(request):
        return httpx.Response(
            403,
            json={
                "success": False,
                "result": {"id": "ignored"},
                "error": {"message": "Access denied", "__type": "Authorization Error"},
            },
        )

    with pytest.raises(RemoteError) as excinfo:
        make_transport(handler).get(CkanDataset, ACTION, [("id", "ds")])
    assert excinfo.value.url == "https://ckan.test/api/3/action/package_show?id=ds"
    assert excinfo.value.error.message == "Access denied"
    assert "Authorization Error" in str(excinfo.value)


def test_connection_failure_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        make_transport(handler).get(CkanDataset, ACTION, [("id", "ds")])
    assert excinfo.value.url.endswith("package_show?id=ds")
    assert isinstance(excinfo.value.cause, httpx.ConnectError)


def test_undecodable_bytes_raise_transport_error():
    def handler(request):
        return httpx.Response(200, content=b"\xff\xfe\xfa")

    with pytest.raises(TransportError):
        make_transport(handler).get(CkanDataset, ACTION)


def test_non_json_body_raises_decode_error():
    def handler(request):
        return httpx.Response(502, text="<html>Bad gateway</html>")

    with pytest.raises(DecodeError) as excinfo:
        make_transport(handler).get(CkanDataset, ACTION)
    assert excinfo.value.body == "<html>Bad gateway</html>"


def test_transport_closes_its_http_client_on_exit():
    with make_transport(ok(["a"])) as transport:
        assert transport.get(list, "/api/3/action/package_list") == ["a"]
    assert transport._client.is_closed
