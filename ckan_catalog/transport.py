"""HTTP transport for CKAN action calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple
from urllib.parse import quote_plus

import httpx

from ckan_catalog.codec import Codecs
from ckan_catalog.errors import ConfigurationError, RemoteError, TransportError, UrlBuildError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

Params = Sequence[Tuple[str, Any]]


@dataclass(frozen=True)
class HostPort:
    host: str
    port: int
    scheme: str = "http"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


@dataclass(frozen=True)
class CkanConfig:
    catalog_url: str
    token: Optional[str] = None
    proxy: Optional[HostPort] = None
    user_agent: str = "ckan-catalog-client/0.1"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.catalog_url or not self.catalog_url.strip():
            raise ConfigurationError("invalid ckan catalog url")
        object.__setattr__(self, "catalog_url", self.catalog_url.strip().rstrip("/"))

    def __repr__(self) -> str:
        masked = None if self.token is None else "*****MASKED_TOKEN*******"
        return f"CkanConfig(catalog_url={self.catalog_url!r}, token={masked!r}, proxy={self.proxy!r})"


def _format_param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(catalog_url: str, path: str, params: Params = ()) -> str:
    """Join ``catalog_url`` and ``path`` and append the form-encoded ``params``.

    Params are given unencoded, e.g. ``[("id", "laghi-monitorati-trento")]``.
    """
    try:
        url = catalog_url + path
        for i, (key, value) in enumerate(params):
            url += ("?" if i == 0 else "&") + quote_plus(_format_param(key)) + "=" + quote_plus(
                _format_param(value)
            )
        return url
    except (TypeError, ValueError, UnicodeError) as exc:
        raise UrlBuildError(
            f"Error while building url! path: {path} params: {list(params)}"
        ) from exc


class Transport:
    """Performs GET/POST calls and turns envelopes into typed results."""

    def __init__(
        self,
        config: CkanConfig,
        codecs: Codecs,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config
        self.codecs = codecs
        self._client = httpx.Client(
            timeout=config.timeout,
            headers={
                "User-Agent": config.user_agent,
                "Accept": JSON_CONTENT_TYPE,
            },
            follow_redirects=True,
            proxy=config.proxy.url if config.proxy else None,
            transport=transport,
        )

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _read(self, url: str, request: httpx.Request) -> str:
        try:
            response = self._client.send(request)
            return response.content.decode("utf-8")
        except (httpx.HTTPError, UnicodeDecodeError) as exc:
            raise TransportError(
                f"Error while performing {request.method}!", url, exc
            ) from exc

    def _interpret(self, result_type: Any, url: str, body: str) -> Any:
        envelope = self.codecs.envelope.decode_envelope(body)
        if not envelope.success:
            raise RemoteError(url, envelope.error)
        return self.codecs.envelope.decode_result(result_type, envelope, body)

    def get(self, result_type: Any, path: str, params: Params = ()) -> Any:
        url = build_url(self.config.catalog_url, path, params)
        headers = {}
        if self.config.token is not None:
            headers["Authorization"] = self.config.token
        logger.debug("getting %s", url)
        body = self._read(url, self._client.build_request("GET", url, headers=headers))
        return self._interpret(result_type, url, body)

    def post(
        self,
        result_type: Any,
        path: str,
        body: str,
        content_type: str = JSON_CONTENT_TYPE,
        params: Params = (),
    ) -> Any:
        url = build_url(self.config.catalog_url, path, params)
        headers = {
            "Content-Type": content_type,
            "Authorization": self.config.token or "",
        }
        logger.debug("posting to %s", url)
        logger.debug("sending body: %s", body)
        request = self._client.build_request(
            "POST", url, content=body.encode("utf-8"), headers=headers
        )
        text = self._read(url, request)
        return self._interpret(result_type, url, text)
