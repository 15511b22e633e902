"""Error types raised by the CKAN client."""

from __future__ import annotations

from typing import Any, Optional


class CkanClientError(Exception):
    """Base class for every error surfaced by the client."""


class ConfigurationError(CkanClientError):
    """Raised when an operation needs something that was not configured."""


class UrlBuildError(CkanClientError):
    """Raised when request parameters cannot be encoded into a URL."""


class TransportError(CkanClientError):
    """Raised when the HTTP exchange itself fails."""

    def __init__(self, message: str, url: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{message} Request url was: {url}")
        self.url = url
        self.cause = cause


class DecodeError(CkanClientError):
    """Raised when a response body is not a valid CKAN envelope."""

    def __init__(self, message: str, body: str) -> None:
        snippet = body[:300].replace("\n", " ").strip()
        super().__init__(f"{message} Returned text was: {snippet}")
        self.body = body


class RemoteError(CkanClientError):
    """Raised when CKAN answers with ``success: false``."""

    def __init__(self, url: str, error: Any) -> None:
        message = getattr(error, "message", None) or str(error)
        kind = getattr(error, "type", None)
        label = f"{kind}: {message}" if kind else message
        super().__init__(f"CKAN call failed: {label} (url={url})")
        self.url = url
        self.error = error


class ParseError(CkanClientError):
    """Raised for malformed or sentinel timestamps."""


class ValidationError(CkanClientError):
    """Raised when an object fails the minimal checks before being posted."""
