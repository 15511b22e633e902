from __future__ import annotations

import json
from typing import Any, Dict, List
from urllib.parse import parse_qs

import httpx
import pytest


class FakeCkan:
    """In-memory CKAN action API for ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.results: Dict[str, Any] = {}
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        action = request.url.path.rsplit("/", 1)[-1]
        if action in self.errors:
            return httpx.Response(
                409,
                json={"help": "help", "success": False, "error": self.errors[action]},
            )
        if action not in self.results:
            return httpx.Response(
                404,
                json={
                    "help": "help",
                    "success": False,
                    "error": {"message": f"unknown action {action}", "__type": "Not Found Error"},
                },
            )
        return httpx.Response(
            200, json={"help": "help", "success": True, "result": self.results[action]}
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def actions(self) -> List[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]

    def params(self, index: int = -1) -> Dict[str, List[str]]:
        return parse_qs(self.requests[index].url.query.decode("ascii"))

    def body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_ckan() -> FakeCkan:
    return FakeCkan()
