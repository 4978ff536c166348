"""
Shared pytest fixtures for duckkit tests.

HTTP is simulated with httpx.MockTransport routed to an in-memory FakeServer:
tests register canned responses per route and inspect the requests the
client sent.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import yaml

from duckkit.client import APIClient
from duckkit.config import Settings

BASE_URL = "http://duck.test/v1"
API_PREFIX = "/v1"

Handler = Callable[[httpx.Request], httpx.Response]


@dataclass
class RecordedRequest:
    """One request as the fake server saw it."""

    method: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    body: Any = None


class FakeServer:
    """
    Route table standing in for the platform API.

    Unregistered GETs answer with an empty list page and unregistered
    mutations succeed with an empty body, so each test only describes the
    routes it cares about.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Union[Handler, List[httpx.Response]]] = {}
        self.requests: List[RecordedRequest] = []

    # Registration

    def on(
        self,
        method: str,
        path: str,
        body: Any = None,
        status: int = 200,
        handler: Optional[Handler] = None,
    ) -> None:
        """Answer ``method path`` with a fixed response or a handler."""
        if handler is None:
            response_body = {} if body is None else body

            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=response_body)

        self.routes[(method, path)] = handler

    def list(self, path: str, rows: List[Dict[str, Any]]) -> None:
        """Serve ``rows`` as a single list page."""
        self.on("GET", path, body={"data": rows})

    def sequence(self, method: str, path: str, responses: List[httpx.Response]) -> None:
        """Answer successive calls with successive responses; the last one repeats."""
        self.routes[(method, path)] = list(responses)

    def error(self, method: str, path: str, status: int, message: str = "") -> None:
        self.on(method, path, body={"message": message or f"HTTP {status}"}, status=status)

    # Dispatch

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]

        request.read()
        body = json.loads(request.content) if request.content else None
        self.requests.append(
            RecordedRequest(request.method, path, dict(request.url.params), body)
        )

        route = self.routes.get((request.method, path))
        if isinstance(route, list):
            return route.pop(0) if len(route) > 1 else route[0]
        if route is not None:
            return route(request)
        if request.method == "GET":
            return httpx.Response(200, json={"data": []})
        return httpx.Response(200, json={})

    # Inspection

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> List[RecordedRequest]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or r.path == path)
        ]

    def mutations(self) -> List[RecordedRequest]:
        return [r for r in self.requests if r.method != "GET"]


@pytest.fixture
def fake_server() -> FakeServer:
    """Fresh fake platform API."""
    return FakeServer()


@pytest.fixture
def client(fake_server: FakeServer) -> APIClient:
    """Client authenticated with a bearer token, wired to the fake server."""
    api = APIClient(BASE_URL, token="test-token", transport=httpx.MockTransport(fake_server.handle))
    yield api
    api.close()


@pytest.fixture
def api_key_client(fake_server: FakeServer) -> APIClient:
    """Client authenticated with an API key, wired to the fake server."""
    api = APIClient(
        BASE_URL, api_key="dk_live_abc123secret", transport=httpx.MockTransport(fake_server.handle)
    )
    yield api
    api.close()


@pytest.fixture
def settings() -> Settings:
    """Settings that ignore the process environment and any .env file."""
    return Settings(_env_file=None, host=BASE_URL, token="test-token")


@pytest.fixture(autouse=True)
def clean_duckkit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DUCKKIT_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("DUCKKIT_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, Dict[str, Any]], Path]:
    """Write one YAML document below ``tmp_path``, creating parent directories."""

    def write(relative: str, document: Dict[str, Any]) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return path

    return write
