"""Shared fixtures: a fake hypermedia server behind httpx.MockTransport."""

import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
import pytest

from hypernav.client import Client

BOOKMARK = "http://example.com/"

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


class FakeServer:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        body: Any = "",
        status: int = 200,
        content_type: str | None = "application/hal+json",
        headers: dict[str, str] | None = None,
    ) -> None:
        content = (body if isinstance(body, str) else json.dumps(body)).encode("utf-8")
        response_headers = dict(headers or {})
        if content_type is not None:
            response_headers["Content-Type"] = content_type

        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, content=content, headers=response_headers)

        self.routes[(method, path)] = respond

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, content=b"Not Found", headers={"Content-Type": "text/plain"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


@pytest.fixture
def server() -> FakeServer:
    """Create an empty fake server."""
    return FakeServer()


@pytest.fixture
async def client(server: FakeServer) -> AsyncIterator[Client]:
    """Create a client whose requests go to the fake server."""
    async with Client(BOOKMARK, transport=httpx.MockTransport(server.handle)) as c:
        yield c
