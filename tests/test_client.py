"""Tests for the client: resource cache, representor lookup and transport."""

import httpx
import pytest

from hypernav.auth import BearerAuth
from hypernav.client import DEFAULT_CONTENT_TYPES, USER_AGENT, Client
from hypernav.errors import NetworkError, UnknownRepresentor
from hypernav.models import ContentType
from hypernav.representors import HalRepresentor, HtmlRepresentor, JsonApiRepresentor, PlainRepresentor
from tests.conftest import BOOKMARK, FakeServer


def test_get_resource_identity(client: Client) -> None:
    """Test that URIs resolving to the same absolute URI share one Resource."""
    bookmark = client.get_resource()

    assert client.get_resource("") is bookmark
    assert client.get_resource(BOOKMARK) is bookmark
    assert client.get_resource("/books/1") is client.get_resource("books/1")
    assert client.get_resource("/books/1") is client.get_resource("http://example.com/books/1")
    assert client.get_resource("/books/1") is not client.get_resource("/books/2")
    assert client.get_resource("/books/1").uri == "http://example.com/books/1"


def test_get_resource_does_no_io(client: Client, server: FakeServer) -> None:
    """Test that creating resources never sends a request."""
    client.get_resource("/a")
    client.get_resource("/b")
    assert server.requests == []


async def test_clients_do_not_share_cache() -> None:
    """Test that each client owns its own cache."""
    async with Client(BOOKMARK) as first, Client(BOOKMARK) as second:
        assert first.get_resource("/x") is not second.get_resource("/x")


def test_clear_cache(client: Client) -> None:
    """Test that clearing the cache creates fresh resources."""
    resource = client.get_resource("/x")
    client.clear_cache()

    assert client.resource_cache == {}
    assert client.get_resource("/x") is not resource


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("application/hal+json", HalRepresentor),
        ("application/hal+json; charset=utf-8", HalRepresentor),
        ("application/json", HalRepresentor),
        ("application/vnd.api+json", JsonApiRepresentor),
        (" TEXT/HTML ;charset=utf-8", HtmlRepresentor),
        ("text/plain", PlainRepresentor),
    ],
)
def test_get_representor(client: Client, content_type: str, expected: type) -> None:
    """Test looking up representors by content type."""
    assert isinstance(client.get_representor(content_type), expected)


def test_get_representor_unknown(client: Client) -> None:
    """Test that unregistered content types are rejected."""
    with pytest.raises(UnknownRepresentor, match="image/png") as exc_info:
        client.get_representor("image/png")
    assert exc_info.value.content_type == "image/png"


async def test_get_representor_fallback_to_plain() -> None:
    """Test the optional plain fallback for unregistered content types."""
    async with Client(BOOKMARK, fallback_to_plain=True) as client:
        assert isinstance(client.get_representor("image/png"), PlainRepresentor)


async def test_content_types_sorted_by_quality() -> None:
    """Test that the content-type table is ordered by descending quality."""
    content_types = [
        ContentType(mime="text/html", representor="html", q="0.5"),
        ContentType(mime="application/hal+json", representor="hal"),
    ]
    async with Client(BOOKMARK, content_types=content_types) as client:
        assert [ct.mime for ct in client.content_types] == ["application/hal+json", "text/html"]
        assert client.accept_header() == "application/hal+json, text/html;q=0.5"
        with pytest.raises(UnknownRepresentor):
            client.get_representor("application/json")


def test_invalid_content_types() -> None:
    """Test that content types must name a known representor."""
    with pytest.raises(ValueError, match="Unknown representor"):
        Client(BOOKMARK, content_types=[ContentType(mime="text/csv", representor="csv")])
    with pytest.raises(ValueError, match="At least one"):
        Client(BOOKMARK, content_types=[])


def test_default_accept_header(client: Client) -> None:
    """Test the Accept header built from the default table."""
    assert client.accept_header() == (
        "application/hal+json;q=1.0, application/vnd.api+json;q=0.9, application/json;q=0.9, "
        "text/html;q=0.8, text/plain;q=0.5"
    )
    assert client.content_types == list(DEFAULT_CONTENT_TYPES)


async def test_send_default_headers(client: Client, server: FakeServer) -> None:
    """Test the headers added to every request."""
    server.add("GET", "/", {})

    response = await client.send(BOOKMARK)

    assert response.status_code == 200
    request = server.requests[0]
    assert request.headers["User-Agent"] == USER_AGENT
    assert request.headers["Accept"] == client.accept_header()
    assert "Content-Type" not in request.headers


async def test_send_with_body(client: Client, server: FakeServer) -> None:
    """Test that bodies get the preferred content type unless one is given."""
    server.add("POST", "/", "", status=204)

    await client.send(BOOKMARK, "POST", body='{"a": 1}')
    await client.send(BOOKMARK, "POST", headers={"Content-Type": "text/plain", "Accept": "text/plain"}, body="hi")

    first, second = server.requests
    assert first.headers["Content-Type"] == "application/hal+json"
    assert first.content == b'{"a": 1}'
    assert second.headers["Content-Type"] == "text/plain"
    assert second.headers["Accept"] == "text/plain"


async def test_send_client_headers(server: FakeServer) -> None:
    """Test default headers configured on the client."""
    server.add("GET", "/", {})
    transport = httpx.MockTransport(server.handle)
    async with Client(BOOKMARK, headers={"X-Api-Key": "secret"}, transport=transport) as client:
        await client.send(BOOKMARK)

    assert server.requests[0].headers["X-Api-Key"] == "secret"


async def test_send_non_2xx_is_returned(client: Client) -> None:
    """Test that HTTP errors are results, not exceptions, at the transport level."""
    response = await client.send("http://example.com/missing")
    assert response.status_code == 404


async def test_send_network_error() -> None:
    """Test that transport failures raise NetworkError."""

    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with Client(BOOKMARK, transport=httpx.MockTransport(fail)) as client:
        with pytest.raises(NetworkError, match="connection refused") as exc_info:
            await client.send(BOOKMARK)

    assert exc_info.value.uri == BOOKMARK


async def test_external_http_client_is_not_closed(server: FakeServer) -> None:
    """Test that a caller-supplied httpx client stays open."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(server.handle))
    async with Client(BOOKMARK, http_client=http_client) as client:
        assert client.http is http_client

    assert not http_client.is_closed
    await http_client.aclose()


async def test_follow_shortcut(client: Client, server: FakeServer) -> None:
    """Test following a relation from the bookmark."""
    server.add("GET", "/", {"_links": {"author": {"href": "/people/1"}}})

    author = await client.follow("author")

    assert author is client.get_resource("/people/1")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"auth": BearerAuth("abc")},
        {"transport": httpx.MockTransport(lambda request: httpx.Response(200))},
    ],
)
async def test_external_http_client_rejects_auth_and_transport(kwargs: dict) -> None:
    """Test that settings the external httpx client would ignore are rejected."""
    async with httpx.AsyncClient() as http_client:
        with pytest.raises(ValueError, match="cannot be combined with http_client"):
            Client(BOOKMARK, http_client=http_client, **kwargs)
