"""The hypernav client: entry point, resource cache and transport."""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from hypernav import __version__
from hypernav.errors import NetworkError, UnknownRepresentor
from hypernav.models import ContentType
from hypernav.representor import Representor
from hypernav.representors import REPRESENTORS
from hypernav.resource import Resource
from hypernav.url import resolve

if TYPE_CHECKING:
    from hypernav.config import Config

logger = structlog.get_logger()

USER_AGENT = f"hypernav/{__version__}"

DEFAULT_CONTENT_TYPES = (
    ContentType(mime="application/hal+json", representor="hal", q="1.0"),
    ContentType(mime="application/vnd.api+json", representor="jsonapi", q="0.9"),
    ContentType(mime="application/json", representor="hal", q="0.9"),
    ContentType(mime="text/html", representor="html", q="0.8"),
    ContentType(mime="text/plain", representor="plain", q="0.5"),
)


class Client:
    """Navigates a hypermedia API starting from a bookmark URI.

    The client owns the resource cache: every URI maps to exactly one
    Resource object for the lifetime of the client, until clear_cache() is
    called. Clients never share a cache.
    """

    def __init__(
        self,
        bookmark: str,
        *,
        content_types: Iterable[ContentType] | None = None,
        auth: httpx.Auth | None = None,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        fallback_to_plain: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize a client.

        Args:
            bookmark: URI of the API entry point, relative URIs resolve against it
            content_types: Content-type table, sorted by descending quality
            auth: Request signing step applied to every request
            headers: Default headers sent with every request
            transport: httpx transport, e.g. httpx.MockTransport in tests
            fallback_to_plain: Parse unregistered content types as plain text
            http_client: Pre-built httpx client; the caller keeps ownership.
                Cannot be combined with auth or transport.
        """
        self.bookmark = bookmark
        types = list(content_types) if content_types is not None else list(DEFAULT_CONTENT_TYPES)
        if not types:
            raise ValueError("At least one content type is required")
        for content_type in types:
            if content_type.representor not in REPRESENTORS:
                raise ValueError(f"Unknown representor: {content_type.representor}")
        self.content_types = sorted(types, key=lambda ct: ct.quality, reverse=True)
        self.fallback_to_plain = fallback_to_plain
        self.headers = dict(headers or {})
        self.resource_cache: dict[str, Resource] = {}
        self._representors: dict[str, Representor] = {tag: cls() for tag, cls in REPRESENTORS.items()}

        if http_client is not None:
            if auth is not None or transport is not None:
                raise ValueError("auth and transport cannot be combined with http_client")
            self.http = http_client
            self._owns_http = False
        else:
            self.http = httpx.AsyncClient(auth=auth, transport=transport, follow_redirects=True)
            self._owns_http = True

        logger.debug("Client initialized", bookmark=bookmark, content_types=[ct.mime for ct in self.content_types])

    @classmethod
    def from_config(cls, config: "Config", **kwargs: Any) -> "Client":
        """Build a client from stored configuration settings."""
        from hypernav.config import auth_from_config

        bookmark = config.get("bookmark")
        if not bookmark:
            raise ValueError("Bookmark not configured. Set it using:\n  hypernav config set bookmark <uri>")

        fallback = str(config.get("fallback_to_plain", "false")).lower() in ("1", "true", "yes")
        kwargs.setdefault("auth", auth_from_config(config))
        kwargs.setdefault("fallback_to_plain", fallback)
        return cls(bookmark, **kwargs)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client if this client created it."""
        if self._owns_http:
            await self.http.aclose()

    def get_resource(self, uri: str = "") -> Resource:
        """Return the Resource for a URI, resolved against the bookmark.

        An empty URI returns the bookmark resource. No request is made.
        """
        uri = resolve(self.bookmark, uri)
        resource = self.resource_cache.get(uri)
        if resource is None:
            logger.debug("Creating resource", uri=uri)
            resource = Resource(self, uri)
            self.resource_cache[uri] = resource
        return resource

    async def follow(self, rel: str, variables: dict[str, Any] | None = None) -> Resource:
        """Shortcut for get_resource().follow(rel, variables)."""
        return await self.get_resource().follow(rel, variables)

    def clear_cache(self) -> None:
        """Forget every cached Resource."""
        logger.debug("Clearing resource cache", count=len(self.resource_cache))
        self.resource_cache.clear()

    def get_representor(self, content_type: str) -> Representor:
        """Return the representor registered for a content type.

        Parameters such as ';charset=utf-8' are ignored.
        """
        mime = content_type.split(";")[0].strip().lower()
        for entry in self.content_types:
            if entry.mime == mime:
                return self._representors[entry.representor]
        if self.fallback_to_plain:
            logger.debug("Falling back to plain representor", content_type=mime)
            return self._representors["plain"]
        raise UnknownRepresentor(mime)

    def accept_header(self) -> str:
        """Build the Accept header from the content-type table."""
        items = []
        for content_type in self.content_types:
            item = content_type.mime
            if content_type.q:
                item += f";q={content_type.q}"
            items.append(item)
        return ", ".join(items)

    async def send(
        self,
        uri: str,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: str | bytes | None = None,
    ) -> httpx.Response:
        """Send a request through the configured transport and auth.

        Non-2xx responses are returned, not raised. Transport failures raise
        NetworkError.
        """
        request_headers = httpx.Headers(self.headers)
        if headers:
            request_headers.update(headers)
        request_headers.setdefault("User-Agent", USER_AGENT)
        request_headers.setdefault("Accept", self.accept_header())
        if body is not None:
            request_headers.setdefault("Content-Type", self.content_types[0].mime)

        logger.debug("Sending request", method=method, uri=uri)
        try:
            response = await self.http.request(method, uri, headers=request_headers, content=body)
        except httpx.TransportError as e:
            logger.warning("Request failed", method=method, uri=uri, error=str(e))
            raise NetworkError(uri, str(e)) from e

        logger.info("Received response", method=method, uri=uri, status=response.status_code)
        return response
