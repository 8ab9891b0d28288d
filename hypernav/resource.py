"""Resources: one object per URI, caching its latest representation."""

import asyncio
import json
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from hypernav.errors import RelationNotFound, ResourceGone, http_error_from_response
from hypernav.links import links_from_response
from hypernav.models import Link, Representation
from hypernav.representor import Representor
from hypernav.url import resolve

if TYPE_CHECKING:
    from hypernav.client import Client

logger = structlog.get_logger()


class ResourceState(str, Enum):
    """Lifecycle of a Resource's cached representation."""

    UNFETCHED = "unfetched"
    FETCHING = "fetching"
    FETCHED = "fetched"
    INVALIDATED = "invalidated"
    GONE = "gone"


class Resource:
    """A single resource on a hypermedia API, identified by its URI.

    Resources are created by Client.get_resource() and never directly. The
    representation is fetched lazily on the first get() and kept until a
    successful write invalidates it.

    At most one fetch is in flight per resource. Concurrent get() calls share
    the pending future, so they all receive the same representation or the
    same exception. The asyncio model is single-threaded: state only changes
    between await points, so no lock is needed.
    """

    def __init__(self, client: "Client", uri: str) -> None:
        self.client = client
        self.uri = uri
        self.representation: Representation | None = None
        self._state = ResourceState.UNFETCHED
        self._pending: asyncio.Future[Representation] | None = None
        # Bumped by every successful write; a fetch started under an older
        # generation must not cache its result.
        self._generation = 0

    def __repr__(self) -> str:
        return f"<Resource {self.uri!r} {self.state.value}>"

    @property
    def state(self) -> ResourceState:
        if self._pending is not None:
            return ResourceState.FETCHING
        return self._state

    async def get(self) -> Representation:
        """Return the cached representation, fetching it if needed.

        Raises:
            ResourceGone: The resource was deleted through this client
            HttpError: The server answered with a non-2xx status
            UnknownRepresentor: The response content type is not registered
            ParseError: The body is not valid for its content type
            NetworkError: The request failed before a response arrived
        """
        if self._state is ResourceState.GONE:
            logger.warning("Resource was deleted", uri=self.uri)
            raise ResourceGone(self.uri)

        if self.representation is not None:
            logger.debug("Representation cache hit", uri=self.uri)
            return self.representation

        return await self._shared_fetch()

    async def refresh(self) -> Representation:
        """Fetch the representation again, ignoring the cache.

        This is the only way to bring a deleted resource back.
        """
        return await self._shared_fetch()

    def _shared_fetch(self) -> "asyncio.Future[Representation]":
        if self._pending is None:
            future = asyncio.ensure_future(self._fetch(self._generation))
            future.add_done_callback(self._fetch_done)
            self._pending = future
        else:
            logger.debug("Joining in-flight fetch", uri=self.uri)
        return asyncio.shield(self._pending)

    def _fetch_done(self, future: "asyncio.Future[Representation]") -> None:
        if self._pending is future:
            self._pending = None

    async def _fetch(self, generation: int) -> Representation:
        logger.info("Fetching resource", uri=self.uri)
        response = await self.client.send(self.uri, "GET")
        if not response.is_success:
            logger.warning("Fetch failed", uri=self.uri, status=response.status_code)
            raise http_error_from_response(response)

        representor = self.client.get_representor(response.headers.get("Content-Type", ""))

        # Links in a redirected response are relative to where it came from
        document_uri = str(response.url) if response.history else self.uri
        representation = representor.parse(
            document_uri, response.text, links_from_response(document_uri, response)
        )

        if generation != self._generation:
            logger.debug("Discarding fetch superseded by a write", uri=self.uri)
            return representation

        self.representation = representation
        self._state = ResourceState.FETCHED
        logger.debug("Representation cached", uri=self.uri, links=len(representation.links))
        self._prime_embedded(representor, representation)
        return representation

    def _prime_embedded(self, representor: Representor, representation: Representation) -> None:
        for uri, body in representation.embedded.items():
            resource = self.client.get_resource(uri)
            if resource is self:
                continue
            resource.prime(representor.parse_document(uri, body))

    def prime(self, representation: Representation) -> None:
        """Install an already parsed representation, e.g. from an embedded body.

        A cached representation is replaced. Deleted resources and resources
        with a fetch in flight are left alone.
        """
        if self._state is ResourceState.GONE or self._pending is not None:
            logger.debug("Skipping cache priming", uri=self.uri, state=self.state.value)
            return
        self.representation = representation
        self._state = ResourceState.FETCHED
        logger.debug("Primed resource from embedded body", uri=self.uri)

    async def links(self, rel: str | None = None) -> list[Link]:
        """Return the links of this resource, optionally filtered by relation."""
        representation = await self.get()
        return representation.get_links(rel)

    async def link(self, rel: str) -> Link:
        """Return the first link with the given relation."""
        links = await self.links(rel)
        if not links:
            logger.warning("Relation not found", uri=self.uri, rel=rel)
            raise RelationNotFound(self.uri, rel)
        return links[0]

    async def follow(self, rel: str, variables: dict[str, Any] | None = None) -> "Resource":
        """Follow the first link with the given relation.

        Args:
            rel: Relation name
            variables: Values for templated links

        Returns:
            The Resource the link points to
        """
        link = await self.link(rel)
        uri = link.expand(variables).resolve()
        logger.debug("Following link", uri=self.uri, rel=rel, target=uri)
        return self.client.get_resource(uri)

    async def follow_all(self, rel: str) -> list["Resource"]:
        """Follow every link with the given relation, in document order."""
        links = await self.links(rel)
        return [self.client.get_resource(link.expand().resolve()) for link in links]

    def _encode(self, body: Any) -> str | bytes | None:
        if body is None or isinstance(body, (str, bytes)):
            return body
        return json.dumps(body)

    async def _write(self, method: str, body: Any = None) -> httpx.Response:
        logger.info("Writing resource", method=method, uri=self.uri)
        response = await self.client.send(self.uri, method, body=self._encode(body))
        if not response.is_success:
            logger.warning("Write failed", method=method, uri=self.uri, status=response.status_code)
            raise http_error_from_response(response)

        self._generation += 1
        self._pending = None
        self.representation = None
        if method == "DELETE" or self._state is ResourceState.GONE:
            self._state = ResourceState.GONE
        else:
            self._state = ResourceState.INVALIDATED
        logger.debug("Representation invalidated", uri=self.uri, state=self._state.value)
        return response

    async def put(self, body: Any) -> None:
        """Replace the resource state with body."""
        await self._write("PUT", body)

    async def patch(self, body: Any) -> None:
        """Partially update the resource with body."""
        await self._write("PATCH", body)

    async def post(self, body: Any) -> "Resource | None":
        """POST body to this resource.

        Returns:
            The Resource named by the response's Location header, if any
        """
        response = await self._write("POST", body)
        location = response.headers.get("Location")
        if location:
            return self.client.get_resource(resolve(self.uri, location))
        return None

    async def delete(self) -> None:
        """Delete the resource. Later get() calls fail with ResourceGone."""
        await self._write("DELETE")
