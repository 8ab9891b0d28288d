"""Representor interface for turning response bodies into representations."""

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from hypernav.errors import ParseError
from hypernav.models import Link, Representation


class Representor(ABC):
    """Abstract base class for format-specific body parsers.

    Link extraction is a pure function of the body: no network access, no
    shared state. Documents with unexpected structure yield fewer links, never
    an exception.
    """

    content_type: str = "application/octet-stream"

    def parse(self, uri: str, raw_body: str, header_links: Iterable[Link] = ()) -> Representation:
        """Decode a raw response body and parse it into a representation."""
        document = self.decode(uri, raw_body)
        return self.parse_document(uri, document, header_links)

    def parse_document(self, uri: str, document: Any, header_links: Iterable[Link] = ()) -> Representation:
        """Parse an already decoded document, e.g. an embedded resource body."""
        links = list(header_links)
        links.extend(self.parse_links(uri, document))
        return Representation(
            uri=uri,
            content_type=self.content_type,
            body=document,
            links=tuple(links),
            embedded=self.parse_embedded(uri, document),
        )

    @abstractmethod
    def decode(self, uri: str, raw_body: str) -> Any:
        """Convert the raw body into the document value."""
        pass

    @abstractmethod
    def parse_links(self, uri: str, document: Any) -> list[Link]:
        """Extract the links in document order."""
        pass

    def parse_embedded(self, uri: str, document: Any) -> dict[str, Any]:
        """Return inlined sub-resource bodies keyed by absolute URI."""
        return {}


class JsonRepresentor(Representor):
    """Base class for representors whose bodies are JSON documents."""

    content_type = "application/json"

    def decode(self, uri: str, raw_body: str) -> Any:
        try:
            return json.loads(raw_body)
        except json.JSONDecodeError as e:
            raise ParseError(uri, str(e)) from e
