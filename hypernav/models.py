"""Data models for hypernav."""

from dataclasses import dataclass, field, replace
from typing import Any

import uritemplate

from hypernav.url import resolve


@dataclass(frozen=True)
class Link:
    """Represents a hyperlink from a context URI to a target href."""

    context: str
    rel: str
    href: str
    templated: bool = False
    title: str | None = None
    type: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if not self.rel:
            raise ValueError("Link relation must not be empty")

    def resolve(self) -> str:
        """Return the absolute target URI of this link."""
        return resolve(self.context, self.href)

    def expand(self, variables: dict[str, Any] | None = None) -> "Link":
        """Expand a templated href, returning a non-templated link.

        Non-templated links are returned unchanged.
        """
        if not self.templated:
            return self
        return replace(self, href=uritemplate.expand(self.href, variables or {}), templated=False)

    def variables(self) -> set[str]:
        """Return the names of the template variables in href."""
        if not self.templated:
            return set()
        return set(uritemplate.variables(self.href))


@dataclass(frozen=True)
class ContentType:
    """Maps a media type to a representor tag with an Accept quality value."""

    mime: str
    representor: str
    q: str | None = None

    @property
    def quality(self) -> float:
        return float(self.q) if self.q is not None else 1.0


@dataclass(frozen=True)
class Representation:
    """Represents one parsed response body for a URI."""

    uri: str
    content_type: str
    body: Any = None
    links: tuple[Link, ...] = ()
    embedded: dict[str, Any] = field(default_factory=dict)

    @property
    def self_uri(self) -> str:
        """Absolute URI confirmed by the first 'self' link, or the request URI."""
        for link in self.links:
            if link.rel == "self":
                return link.resolve()
        return self.uri

    def get_links(self, rel: str | None = None) -> list[Link]:
        """Return links in document order, optionally filtered by relation."""
        if rel is None:
            return list(self.links)
        return [link for link in self.links if link.rel == rel]
