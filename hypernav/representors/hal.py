"""HAL representor for application/hal+json and plain JSON bodies."""

from typing import Any

import structlog

from hypernav.models import Link
from hypernav.representor import JsonRepresentor
from hypernav.url import resolve

logger = structlog.get_logger()


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    return [value]


def _self_href(body: Any) -> str | None:
    """Return the _links.self.href of an embedded body, if it has one."""
    if not isinstance(body, dict):
        return None
    links = body.get("_links")
    if not isinstance(links, dict):
        return None
    self_link = links.get("self")
    if isinstance(self_link, list):
        self_link = self_link[0] if self_link else None
    if not isinstance(self_link, dict):
        return None
    href = self_link.get("href")
    return href if isinstance(href, str) else None


class HalRepresentor(JsonRepresentor):
    """Parses HAL documents: _links and _embedded.

    A JSON document without either key is still valid HAL and has no links.
    """

    content_type = "application/hal+json"

    def _link_from_object(self, uri: str, rel: str, obj: Any) -> Link | None:
        if not isinstance(obj, dict):
            logger.debug("Skipping malformed HAL link", uri=uri, rel=rel)
            return None
        href = obj.get("href")
        if not isinstance(href, str):
            logger.debug("Skipping HAL link without href", uri=uri, rel=rel)
            return None

        def text(key: str) -> str | None:
            value = obj.get(key)
            return value if isinstance(value, str) else None

        return Link(
            context=uri,
            rel=rel,
            href=href,
            templated=obj.get("templated") is True,
            title=text("title"),
            type=text("type"),
            name=text("name"),
        )

    def parse_links(self, uri: str, document: Any) -> list[Link]:
        if not isinstance(document, dict):
            return []

        result: list[Link] = []
        links = document.get("_links")
        if isinstance(links, dict):
            for rel, value in links.items():
                if not rel:
                    continue
                for obj in _as_list(value):
                    link = self._link_from_object(uri, rel, obj)
                    if link is not None:
                        result.append(link)

        seen = {(link.rel, link.href) for link in result}
        embedded = document.get("_embedded")
        if isinstance(embedded, dict):
            for rel, value in embedded.items():
                if not rel:
                    continue
                for body in _as_list(value):
                    href = _self_href(body)
                    if href is None or (rel, href) in seen:
                        continue
                    seen.add((rel, href))
                    result.append(Link(context=uri, rel=rel, href=href))

        return result

    def parse_embedded(self, uri: str, document: Any) -> dict[str, Any]:
        if not isinstance(document, dict):
            return {}
        embedded = document.get("_embedded")
        if not isinstance(embedded, dict):
            return {}

        result: dict[str, Any] = {}
        for value in embedded.values():
            for body in _as_list(value):
                href = _self_href(body)
                if href is not None:
                    result[resolve(uri, href)] = body
        return result
