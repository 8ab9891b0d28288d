"""JSON:API representor for application/vnd.api+json bodies."""

from typing import Any

import structlog

from hypernav.models import Link
from hypernav.representor import JsonRepresentor

logger = structlog.get_logger()


def _href(value: Any) -> str | None:
    """A JSON:API link is either a string or an object with an href."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("href"), str):
        return value["href"]
    return None


class JsonApiRepresentor(JsonRepresentor):
    """Parses JSON:API top-level documents.

    Links come from the top-level links object. When the primary data is an
    array, every member with a self link becomes an 'item' link of the
    collection.
    """

    content_type = "application/vnd.api+json"

    def parse_links(self, uri: str, document: Any) -> list[Link]:
        if not isinstance(document, dict):
            return []
        return self._parse_top_level_links(uri, document) + self._parse_collection(uri, document)

    def _parse_top_level_links(self, uri: str, document: dict[str, Any]) -> list[Link]:
        links = document.get("links")
        if not isinstance(links, dict):
            return []

        result = []
        for rel, value in links.items():
            if not rel or value is None:
                continue
            values = value if isinstance(value, list) else [value]
            for item in values:
                href = _href(item)
                if href is None:
                    logger.debug("Skipping malformed JSON:API link", uri=uri, rel=rel)
                    continue
                result.append(Link(context=uri, rel=rel, href=href))
        return result

    def _parse_collection(self, uri: str, document: dict[str, Any]) -> list[Link]:
        data = document.get("data")
        if not isinstance(data, list):
            # Not a collection
            return []

        result = []
        for member in data:
            if not isinstance(member, dict):
                continue
            member_links = member.get("links")
            if not isinstance(member_links, dict):
                continue
            href = _href(member_links.get("self"))
            if href is not None:
                result.append(Link(context=uri, rel="item", href=href))
        return result
