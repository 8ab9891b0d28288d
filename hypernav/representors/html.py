"""HTML representor for text/html bodies using BeautifulSoup."""

from typing import Any

import structlog
from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from hypernav.models import Link
from hypernav.representor import Representor
from hypernav.url import resolve

logger = structlog.get_logger()


def _relations(value: Any) -> list[str]:
    """Return the whitespace-separated relations of a rel attribute."""
    if isinstance(value, list):
        return [rel for item in value for rel in item.split()]
    if isinstance(value, str):
        return value.split()
    return []


def _text_attribute(element: Tag, name: str) -> str | None:
    value = element.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


class HtmlRepresentor(Representor):
    """Extracts links from <a>, <link> and <form> elements.

    Parsing is best-effort: markup the parser rejects yields no links.
    """

    content_type = "text/html"

    def decode(self, uri: str, raw_body: str) -> BeautifulSoup | None:
        try:
            return BeautifulSoup(raw_body, "html.parser")
        except ParserRejectedMarkup as e:
            logger.warning("Failed to parse HTML document", uri=uri, error=str(e))
            return None

    def _base_uri(self, uri: str, soup: Tag) -> str:
        base = soup.find("base", href=True)
        if isinstance(base, Tag):
            href = _text_attribute(base, "href")
            if href:
                return resolve(uri, href)
        return uri

    def parse_links(self, uri: str, document: Any) -> list[Link]:
        if isinstance(document, str):
            document = self.decode(uri, document)
        if not isinstance(document, Tag):
            return []

        base = self._base_uri(uri, document)
        result: list[Link] = []
        for element in document.find_all(["a", "link", "form"]):
            rels = _relations(element.get("rel"))
            if not rels:
                continue

            if element.name == "form":
                href = _text_attribute(element, "action") or uri
            else:
                href = _text_attribute(element, "href")
                if href is None:
                    continue

            title = _text_attribute(element, "title")
            type_ = _text_attribute(element, "type")
            for rel in rels:
                result.append(Link(context=base, rel=rel, href=href, title=title, type=type_))

        logger.debug("Parsed HTML links", uri=uri, count=len(result))
        return result
