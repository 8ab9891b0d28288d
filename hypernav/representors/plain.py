"""Plain representor for bodies that carry no in-document links."""

from typing import Any

from hypernav.models import Link
from hypernav.representor import Representor


class PlainRepresentor(Representor):
    """Keeps the raw payload as the body, undecoded.

    Only Link response headers contribute links.
    """

    content_type = "text/plain"

    def decode(self, uri: str, raw_body: str) -> str:
        return raw_body

    def parse_links(self, uri: str, document: Any) -> list[Link]:
        return []
