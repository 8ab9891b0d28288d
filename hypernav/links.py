"""Links carried in HTTP Link response headers (RFC 8288)."""

import re

import httpx
import structlog

from hypernav.models import Link

logger = structlog.get_logger()

_QUOTED = r'"(?:[^"\\]|\\.)*"'
_ENTRY = re.compile(r"<([^>]*)>((?:\s*;\s*[^;,=\s]+\s*(?:=\s*(?:" + _QUOTED + r"|[^;,]*))?)*)")
_PARAM = re.compile(r";\s*([^;,=\s]+)\s*(?:=\s*(" + _QUOTED + r"|[^;,]*))?")


def parse_link_header(value: str) -> list[dict[str, str]]:
    """Split one Link header value into its entries, in header order.

    Each entry is a dict with the target under "url" and one key per
    parameter, names lowercased. Quoted values are unquoted.
    """
    entries = []
    for match in _ENTRY.finditer(value):
        entry = {"url": match.group(1).strip()}
        for name, raw in _PARAM.findall(match.group(2)):
            raw = raw.strip()
            if raw.startswith('"'):
                raw = re.sub(r"\\(.)", r"\1", raw[1:-1])
            # The first occurrence of a parameter wins
            entry.setdefault(name.lower(), raw)
        entries.append(entry)
    return entries


def links_from_response(uri: str, response: httpx.Response) -> list[Link]:
    """Extract links from the Link headers of a response.

    Order and duplicate relations are preserved across entries and across
    repeated headers. An entry may declare several space-separated relations;
    each one produces its own Link. Entries without a target or relation are
    skipped.
    """
    result: list[Link] = []
    for value in response.headers.get_list("Link"):
        for entry in parse_link_header(value):
            href = entry["url"]
            if not href:
                continue
            for rel in entry.get("rel", "").split():
                result.append(
                    Link(
                        context=uri,
                        rel=rel,
                        href=href,
                        title=entry.get("title"),
                        type=entry.get("type"),
                    )
                )
    if result:
        logger.debug("Parsed Link header", uri=uri, count=len(result))
    return result
