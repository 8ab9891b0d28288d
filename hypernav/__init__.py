"""Hypermedia client: navigate HAL, JSON:API and HTML APIs by link relation."""

__version__ = "0.1.0"

from hypernav.client import Client  # noqa: E402
from hypernav.errors import (  # noqa: E402
    HttpError,
    HypernavError,
    NetworkError,
    ParseError,
    ProblemError,
    RelationNotFound,
    ResourceGone,
    UnknownRepresentor,
)
from hypernav.models import ContentType, Link, Representation  # noqa: E402
from hypernav.resource import Resource, ResourceState  # noqa: E402

__all__ = [
    "Client",
    "ContentType",
    "HttpError",
    "HypernavError",
    "Link",
    "NetworkError",
    "ParseError",
    "ProblemError",
    "RelationNotFound",
    "Representation",
    "Resource",
    "ResourceGone",
    "ResourceState",
    "UnknownRepresentor",
]
