"""CLI for hypernav."""

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Literal, TypeVar

import structlog
from cyclopts import App, Parameter

from hypernav.client import Client
from hypernav.config import get_config
from hypernav.config_commands import config_app
from hypernav.models import Representation

logger = structlog.get_logger()

T = TypeVar("T")

app = App(
    help="hypernav - Navigate hypermedia APIs by link relation",
)

app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_client() -> Client:
    """Get a client for the configured bookmark."""
    return Client.from_config(get_config())


def run(func: Callable[[Client], Awaitable[T]]) -> T:
    """Run a coroutine against a fresh client, closing it afterwards."""

    async def main() -> T:
        async with get_client() as client:
            return await func(client)

    return asyncio.run(main())


def format_body(body: Any) -> str:
    if isinstance(body, (dict, list)):
        return json.dumps(body, indent=2)
    return str(body)


def print_representation(representation: Representation) -> None:
    print(f"URI: {representation.uri}")
    print(f"Content-Type: {representation.content_type}")
    print()
    print(format_body(representation.body))


@app.command
def get(uri: str = "") -> None:
    """Fetch a resource and print its body."""

    async def fetch(client: Client) -> Representation:
        return await client.get_resource(uri).get()

    print_representation(run(fetch))


@app.command
def links(uri: str = "", rel: str | None = None) -> None:
    """List the links of a resource."""

    async def fetch(client: Client) -> list:
        return await client.get_resource(uri).links(rel)

    found = run(fetch)
    if not found:
        print("No links found")
        return

    for link in found:
        target = link.href if link.templated else link.resolve()
        suffix = " (templated)" if link.templated else ""
        title = f" [{link.title}]" if link.title else ""
        print(f"{link.rel} -> {target}{suffix}{title}")


@app.command
def follow(*rels: str, uri: str = "") -> None:
    """Follow a chain of relations and print the resource at the end."""

    async def walk(client: Client) -> Representation:
        resource = client.get_resource(uri)
        for rel in rels:
            resource = await resource.follow(rel)
            logger.info("Followed relation", rel=rel, uri=resource.uri)
        return await resource.get()

    print_representation(run(walk))


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
