"""Exceptions raised by hypernav."""

import json
from typing import Any

import httpx

PROBLEM_CONTENT_TYPE = "application/problem+json"


class HypernavError(Exception):
    """Base class for all hypernav errors."""


class ParseError(HypernavError):
    """A response body could not be decoded."""

    def __init__(self, uri: str, message: str) -> None:
        super().__init__(f"Failed to parse response from {uri}: {message}")
        self.uri = uri


class UnknownRepresentor(HypernavError):
    """No representor is registered for a content type."""

    def __init__(self, content_type: str) -> None:
        super().__init__(f"Could not find a representor for contentType: {content_type}")
        self.content_type = content_type


class RelationNotFound(HypernavError):
    """A resource has no link with the requested relation."""

    def __init__(self, uri: str, rel: str) -> None:
        super().__init__(f"Link with rel {rel!r} not found on {uri}")
        self.uri = uri
        self.rel = rel


class NetworkError(HypernavError):
    """The transport failed before a response was received."""

    def __init__(self, uri: str, message: str) -> None:
        super().__init__(f"Request to {uri} failed: {message}")
        self.uri = uri


class HttpError(HypernavError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, response: httpx.Response | None = None, message: str | None = None) -> None:
        super().__init__(message or f"HTTP Error {status}")
        self.status = status
        self.response = response


class ProblemError(HttpError):
    """A non-2xx response carrying an application/problem+json body."""

    def __init__(self, response: httpx.Response, problem: dict[str, Any]) -> None:
        status = problem.get("status")
        if not isinstance(status, int):
            status = response.status_code
        self.type = problem.get("type")
        self.title = problem.get("title")
        self.detail = problem.get("detail")
        self.instance = problem.get("instance")
        self.problem = problem
        message = f"HTTP Error {status}"
        if self.title:
            message = f"{message}: {self.title}"
        super().__init__(status, response, message)


class ResourceGone(HttpError):
    """The resource was deleted through this client."""

    def __init__(self, uri: str) -> None:
        super().__init__(410, None, f"HTTP Error 410: {uri} was deleted")
        self.uri = uri


def http_error_from_response(response: httpx.Response) -> HttpError:
    """Build the matching HttpError for a non-2xx response.

    Problem documents become ProblemError; a problem body that is not a JSON
    object falls back to a plain HttpError.
    """
    content_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
    if content_type == PROBLEM_CONTENT_TYPE:
        try:
            problem = json.loads(response.text)
        except json.JSONDecodeError:
            problem = None
        if isinstance(problem, dict):
            return ProblemError(response, problem)
    return HttpError(response.status_code, response)
