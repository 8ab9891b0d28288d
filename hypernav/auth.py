"""Request signing for hypernav clients, implemented as httpx auth flows."""

from collections.abc import Generator
from typing import Any

import httpx
import structlog

from hypernav.errors import HttpError, http_error_from_response

logger = structlog.get_logger()

BasicAuth = httpx.BasicAuth


class BearerAuth(httpx.Auth):
    """Adds a static bearer token to every request."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("Bearer token required")
        self.token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


class OAuth2Auth(httpx.Auth):
    """OAuth2 bearer authentication with token acquisition and refresh.

    A token is requested before the first request. When a request is answered
    with 401 the token is refreshed once and the request is retried.
    """

    requires_response_body = True

    def __init__(
        self,
        token_endpoint: str,
        client_id: str,
        client_secret: str | None = None,
        grant_type: str = "client_credentials",
        username: str | None = None,
        password: str | None = None,
        refresh_token: str | None = None,
        access_token: str | None = None,
    ) -> None:
        if grant_type not in ("client_credentials", "password", "refresh_token"):
            raise ValueError(f"Unsupported OAuth2 grant type: {grant_type}")
        if grant_type == "password" and not (username and password):
            raise ValueError("OAuth2 password grant requires username and password")
        if grant_type == "refresh_token" and not refresh_token:
            raise ValueError("OAuth2 refresh_token grant requires a refresh token")

        self.token_endpoint = token_endpoint
        self.client_id = client_id
        self.client_secret = client_secret
        self.grant_type = grant_type
        self.username = username
        self.password = password
        self.refresh_token = refresh_token
        self.access_token = access_token

    def _token_request(self) -> httpx.Request:
        data: dict[str, Any] = {"client_id": self.client_id}
        if self.client_secret:
            data["client_secret"] = self.client_secret

        if self.refresh_token:
            data["grant_type"] = "refresh_token"
            data["refresh_token"] = self.refresh_token
        elif self.grant_type == "password":
            data["grant_type"] = "password"
            data["username"] = self.username
            data["password"] = self.password
        else:
            data["grant_type"] = "client_credentials"

        logger.debug("Requesting OAuth2 token", token_endpoint=self.token_endpoint, grant_type=data["grant_type"])
        return httpx.Request("POST", self.token_endpoint, data=data, headers={"Accept": "application/json"})

    def _update_token(self, response: httpx.Response) -> None:
        if not response.is_success:
            logger.warning("OAuth2 token request failed", status=response.status_code)
            raise http_error_from_response(response)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise HttpError(response.status_code, response, "OAuth2 token response has no access_token")

        self.access_token = token
        # Servers may rotate refresh tokens
        if payload.get("refresh_token"):
            self.refresh_token = payload["refresh_token"]
        logger.info("OAuth2 token obtained", token_endpoint=self.token_endpoint)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self.access_token is None:
            token_response = yield self._token_request()
            self._update_token(token_response)

        request.headers["Authorization"] = f"Bearer {self.access_token}"
        response = yield request

        if response.status_code == 401:
            logger.info("Access token rejected, refreshing", uri=str(request.url))
            token_response = yield self._token_request()
            self._update_token(token_response)
            request.headers["Authorization"] = f"Bearer {self.access_token}"
            yield request
