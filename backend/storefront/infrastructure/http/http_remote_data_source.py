"""Storefront HTTP client: implements the RemoteDataSource interface.

Talks to the storefront's JSON collection routes (``/products``,
``/categories``, ...) with httpx. Every response body is passed through
identity normalization here, at the boundary, so cached records only ever
carry ``id``.
"""

import logging
from typing import Any

import httpx

from storefront.application.interfaces import RemoteDataSource
from storefront.domain.exceptions import (
    RemoteAuthorizationError,
    RemoteConflictError,
    RemoteDataSourceError,
    RemoteNotFoundError,
    RemoteServerError,
    RemoteTransportError,
    RemoteValidationError,
)
from storefront.domain.identity import normalize_payload

logger = logging.getLogger(__name__)

_STATUS_ERRORS: dict[int, type[RemoteDataSourceError]] = {
    400: RemoteValidationError,
    401: RemoteAuthorizationError,
    403: RemoteAuthorizationError,
    404: RemoteNotFoundError,
    409: RemoteConflictError,
    422: RemoteValidationError,
}


class HttpRemoteDataSource(RemoteDataSource):
    """One pooled httpx.AsyncClient against the storefront API.

    The client may be injected (tests pass one built on ``httpx.MockTransport``);
    otherwise one is created lazily and closed by ``aclose()``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create the owned one."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    async def get(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        return await self._request("GET", endpoint, params=params)

    async def post(self, endpoint: str, body: Any) -> Any:
        return await self._request("POST", endpoint, json=body)

    async def put(self, endpoint: str, body: Any) -> Any:
        return await self._request("PUT", endpoint, json=body)

    async def delete(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        return await self._request("DELETE", endpoint, params=params)

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        url = self._url(endpoint)
        client = self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteTransportError(f"{method} {url} timed out") from exc
        except httpx.HTTPError as exc:
            raise RemoteTransportError(f"{method} {url} failed: {exc}") from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if response.status_code >= 400:
            self._raise_remote_error(response)

        if not response.content:
            return None
        try:
            return normalize_payload(response.json())
        except ValueError as exc:
            raise RemoteServerError(
                f"{method} {url} returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

    def _raise_remote_error(self, response: httpx.Response) -> None:
        """Raise the RemoteDataSourceError subclass matching the response status."""
        server_message: str | None = None
        payload: Any = None
        try:
            payload = response.json()
        except ValueError:
            payload = response.text or None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                error = error.get("message")
            server_message = error or payload.get("message")
            if server_message is not None and not isinstance(server_message, str):
                server_message = str(server_message)

        status_code = response.status_code
        error_cls = _STATUS_ERRORS.get(status_code)
        if error_cls is None:
            error_cls = RemoteServerError if status_code >= 500 else RemoteDataSourceError

        raise error_cls(
            server_message or response.reason_phrase or f"HTTP {status_code}",
            status_code=status_code,
            server_message=server_message,
            payload=payload,
        )
