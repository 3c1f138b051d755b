"""
Backend gateway: the single place HTTP requests to the API are made.

Every call is credentialed (the client's cookie jar carries the session
cookie between requests) and speaks JSON.

Usage:
    async with BackendGateway("https://shop.example.com/api") as gateway:
        response = await gateway.call("auth/status", "GET")
"""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING, Any

import httpx

from crudkit.core.config import DEFAULT_TIMEOUT
from crudkit.core.errors import UnreachableServer
from crudkit.logging import get_gateway_logger

if TYPE_CHECKING:
    from crudkit.core.config import ClientConfig

logger = get_gateway_logger()

JSON_CONTENT_TYPE = "application/json"

# Methods sent without a body
_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def request_headers(method: str) -> dict[str, str]:
    """Headers for a request with the given method."""
    if method.upper() in _BODYLESS_METHODS:
        return {"Accept": JSON_CONTENT_TYPE}
    return {"Accept": JSON_CONTENT_TYPE, "Content-Type": JSON_CONTENT_TYPE}


class BackendGateway:
    """
    Thin async wrapper over httpx.AsyncClient bound to the API base URL.

    Args:
        base_url: Resolved API base (no trailing slash needed)
        client: Optional httpx client. One is created (and owned) if not provided.
        timeout: Timeout for the owned client, in seconds
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._close_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, config: ClientConfig) -> BackendGateway:
        return cls(config.api_base, timeout=config.api.timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def call(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
    ) -> httpx.Response:
        """
        Send a request to ``{base_url}/{path}``.

        Non-2xx responses are returned, not raised; callers branch on status.

        Raises:
            UnreachableServer: On any transport failure (connect, timeout, ...)
        """
        method = method.upper()
        url = self.url_for(path)
        headers = request_headers(method)

        kwargs: dict[str, Any] = {"headers": headers}
        if method not in _BODYLESS_METHODS:
            kwargs["json"] = body if body is not None else {}

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise UnreachableServer(f"Could not reach {url}: {e}") from e

        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response

    async def aclose(self) -> None:
        if self._close_client:
            await self._client.aclose()

    async def __aenter__(self) -> BackendGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
