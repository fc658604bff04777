"""
HTTP transport for the Vortex platform API.

Holds the sync and async httpx clients, attaches the SDK headers and turns
non-2xx responses into :class:`VortexApiError` subclasses.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .config import DEFAULT_BASE_URL
from .errors import (
    ClientRequestError,
    ServerRequestError,
    UnexpectedResponseError,
    VortexApiError,
)

logger = logging.getLogger(__name__)

SDK_NAME = "vortex-python-sdk"


def _get_version() -> str:
    """Lazy import of version to avoid circular import"""
    from . import __version__

    return __version__


def build_headers(api_key: str) -> Dict[str, str]:
    return {
        "x-api-key": api_key,
        "Content-Type": "application/json",
        "User-Agent": f"{SDK_NAME}/{_get_version()}",
        "x-vortex-sdk-name": SDK_NAME,
        "x-vortex-sdk-version": _get_version(),
    }


def _error_detail(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or default
    return default


def handle_response(response: httpx.Response) -> Any:
    """
    Return the decoded body of a 2xx response, or raise.

    Raises:
        ClientRequestError: 4xx
        ServerRequestError: 5xx
        UnexpectedResponseError: any other non-2xx status
    """
    status = response.status_code

    if 200 <= status < 300:
        # DELETE requests may return 204 or an empty 200
        if status == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                f"Unexpected response ({status}): body is not JSON", status
            ) from e

    if 400 <= status < 500:
        detail = _error_detail(response, "Client error")
        raise ClientRequestError(f"Client error ({status}): {detail}", status)

    if 500 <= status < 600:
        detail = _error_detail(response, "Server error")
        raise ServerRequestError(f"Server error ({status}): {detail}", status)

    raise UnexpectedResponseError(
        f"Unexpected response ({status}): {response.text}", status
    )


class VortexTransport:
    """
    Issues requests against ``base_url`` with the SDK headers.

    Args:
        api_key: Vortex API key, sent as ``x-api-key``
        base_url: Base URL for the Vortex API
        timeout: Request timeout in seconds
        client: Optional preconfigured ``httpx.Client``
        async_client: Optional preconfigured ``httpx.AsyncClient``
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        async_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._headers = build_headers(api_key)
        self._client = async_client or httpx.AsyncClient(timeout=timeout)
        self._sync_client = client or httpx.Client(timeout=timeout)

    async def request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Any:
        """
        Make an API request to Vortex

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint path
            data: Request body data
            params: Query parameters

        Raises:
            VortexApiError: If the API request fails
        """
        logger.debug("Vortex API request: %s %s", method, endpoint)
        try:
            response = await self._client.request(
                method=method,
                url=f"{self.base_url}{endpoint}",
                json=data,
                params=params,
                headers=self._headers,
            )
        except httpx.RequestError as e:
            raise VortexApiError(f"Request failed: {str(e)}") from e

        return handle_response(response)

    def request_sync(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Any:
        """Synchronous twin of :meth:`request`."""
        logger.debug("Vortex API request: %s %s", method, endpoint)
        try:
            response = self._sync_client.request(
                method=method,
                url=f"{self.base_url}{endpoint}",
                json=data,
                params=params,
                headers=self._headers,
            )
        except httpx.RequestError as e:
            raise VortexApiError(f"Request failed: {str(e)}") from e

        return handle_response(response)

    async def aclose(self) -> None:
        await self._client.aclose()

    def close(self) -> None:
        self._sync_client.close()
