"""Shared httpx plumbing for remote clients."""

from __future__ import annotations

from typing import Any

import httpx

from hookrelay.errors import RemoteAPIError
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)


class ApiClient:
    """Thin JSON client over ``httpx.AsyncClient``.

    Every failure, HTTP status or transport, surfaces as ``RemoteAPIError``.
    No retries happen here.
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = headers or {}
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
        expect_body: bool = True,
    ) -> Any:
        """Send a request and decode its JSON body.

        With ``expect_body=False`` the call is an acknowledgement and any
        2xx body is discarded.
        """
        try:
            resp = await self.http.request(
                method, path, json=json, headers={**self._headers, **(headers or {})}
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.warning("remote_call_failed", method=method, path=path, status=status)
            raise RemoteAPIError(method, path, status, e.response.text[:200]) from e
        except httpx.TransportError as e:
            log.warning("remote_call_failed", method=method, path=path, error=str(e))
            raise RemoteAPIError(method, path, None, str(e) or type(e).__name__) from e

        if not expect_body or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            log.warning("remote_call_bad_body", method=method, path=path, status=resp.status_code)
            raise RemoteAPIError(method, path, resp.status_code, "invalid JSON body") from e
