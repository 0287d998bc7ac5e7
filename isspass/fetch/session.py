"""Factories for httpx-backed API sessions."""
from __future__ import annotations

import contextlib
from typing import AsyncIterator, Dict, Mapping, Optional, Union

import httpx

QueryValue = Union[str, int, float]


class ApiSession:
    """Thin wrapper over an `httpx.AsyncClient` issuing JSON GET requests."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, QueryValue]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Issue a single GET and return the raw response."""
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        return await self._client.get(url, params=params, headers=request_headers)


@contextlib.asynccontextmanager
async def create_api_session(
    *,
    user_agent: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[ApiSession]:
    """Yield a configured `ApiSession` for the duration of the context."""
    headers = {"User-Agent": user_agent}
    async with httpx.AsyncClient(
        headers=headers,
        timeout=timeout,
        follow_redirects=True,
        transport=transport,
    ) as client:
        yield ApiSession(client)
