"""
HTTP transports used to reach the Alpha Vantage ``/query`` endpoint.

Request builders only ever talk to the :class:`Transport` protocol.  Two
interchangeable implementations are provided, one on ``httpx`` and one on
``aiohttp``; the client picks one at construction time (see
:func:`make_transport`) or accepts any object that satisfies the protocol.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

import aiohttp
import httpx

from .config import AlphaVantageConfig
from .errors import InvalidBodyError, TransportConnectionError, TransportTimeoutError
from .logging_config import redact


REQUEST_ID_HEADER = "X-Request-Id"


@dataclass(frozen=True)
class RawResponse:
    """Status and text body of one HTTP round trip."""

    status_code: int
    body: str
    request_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    async def send(self, url: str, params: Mapping[str, str], api_key: str) -> RawResponse:
        ...

    async def aclose(self) -> None:
        ...


def _decode_body(content: bytes, url: str) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidBodyError(f"Response from {url} is not valid UTF-8 ({exc.reason}).") from exc


def _with_key(params: Mapping[str, str], api_key: str) -> dict:
    query = dict(params)
    query["apikey"] = api_key
    return query


class HttpxTransport:
    """Transport backed by :class:`httpx.AsyncClient`.

    Pass ``http_client`` to reuse a pool or to inject an
    ``httpx.MockTransport`` in tests; an injected client is not closed by
    :meth:`aclose`.
    """

    def __init__(self, *, timeout: float = 10.0, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self._timeout = float(timeout)
        self._owns_client = http_client is None
        self._client = http_client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # trust_env=False keeps proxy settings from the environment out of the way.
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout), trust_env=False)
        return self._client

    async def send(self, url: str, params: Mapping[str, str], api_key: str) -> RawResponse:
        client = self._get_client()
        try:
            response = await client.get(url, params=_with_key(params, api_key))
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(f"Request to {url} timed out after {self._timeout}s.") from exc
        except httpx.RequestError as exc:
            detail = redact(str(exc), api_key) or type(exc).__name__
            raise TransportConnectionError(f"Request to {url} failed: {detail}") from exc

        return RawResponse(
            status_code=int(response.status_code),
            body=_decode_body(response.content, url),
            request_id=response.headers.get(REQUEST_ID_HEADER),
        )

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class AiohttpTransport:
    """Transport backed by :class:`aiohttp.ClientSession`.

    An owned session is bound to the event loop that created it.  It is
    rebuilt when a later call runs on a different loop (for example a
    second ``asyncio.run``) or after it has been closed.  An injected
    session is used as given.
    """

    def __init__(self, *, timeout: float = 10.0, session: Optional[aiohttp.ClientSession] = None) -> None:
        self._timeout = float(timeout)
        self._owns_session = session is None
        self._session = session
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if not self._owns_session:
            return self._session
        loop = asyncio.get_running_loop()
        if self._session is None or self._session.closed or self._loop is not loop:
            # A session left on a finished loop cannot be closed from here; drop it.
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout))
            self._loop = loop
        return self._session

    async def send(self, url: str, params: Mapping[str, str], api_key: str) -> RawResponse:
        session = self._get_session()
        try:
            async with session.get(url, params=_with_key(params, api_key)) as resp:
                content = await resp.read()
                status = int(resp.status)
                request_id = resp.headers.get(REQUEST_ID_HEADER)
        except asyncio.TimeoutError as exc:
            raise TransportTimeoutError(f"Request to {url} timed out after {self._timeout}s.") from exc
        except aiohttp.ClientError as exc:
            detail = redact(str(exc), api_key) or type(exc).__name__
            raise TransportConnectionError(f"Request to {url} failed: {detail}") from exc

        return RawResponse(status_code=status, body=_decode_body(content, url), request_id=request_id)

    async def aclose(self) -> None:
        if not self._owns_session or self._session is None:
            return
        session, self._session = self._session, None
        if self._loop is asyncio.get_running_loop():
            await session.close()
        self._loop = None


def make_transport(config: AlphaVantageConfig) -> Transport:
    """Return the default transport for ``config.backend``."""
    if config.backend == "aiohttp":
        return AiohttpTransport(timeout=config.timeout)
    return HttpxTransport(timeout=config.timeout)
