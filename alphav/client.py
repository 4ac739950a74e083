"""
Alpha Vantage API client.

This module defines the :class:`AlphaVantageClient` class, the handle
every request builder is created from.  The client holds the API key,
the query URL and the transport that performs the HTTP calls.  It is
immutable once constructed, so a single instance can be shared between
concurrent tasks; use :meth:`AlphaVantageClient.with_key` to derive a
client with a different key.

Typical usage looks like this::

    from alphav import AlphaVantageClient, time_series

    async with AlphaVantageClient.from_env() as av:
        df = await time_series.daily(av, "AAPL").outputsize("compact").get_table()

A process-wide default client is available through :func:`instance`
and can be replaced with :func:`initialize`.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .config import AlphaVantageConfig
from .logging_config import log_event
from .transport import Transport, make_transport


logger = logging.getLogger(__name__)


class AlphaVantageClient:
    """Client for interacting with the Alpha Vantage REST API.

    Parameters
    ----------
    config : AlphaVantageConfig, optional
        Configuration object holding your API key and connection
        settings.  Defaults to a key-less configuration.

    transport : Transport, optional
        Object performing the HTTP calls.  When omitted one is built from
        ``config.backend`` and closed by :meth:`aclose`.
    """

    __slots__ = ("_config", "_transport", "_owns_transport", "_query_url")

    def __init__(self, config: Optional[AlphaVantageConfig] = None, *, transport: Optional[Transport] = None) -> None:
        cfg = config or AlphaVantageConfig()
        object.__setattr__(self, "_config", cfg)
        object.__setattr__(self, "_owns_transport", transport is None)
        object.__setattr__(self, "_transport", transport if transport is not None else make_transport(cfg))
        object.__setattr__(self, "_query_url", cfg.get_query_url())

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def from_env(cls, *, require_api_key: bool = False) -> "AlphaVantageClient":
        """Build a client from ``ALPHAVANTAGE_*`` environment variables."""
        return cls(AlphaVantageConfig.from_env(require_api_key=require_api_key))

    @property
    def config(self) -> AlphaVantageConfig:
        return self._config

    @property
    def api_key(self) -> Optional[str]:
        return self._config.api_key

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def query_url(self) -> str:
        return self._query_url

    def with_key(self, api_key: str) -> "AlphaVantageClient":
        """Return a new client using ``api_key`` and sharing this transport.

        The derived client never closes the shared transport; close it
        through the client that created it.
        """
        config = AlphaVantageConfig(
            api_key=api_key,
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            backend=self._config.backend,
        )
        return AlphaVantageClient(config, transport=self._transport)

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "AlphaVantageClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        key_state = "set" if self.api_key else "missing"
        return f"AlphaVantageClient(url={self._query_url!r}, backend={self._config.backend!r}, api_key={key_state})"


_default_lock = threading.Lock()
_default_client: Optional[AlphaVantageClient] = None


def initialize(client: AlphaVantageClient) -> Optional[AlphaVantageClient]:
    """Install ``client`` as the process-wide default and return the previous one."""
    global _default_client
    with _default_lock:
        previous = _default_client
        _default_client = client
    log_event(
        logger,
        logging.DEBUG,
        "Alpha Vantage default client replaced",
        av_event="default_client_set",
        av_had_previous=previous is not None,
    )
    return previous


def instance() -> AlphaVantageClient:
    """Return the process-wide default client.

    The first call without a prior :func:`initialize` builds a client
    from the environment; its API key may be missing.
    """
    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = AlphaVantageClient.from_env()
        return _default_client
