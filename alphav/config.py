"""
Alpha Vantage configuration support.

This module defines the :class:`AlphaVantageConfig` dataclass which
encapsulates the settings a client needs: the API key, the base URL,
the request timeout and which HTTP backend performs the calls.  The
key may be omitted at construction time; requests check for it when
they are built or executed.

Example
-------

    >>> from alphav.config import AlphaVantageConfig
    >>> cfg = AlphaVantageConfig(api_key="demo")
    >>> cfg.get_query_url()
    'https://www.alphavantage.co/query'
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

BACKENDS = ("httpx", "aiohttp")


def _strip_or_none(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _env_float(name: str, default: float) -> float:
    raw = _strip_or_none(os.environ.get(name))
    if raw is None:
        return float(default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from exc


def _is_truthy(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class AlphaVantageConfig:
    """Configuration container for the Alpha Vantage client.

    Attributes
    ----------
    api_key:
        The API key issued by Alpha Vantage.  Optional here; a request
        without a key fails with :class:`~alphav.errors.ConfigurationError`
        when its query is built.

    base_url:
        The base URL of the Alpha Vantage service.  Override it when you
        run a proxy or mirror.

    timeout:
        Timeout in seconds for individual HTTP requests.

    backend:
        HTTP implementation used by the default transport, ``"httpx"``
        or ``"aiohttp"``.
    """

    api_key: Optional[str] = None
    base_url: str = "https://www.alphavantage.co"
    timeout: float = 10.0
    backend: str = "httpx"

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown HTTP backend {self.backend!r}; expected one of {', '.join(BACKENDS)}."
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout!r}.")

    def get_query_url(self) -> str:
        """Return the full query endpoint for the API.

        All Alpha Vantage functions are served from ``/query``; parameters
        travel in the query string.
        """
        return f"{self.base_url.rstrip('/')}/query"

    @staticmethod
    def from_env(*, require_api_key: bool = False) -> "AlphaVantageConfig":
        """Build a config from ``ALPHAVANTAGE_*`` environment variables.

        A ``.env`` file is loaded first unless ``ALPHAVANTAGE_DISABLE_DOTENV``
        is set; variables already present in the environment win.
        """
        if not _is_truthy(os.environ.get("ALPHAVANTAGE_DISABLE_DOTENV")):
            load_dotenv(override=False)

        api_key = _strip_or_none(os.environ.get("ALPHAVANTAGE_API_KEY"))
        if require_api_key and not api_key:
            raise ConfigurationError("ALPHAVANTAGE_API_KEY is required.")

        base_url = _strip_or_none(os.environ.get("ALPHAVANTAGE_BASE_URL")) or "https://www.alphavantage.co"
        backend = (_strip_or_none(os.environ.get("ALPHAVANTAGE_HTTP_BACKEND")) or "httpx").lower()

        return AlphaVantageConfig(
            api_key=api_key,
            base_url=base_url,
            timeout=_env_float("ALPHAVANTAGE_TIMEOUT_SECONDS", 10.0),
            backend=backend,
        )
