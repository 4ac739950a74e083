"""
Alpha Vantage Client Library
============================

This package provides a typed, asynchronous interface to the Alpha
Vantage REST API.  Every supported function is exposed as a request
builder: the endpoint function takes the client and the required
parameters, optional parameters are set with fluent methods, and the
request is executed by awaiting one of three getters.

* ``get_raw()`` returns the response body as text.
* ``get_typed()`` decodes it into the dataclasses in :mod:`alphav.models`.
* ``get_table()`` projects it onto a pandas ``DataFrame``.

HTTP is performed by ``httpx`` by default; set ``backend="aiohttp"`` in
:class:`~alphav.config.AlphaVantageConfig` (or
``ALPHAVANTAGE_HTTP_BACKEND``) to use ``aiohttp`` instead.  For example::

    import asyncio
    from alphav import AlphaVantageClient, AlphaVantageConfig, fundamentals, time_series

    async def main():
        async with AlphaVantageClient(AlphaVantageConfig(api_key="YOUR_API_KEY")) as av:
            series = await time_series.daily(av, "AAPL").outputsize("full").get_typed()
            overview = await fundamentals.company_overview(av, "IBM").get_typed()
            print(series.metadata.last_refreshed, overview.market_capitalization)

    asyncio.run(main())

Agents can drive the same endpoints through :mod:`alphav.tool_use`.

The library logs through the standard ``logging`` module under the
``alphav`` logger and installs no handlers of its own.  Applications
that want its output call :func:`configure_logging` once at startup; it
reads ``LOG_FORMAT`` (``JSON`` or text) and ``LOG_LEVEL`` from the
environment.
"""

from . import fundamentals, time_series  # noqa: F401
from .client import AlphaVantageClient, initialize, instance  # noqa: F401
from .config import AlphaVantageConfig  # noqa: F401
from .errors import (  # noqa: F401
    AlphaVantageError,
    ApiError,
    ConfigurationError,
    DecodeError,
    InvalidBodyError,
    ProjectionError,
    RequestConsumedError,
    TransportConnectionError,
    TransportError,
    TransportTimeoutError,
    ValidationError,
)
from .logging_config import configure_logging  # noqa: F401
from .params import DataType, Horizon, Interval, OutputMode, OutputSize, ReportPeriod, SortOrder  # noqa: F401
from .request import ENDPOINTS, EndpointSpec, Envelope  # noqa: F401
from .table import to_frame  # noqa: F401

__all__ = [
    "AlphaVantageClient",
    "AlphaVantageConfig",
    "initialize",
    "instance",
    "time_series",
    "fundamentals",
    "ENDPOINTS",
    "EndpointSpec",
    "Envelope",
    "to_frame",
    "configure_logging",
    "DataType",
    "Horizon",
    "Interval",
    "OutputMode",
    "OutputSize",
    "ReportPeriod",
    "SortOrder",
    "AlphaVantageError",
    "ApiError",
    "ConfigurationError",
    "DecodeError",
    "InvalidBodyError",
    "ProjectionError",
    "RequestConsumedError",
    "TransportConnectionError",
    "TransportError",
    "TransportTimeoutError",
    "ValidationError",
]
