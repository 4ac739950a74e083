"""
Request builders shared by every Alpha Vantage endpoint.

An endpoint is described once by an :class:`EndpointSpec` (wire function
id, parameters, envelope shape, result model).  Each endpoint gets a
builder subclass whose constructor takes the required parameters, so a
request that lacks one cannot be created at all.  Optional parameters
are set through fluent methods.  Executing the builder with one of the
``get_*`` coroutines consumes it.

Example
-------

    >>> from alphav import AlphaVantageClient, AlphaVantageConfig, time_series
    >>> client = AlphaVantageClient(AlphaVantageConfig(api_key="demo"))
    >>> time_series.daily(client, "AAPL").outputsize("compact").params()
    {'function': 'TIME_SERIES_DAILY', 'symbol': 'AAPL', 'outputsize': 'compact'}
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Mapping, Optional, Tuple, Type, Union

import pandas as pd
import pydantic
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from .decoder import decode
from .errors import (
    AlphaVantageError,
    ApiError,
    ConfigurationError,
    ProjectionError,
    RequestConsumedError,
    ValidationError,
)
from .logging_config import log_event
from .models import TimeSeries
from .params import (
    DataType,
    Horizon,
    Interval,
    OutputSize,
    ReportPeriod,
    SortOrder,
    validate_month,
    validate_symbol,
)
from .table import to_frame

if TYPE_CHECKING:
    from .client import AlphaVantageClient


logger = logging.getLogger(__name__)


class Envelope(Enum):
    """Top-level shape of a successful response body."""

    FLAT = "flat"
    TIME_SERIES = "time_series"
    SECTIONS = "sections"


@dataclass(frozen=True)
class EndpointSpec:
    function: str
    required: Tuple[str, ...]
    optional: Mapping[str, Optional[str]]
    envelope: Envelope
    model: type
    default_period: Optional[ReportPeriod] = None
    description: str = field(default="", compare=False)


ENDPOINTS: Dict[str, EndpointSpec] = {}
BUILDERS: Dict[str, Type["RequestBuilder"]] = {}

_TOKEN_TYPES = {
    "interval": Interval,
    "outputsize": OutputSize,
    "datatype": DataType,
    "sort": SortOrder,
    "horizon": Horizon,
}


def register(tool_id: str):
    """Class decorator adding a builder and its spec to the registries."""

    def wrap(cls: Type["RequestBuilder"]) -> Type["RequestBuilder"]:
        ENDPOINTS[tool_id] = cls.spec
        BUILDERS[tool_id] = cls
        cls.tool_id = tool_id
        return cls

    return wrap


class EndpointParams(BaseModel):
    """Base for the plain-mapping form of an endpoint's parameters.

    Token fields accept any casing, like the builder setters do.
    """

    model_config = ConfigDict(extra="forbid")

    @field_validator("symbol", mode="before", check_fields=False)
    @classmethod
    def _check_symbol(cls, value):
        return validate_symbol(value)

    @field_validator("interval", "outputsize", "datatype", "sort", "horizon", mode="before", check_fields=False)
    @classmethod
    def _parse_token(cls, value, info: ValidationInfo):
        if value is None:
            return None
        return _TOKEN_TYPES[info.field_name].parse(value)

    @field_validator("month", mode="before", check_fields=False)
    @classmethod
    def _check_month(cls, value):
        if value is None:
            return None
        return validate_month(value)


def _api_error_message(body: str, status_code: int) -> str:
    try:
        payload = json.loads(body)
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("Error Message", "Information", "Note", "message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"Alpha Vantage returned HTTP {status_code}."


class RequestBuilder:
    """Common behaviour of all endpoint builders.

    Subclasses set :attr:`spec` and :attr:`Params` and implement
    ``__init__`` with the endpoint's required parameters.
    """

    spec: ClassVar[EndpointSpec]
    Params: ClassVar[Type[EndpointParams]]
    tool_id: ClassVar[str] = ""

    def __init__(self, client: "AlphaVantageClient", required: Dict[str, str]) -> None:
        self._client = client
        self._required = dict(required)
        self._optional: Dict[str, str] = {}
        self._sort: Optional[SortOrder] = None
        self._consumed = False

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------
    def _ensure_open(self) -> None:
        if self._consumed:
            raise RequestConsumedError(f"{type(self).__name__} has already been executed.")

    def _set(self, name: str, value: str) -> "RequestBuilder":
        self._ensure_open()
        self._optional[name] = value
        return self

    def _set_sort(self, order: Union[SortOrder, str]) -> "RequestBuilder":
        self._ensure_open()
        self._sort = SortOrder.parse(order)
        return self

    def params(self) -> Dict[str, str]:
        """Return the query parameters without the API key."""
        out: Dict[str, str] = {"function": self.spec.function}
        out.update(self._required)
        for name, default in self.spec.optional.items():
            value = self._optional.get(name, default)
            if value is not None:
                out[name] = value
        return out

    def query(self) -> Dict[str, str]:
        """Return :meth:`params` plus ``apikey``.

        Raises
        ------
        ConfigurationError
            If the client has no API key.
        """
        query = self.params()
        query["apikey"] = self._require_key()
        return query

    def _require_key(self) -> str:
        api_key = self._client.api_key
        if not api_key:
            raise ConfigurationError("An Alpha Vantage API key is required; set ALPHAVANTAGE_API_KEY.")
        return api_key

    @classmethod
    def from_params(cls, client: "AlphaVantageClient", mapping: Mapping[str, Any]) -> "RequestBuilder":
        """Build a request from a plain mapping validated by :attr:`Params`."""
        try:
            model = cls.Params.model_validate(dict(mapping))
        except pydantic.ValidationError as exc:
            first = exc.errors()[0] if exc.errors() else {}
            location = first.get("loc") or ()
            parameter = str(location[0]) if location else None
            raise ValidationError(
                f"Invalid parameters for {cls.spec.function}: {exc.error_count()} error(s); "
                f"{parameter or 'request'}: {first.get('msg', 'invalid value')}",
                parameter=parameter,
            ) from exc

        builder = cls(client, *[getattr(model, name) for name in cls.spec.required])
        for name, value in model.model_dump(exclude_none=True).items():
            if name in cls.spec.required:
                continue
            getattr(builder, name)(value)
        return builder

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def _consume(self) -> None:
        self._ensure_open()
        self._consumed = True

    def _check_structured(self) -> None:
        if self._optional.get("datatype") == DataType.CSV.value:
            raise ProjectionError(
                f"{self.spec.function} was requested as CSV; only get_raw() can return it."
            )

    async def _execute(self) -> str:
        params = self.params()
        api_key = self._require_key()
        symbol = params.get("symbol")
        started = time.monotonic()
        log_event(
            logger,
            logging.DEBUG,
            "Alpha Vantage request started",
            api_key=api_key,
            av_event="request_start",
            av_function=self.spec.function,
            av_symbol=symbol,
            av_params=params,
        )
        try:
            response = await self._client.transport.send(self._client.query_url, params, api_key)
            if not response.ok:
                raise ApiError(
                    _api_error_message(response.body, response.status_code),
                    status_code=response.status_code,
                    body=response.body,
                    request_id=response.request_id,
                )
        except AlphaVantageError as exc:
            self._log_failure(exc, started, api_key, symbol)
            raise

        log_event(
            logger,
            logging.DEBUG,
            "Alpha Vantage request succeeded",
            api_key=api_key,
            av_event="request_success",
            av_function=self.spec.function,
            av_symbol=symbol,
            av_status=response.status_code,
            av_bytes=len(response.body),
            av_elapsed_ms=round((time.monotonic() - started) * 1000.0, 1),
            av_request_id=response.request_id,
        )
        return response.body

    def _log_failure(self, exc: AlphaVantageError, started: float, api_key: Optional[str], symbol: Any) -> None:
        log_event(
            logger,
            logging.ERROR,
            "Alpha Vantage request failed",
            api_key=api_key,
            av_event="request_failed",
            av_function=self.spec.function,
            av_symbol=symbol,
            av_error=exc.code,
            av_detail=exc.message,
            av_elapsed_ms=round((time.monotonic() - started) * 1000.0, 1),
        )

    async def get_raw(self) -> str:
        """Execute the request and return the body text as received."""
        self._consume()
        return await self._execute()

    async def get_typed(self) -> Any:
        """Execute the request and decode the body into the endpoint's model."""
        self._consume()
        self._check_structured()
        return await self._decode()

    async def _decode(self) -> Any:
        body = await self._execute()
        started = time.monotonic()
        try:
            value = decode(body, self.spec)
        except AlphaVantageError as exc:
            self._log_failure(exc, started, self._client.api_key, self._required.get("symbol"))
            raise
        if self._sort is not None and isinstance(value, TimeSeries):
            value = value.sorted(self._sort)
        return value

    async def _table(self, period: Optional[Union[ReportPeriod, str]] = None) -> pd.DataFrame:
        self._consume()
        self._check_structured()
        if self.spec.envelope is Envelope.FLAT:
            raise ProjectionError(f"{self.spec.function} returns a flat record with no table representation.")
        if period is None:
            period = self.spec.default_period
        value = await self._decode()
        return to_frame(value, period)

    async def get_table(self) -> pd.DataFrame:
        """Execute the request and return a DataFrame."""
        return await self._table()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params()!r})"


class TimeSeriesRequest(RequestBuilder):
    """Builder base for time series endpoints: ``datatype`` and ``sort``."""

    def datatype(self, value: Union[DataType, str]) -> "TimeSeriesRequest":
        return self._set("datatype", DataType.parse(value).value)

    def sort(self, order: Union[SortOrder, str]) -> "TimeSeriesRequest":
        """Order typed and table output by timestamp; not sent to the API."""
        return self._set_sort(order)


class SizedTimeSeriesRequest(TimeSeriesRequest):
    def outputsize(self, value: Union[OutputSize, str]) -> "SizedTimeSeriesRequest":
        return self._set("outputsize", OutputSize.parse(value).value)


class SectionRequest(RequestBuilder):
    """Builder base for endpoints that return annual and quarterly sections."""

    async def get_table(self, period: Optional[Union[ReportPeriod, str]] = None) -> pd.DataFrame:
        """Execute the request and return one section as a DataFrame.

        Parameters
        ----------
        period : ReportPeriod or str, optional
            ``annual`` or ``quarterly``.  Defaults to the endpoint's
            default period.
        """
        if period is not None:
            period = ReportPeriod.parse(period)
        return await self._table(period)
