"""
Core stock time series endpoints (intraday, daily, weekly, monthly).

Each function returns a request builder; nothing is sent until one of
the builder's ``get_*`` coroutines is awaited::

    series = await time_series.daily(client, "IBM").outputsize("full").get_typed()
    df = await time_series.intraday(client, "IBM", "5min").month("2024-01").get_table()
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional, Union

from pydantic import Field

from .models import TimeSeries
from .params import DataType, Interval, OutputSize, SortOrder, validate_bool, validate_month, validate_symbol
from .request import EndpointParams, EndpointSpec, Envelope, SizedTimeSeriesRequest, TimeSeriesRequest, register

if TYPE_CHECKING:
    from .client import AlphaVantageClient


class _SeriesParams(EndpointParams):
    symbol: str = Field(description="Equity ticker, e.g. IBM or TSCO.LON.")
    datatype: Optional[DataType] = Field(default=None, description="json (default) or csv.")
    sort: Optional[SortOrder] = Field(default=None, description="Client-side ordering by timestamp.")


class _SizedSeriesParams(_SeriesParams):
    outputsize: Optional[OutputSize] = Field(
        default=None, description="compact returns the latest 100 points, full the whole history."
    )


class IntradayParams(_SizedSeriesParams):
    interval: Interval = Field(description="Time between two consecutive points.")
    month: Optional[str] = Field(default=None, description="Historical month as YYYY-MM.")
    adjusted: Optional[bool] = Field(default=None, description="Adjust for splits and dividends.")
    extended_hours: Optional[bool] = Field(default=None, description="Include pre- and post-market bars.")


class DailyParams(_SizedSeriesParams):
    pass


class WeeklyParams(_SeriesParams):
    pass


class MonthlyParams(_SeriesParams):
    pass


@register("time_series_intraday")
class TimeSeriesIntraday(SizedTimeSeriesRequest):
    spec = EndpointSpec(
        function="TIME_SERIES_INTRADAY",
        required=("symbol", "interval"),
        optional={"outputsize": None, "datatype": None, "month": None, "adjusted": None, "extended_hours": None},
        envelope=Envelope.TIME_SERIES,
        model=TimeSeries,
        description="Intraday OHLCV bars for an equity at a fixed interval.",
    )
    Params = IntradayParams

    def __init__(self, client: "AlphaVantageClient", symbol: str, interval: Union[Interval, str]) -> None:
        super().__init__(
            client,
            {"symbol": validate_symbol(symbol), "interval": Interval.parse(interval).value},
        )

    def month(self, value: Union[str, date]) -> "TimeSeriesIntraday":
        """Query a specific month of history (``YYYY-MM``)."""
        return self._set("month", validate_month(value))

    def adjusted(self, value: bool) -> "TimeSeriesIntraday":
        return self._set("adjusted", validate_bool(value, parameter="adjusted"))

    def extended_hours(self, value: bool) -> "TimeSeriesIntraday":
        return self._set("extended_hours", validate_bool(value, parameter="extended_hours"))


@register("time_series_daily")
class TimeSeriesDaily(SizedTimeSeriesRequest):
    spec = EndpointSpec(
        function="TIME_SERIES_DAILY",
        required=("symbol",),
        optional={"outputsize": None, "datatype": None},
        envelope=Envelope.TIME_SERIES,
        model=TimeSeries,
        description="Daily OHLCV bars for an equity.",
    )
    Params = DailyParams

    def __init__(self, client: "AlphaVantageClient", symbol: str) -> None:
        super().__init__(client, {"symbol": validate_symbol(symbol)})


@register("time_series_weekly")
class TimeSeriesWeekly(TimeSeriesRequest):
    spec = EndpointSpec(
        function="TIME_SERIES_WEEKLY",
        required=("symbol",),
        optional={"datatype": None},
        envelope=Envelope.TIME_SERIES,
        model=TimeSeries,
        description="Weekly OHLCV bars for an equity, last trading day of each week.",
    )
    Params = WeeklyParams

    def __init__(self, client: "AlphaVantageClient", symbol: str) -> None:
        super().__init__(client, {"symbol": validate_symbol(symbol)})


@register("time_series_monthly")
class TimeSeriesMonthly(TimeSeriesRequest):
    spec = EndpointSpec(
        function="TIME_SERIES_MONTHLY",
        required=("symbol",),
        optional={"datatype": None},
        envelope=Envelope.TIME_SERIES,
        model=TimeSeries,
        description="Monthly OHLCV bars for an equity, last trading day of each month.",
    )
    Params = MonthlyParams

    def __init__(self, client: "AlphaVantageClient", symbol: str) -> None:
        super().__init__(client, {"symbol": validate_symbol(symbol)})


def intraday(client: "AlphaVantageClient", symbol: str, interval: Union[Interval, str]) -> TimeSeriesIntraday:
    return TimeSeriesIntraday(client, symbol, interval)


def daily(client: "AlphaVantageClient", symbol: str) -> TimeSeriesDaily:
    return TimeSeriesDaily(client, symbol)


def weekly(client: "AlphaVantageClient", symbol: str) -> TimeSeriesWeekly:
    return TimeSeriesWeekly(client, symbol)


def monthly(client: "AlphaVantageClient", symbol: str) -> TimeSeriesMonthly:
    return TimeSeriesMonthly(client, symbol)
