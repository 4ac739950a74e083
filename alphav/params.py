"""
Parameter domains accepted by the Alpha Vantage endpoints.

Each closed domain (interval, output size, horizon, ...) is a ``str``
enumeration whose value is the literal token sent on the wire, so a
value that exists is always serializable.  Free-form values such as
symbols and months go through the ``validate_*`` helpers, which raise
:class:`~alphav.errors.ValidationError` as soon as the value reaches a
request builder.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Union

from .errors import ValidationError

_SYMBOL_RE = re.compile(r"^[A-Za-z0-9.\-_:^=/]{1,20}$")
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


class _WireEnum(str, Enum):
    """Enumeration whose values are Alpha Vantage query tokens."""

    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            token = value.strip().lower()
            for member in cls:
                if member.value == token:
                    return member
        accepted = ", ".join(member.value for member in cls)
        raise ValidationError(
            f"Invalid {cls._parameter_name()}: {value!r} (expected one of: {accepted})",
            parameter=cls._parameter_name(),
        )

    @classmethod
    def _parameter_name(cls) -> str:
        return cls.__name__.lower()

    def __str__(self) -> str:
        return self.value


class Interval(_WireEnum):
    ONE_MIN = "1min"
    FIVE_MIN = "5min"
    FIFTEEN_MIN = "15min"
    THIRTY_MIN = "30min"
    SIXTY_MIN = "60min"


class OutputSize(_WireEnum):
    """``compact`` returns the latest 100 points, ``full`` the whole history."""

    COMPACT = "compact"
    FULL = "full"


class Horizon(_WireEnum):
    """Estimate horizon for the earnings estimates endpoint."""

    THREE_MONTH = "3month"
    SIX_MONTH = "6month"
    TWELVE_MONTH = "12month"
    ALL = "all"


class DataType(_WireEnum):
    JSON = "json"
    CSV = "csv"


class SortOrder(_WireEnum):
    """Client-side ordering for time series output.  Never sent to the API."""

    ASC = "asc"
    DESC = "desc"


class ReportPeriod(_WireEnum):
    """Which report section a tabular projection should use."""

    ANNUAL = "annual"
    QUARTERLY = "quarterly"


class OutputMode(_WireEnum):
    JSON = "json"
    TYPED = "typed"
    TABLE = "table"


def validate_symbol(value: Any) -> str:
    """Return the stripped ticker or raise ``ValidationError``.

    Accepts exchange-suffixed tickers such as ``BRK.B``, ``TSCO.LON`` or
    ``600104.SHH``.
    """
    if not isinstance(value, str):
        raise ValidationError(f"Symbol must be a string, got {type(value).__name__}", parameter="symbol")
    text = value.strip()
    if not text:
        raise ValidationError("Symbol must not be empty", parameter="symbol")
    if not _SYMBOL_RE.match(text):
        raise ValidationError(f"Malformed symbol: {value!r}", parameter="symbol")
    return text


def validate_month(value: Union[str, date, datetime]) -> str:
    """Return a ``YYYY-MM`` token for intraday history requests."""
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, str):
        match = _MONTH_RE.match(value.strip())
        if match and 1 <= int(match.group(2)) <= 12:
            return match.group(0)
    raise ValidationError(f"Month must be YYYY-MM, got {value!r}", parameter="month")


def validate_bool(value: Any, *, parameter: str) -> str:
    if not isinstance(value, bool):
        raise ValidationError(f"{parameter} must be a bool, got {value!r}", parameter=parameter)
    return "true" if value else "false"
