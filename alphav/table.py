"""
Tabular projection of decoded results.

The helpers in this module turn the typed results from
:mod:`alphav.decoder` into pandas ``DataFrame`` objects.  Only results
that are naturally row-shaped are supported: time series (one row per
point) and sectioned payloads (one row per report or estimate).  Flat
records such as the company overview have no tabular form and raise
:class:`~alphav.errors.ProjectionError`.
"""

from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .errors import ProjectionError
from .models import TimeSeries
from .params import ReportPeriod


def time_series_frame(series: TimeSeries) -> pd.DataFrame:
    """Convert a :class:`TimeSeries` into a DataFrame.

    The DataFrame has a datetime index named ``timestamp`` and one
    column per field label, in the order the labels appear in the
    response.  Rows keep the order of ``series.points``; points that
    were excluded during decoding are not rows.

    Parameters
    ----------
    series : TimeSeries
        Decoded time series.

    Returns
    -------
    pandas.DataFrame
        A DataFrame indexed by timestamp with one column per field.
    """
    columns = list(series.labels)
    records: List[Dict[str, Any]] = []
    for point in series.points:
        record: Dict[str, Any] = {"timestamp": pd.Timestamp(point.timestamp)}
        record.update(point.values)
        records.append(record)

    df = pd.DataFrame.from_records(records, columns=["timestamp", *columns])
    df["timestamp"] = pd.to_datetime(df["timestamp"])
    df.set_index("timestamp", inplace=True)
    return df


def _section_field(model: type, period: Optional[ReportPeriod]):
    sections = [f for f in fields(model) if f.metadata.get("item") is not None]
    if not sections:
        return None
    tagged = [f for f in sections if f.metadata.get("period") is not None]
    if not tagged:
        return sections[0]
    wanted = (period or ReportPeriod.ANNUAL).value
    for f in tagged:
        if f.metadata["period"] == wanted:
            return f
    return None


def section_frame(value: Any, period: Optional[ReportPeriod] = None) -> pd.DataFrame:
    """Convert one section of a sectioned result into a DataFrame.

    Parameters
    ----------
    value :
        A decoded sectioned result such as :class:`~alphav.models.Earnings`
        or :class:`~alphav.models.IncomeStatement`.

    period : ReportPeriod, optional
        Which section to use when the result has annual and quarterly
        sections.  Defaults to annual.  Ignored for single-section results.

    Returns
    -------
    pandas.DataFrame
        One row per report with snake_case columns.  An empty section
        yields an empty frame that still has the declared columns.
    """
    section = _section_field(type(value), period)
    if section is None:
        raise ProjectionError(f"{type(value).__name__} has no tabular section.")

    item = section.metadata["item"]
    item_fields = fields(item)
    columns = [f.name for f in item_fields]
    rows = [asdict(entry) for entry in getattr(value, section.name)]

    df = pd.DataFrame(rows, columns=columns)
    for f in item_fields:
        if f.metadata.get("kind") == "date":
            df[f.name] = pd.to_datetime(df[f.name])
    return df


def to_frame(value: Any, period: Optional[Union[ReportPeriod, str]] = None) -> pd.DataFrame:
    """Project a decoded result onto a DataFrame.

    Raises
    ------
    ProjectionError
        If ``value`` is a flat record (or anything else without rows).
    """
    if isinstance(value, TimeSeries):
        return time_series_frame(value)
    resolved = ReportPeriod.parse(period) if period is not None else None
    try:
        has_sections = any(f.metadata.get("item") is not None for f in fields(value))
    except TypeError:
        has_sections = False
    if not has_sections:
        raise ProjectionError(f"{type(value).__name__} is a flat record and has no table representation.")
    return section_frame(value, resolved)
