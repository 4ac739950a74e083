"""
Decoding of Alpha Vantage JSON bodies into the dataclasses in
:mod:`alphav.models`.

The service answers with one of three envelope shapes (see
:class:`~alphav.request.Envelope`) and reports most failures as an HTTP
200 whose body is an error object.  :func:`decode` rejects those first,
then maps the body onto the endpoint's model.
"""

from __future__ import annotations

import json
import logging
from dataclasses import fields, replace
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from .errors import DecodeError
from .logging_config import log_event
from .models import PointError, SectionError, TimeSeries, TimeSeriesMetadata, TimeSeriesPoint

if TYPE_CHECKING:
    from .request import EndpointSpec


logger = logging.getLogger(__name__)

# Placeholders the service uses for "no value".
_ABSENT_TOKENS = {"", "none", "-", "null", "n/a"}

_TIMESTAMP_FORMATS = ("%Y-%m-%d", "%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S")

_META_FIELDS = {
    "information": "information",
    "symbol": "symbol",
    "last refreshed": "last_refreshed",
    "interval": "interval",
    "output size": "output_size",
    "time zone": "time_zone",
}


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip().lower() in _ABSENT_TOKENS


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not number.is_integer():
            raise
        return int(number)


def _to_number(text: str) -> Any:
    try:
        return int(text)
    except ValueError:
        return float(text)


def _to_date(text: str) -> date:
    return datetime.strptime(text, "%Y-%m-%d").date()


_CONVERTERS = {
    "str": str,
    "int": _to_int,
    "float": float,
    "number": _to_number,
    "date": _to_date,
}


def convert_value(raw: Any, kind: str) -> Any:
    """Convert one wire value; ``None`` for any absent placeholder.

    Raises ``ValueError`` when a present value does not fit ``kind``.
    """
    if _is_absent(raw):
        return None
    if kind == "str":
        return str(raw).strip()
    if isinstance(raw, bool):
        raise ValueError(f"unexpected boolean {raw!r}")
    return _CONVERTERS[kind](str(raw).strip())


def convert_point_value(raw: Any, kind: str) -> Any:
    """Convert one time series value.

    Bars have no optional fields, so placeholders and ``null`` fail here
    instead of becoming ``None``.
    """
    if _is_absent(raw):
        raise ValueError(f"non-numeric value {raw!r}")
    return convert_value(raw, kind)


def _classify_payload_error(payload: Mapping[str, Any], body: str) -> Optional[DecodeError]:
    """
    Alpha Vantage often returns HTTP 200 with an error payload.

    Common patterns:
    - {"Note": "..."} (throttle)
    - {"Information": "..."} (throttle / premium endpoint notice)
    - {"Error Message": "..."} (invalid symbol / bad request)

    Time series bodies carry an ``Information`` entry inside ``Meta Data``,
    never at the top level, so only top-level keys are inspected.
    """
    note = payload.get("Note") or payload.get("Information")
    if isinstance(note, str) and note.strip():
        text = note.strip()
        return DecodeError(
            f"Alpha Vantage throttled the request: {text}", raw_body=body, code="throttle", api_message=text
        )

    error_message = payload.get("Error Message")
    if isinstance(error_message, str) and error_message.strip():
        text = error_message.strip()
        lowered = text.lower()
        code = "invalid_symbol" if ("invalid api call" in lowered or "invalid symbol" in lowered) else "api_error"
        return DecodeError(f"Alpha Vantage returned an error: {text}", raw_body=body, code=code, api_message=text)

    return None


def parse_body(body: str) -> Dict[str, Any]:
    """Parse ``body`` as a JSON object and reject error envelopes."""
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"Response is not valid JSON: {exc}", raw_body=body) from exc
    if not isinstance(payload, dict):
        raise DecodeError(f"Expected a JSON object, got {type(payload).__name__}.", raw_body=body)

    classified = _classify_payload_error(payload, body)
    if classified is not None:
        raise classified
    return payload


def decode_record(cls: type, payload: Mapping[str, Any], body: str, *, where: str = "") -> Any:
    """Build ``cls`` from the scalar fields of ``payload``.

    Records are all-or-nothing: a present value that does not convert
    raises ``DecodeError`` naming the field.
    """
    values: Dict[str, Any] = {}
    for f in fields(cls):
        source = f.metadata.get("source")
        if source is None or "item" in f.metadata:
            continue
        raw = payload.get(source)
        try:
            values[f.name] = convert_value(raw, f.metadata.get("kind", "str"))
        except (TypeError, ValueError) as exc:
            raise DecodeError(
                f"{cls.__name__}{where}: field {source!r} has unparseable value {raw!r}.",
                raw_body=body,
            ) from exc
    return cls(**values)


def _decode_section(cls: type, item: type, source: str, raw: List[Any], body: str) -> List[Any]:
    decoded = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise DecodeError(
                f"{cls.__name__}: entry {index} of {source!r} is not an object.",
                raw_body=body,
            )
        decoded.append(decode_record(item, entry, body, where=f"[{source}][{index}]"))
    return decoded


def decode_sections(cls: type, payload: Mapping[str, Any], body: str) -> Any:
    """Decode a container whose list fields are independent sections.

    A section with an entry that does not decode is emptied and reported
    in ``errors``; the other sections are unaffected.  A section that is
    present but not a list fails the whole decode.
    """
    result = decode_record(cls, payload, body)
    sections: Dict[str, List[Any]] = {}
    errors: List[SectionError] = []
    for f in fields(cls):
        item = f.metadata.get("item")
        if item is None:
            continue
        source = f.metadata["source"]
        raw = payload.get(source)
        if raw is None:
            sections[f.name] = []
            continue
        if not isinstance(raw, list):
            raise DecodeError(
                f"{cls.__name__}: section {source!r} must be a list, got {type(raw).__name__}.",
                raw_body=body,
            )
        try:
            sections[f.name] = _decode_section(cls, item, source, raw, body)
        except DecodeError as exc:
            sections[f.name] = []
            errors.append(SectionError(section=source, message=exc.message))
            log_event(
                logger,
                logging.WARNING,
                "Alpha Vantage report section excluded",
                av_event="section_excluded",
                av_symbol=result.symbol,
                av_section=source,
                av_reason=exc.message,
            )

    # The record is frozen; rebuild it with the decoded sections.
    return replace(result, errors=errors, **sections)


def _strip_label(label: str) -> str:
    """``"1. open"`` -> ``"open"``; ``"5. adjusted close"`` -> ``"adjusted_close"``."""
    head, sep, tail = label.partition(". ")
    text = tail if sep and head.strip().isdigit() else label
    return "_".join(text.strip().lower().split())


def parse_timestamp(key: str) -> Tuple[datetime, bool]:
    """Return the parsed timestamp and whether it carried a date only."""
    text = key.strip()
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt), fmt == "%Y-%m-%d"
        except ValueError:
            continue
    raise ValueError(f"unrecognised timestamp {key!r}")


def _decode_metadata(raw: Any) -> TimeSeriesMetadata:
    if not isinstance(raw, dict):
        return TimeSeriesMetadata()
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        name = _META_FIELDS.get(_strip_label(str(key)).replace("_", " "))
        if name is not None and not _is_absent(value):
            values[name] = str(value).strip()
    return TimeSeriesMetadata(raw=dict(raw), **values)


def _find_series_key(payload: Mapping[str, Any]) -> Optional[str]:
    for key in payload:
        if "Time Series" in key:
            return key
    return None


def decode_time_series(payload: Mapping[str, Any], body: str) -> TimeSeries:
    series_key = _find_series_key(payload)
    if series_key is None:
        raise DecodeError("Response has no time series section.", raw_body=body)
    series = payload[series_key]
    if not isinstance(series, dict):
        raise DecodeError(f"{series_key!r} must be an object, got {type(series).__name__}.", raw_body=body)

    metadata = _decode_metadata(payload.get("Meta Data"))
    labels: Dict[str, str] = {}
    points: List[TimeSeriesPoint] = []
    errors: List[PointError] = []
    date_only = True

    for key, entry in series.items():
        try:
            timestamp, is_date = parse_timestamp(key)
        except ValueError as exc:
            raise DecodeError(f"Time series key {key!r} is not a timestamp.", raw_body=body) from exc
        date_only = date_only and is_date

        if not isinstance(entry, dict):
            errors.append(PointError(timestamp, "*", entry, "point is not an object"))
            continue

        values: Dict[str, Any] = {}
        failure: Optional[PointError] = None
        for label, raw in entry.items():
            name = _strip_label(label)
            labels.setdefault(name, label)
            kind = "int" if name == "volume" else "float"
            try:
                values[name] = convert_point_value(raw, kind)
            except (TypeError, ValueError) as exc:
                failure = PointError(timestamp, name, raw, str(exc))
                break
        if failure is not None:
            errors.append(failure)
            continue
        points.append(TimeSeriesPoint(timestamp=timestamp, values=values, key=key))

    for error in errors:
        log_event(
            logger,
            logging.WARNING,
            "Alpha Vantage time series point excluded",
            av_event="point_excluded",
            av_symbol=metadata.symbol,
            av_timestamp=error.timestamp.isoformat(),
            av_field=error.field,
            av_reason=error.reason,
        )

    return TimeSeries(
        metadata=metadata,
        series_key=series_key,
        labels=labels,
        points=points,
        errors=errors,
        date_only=date_only,
    )


def decode(body: str, spec: "EndpointSpec") -> Any:
    """Decode ``body`` according to the envelope shape of ``spec``."""
    from .request import Envelope

    payload = parse_body(body)
    if spec.envelope is Envelope.TIME_SERIES:
        return decode_time_series(payload, body)
    if spec.envelope is Envelope.SECTIONS:
        return decode_sections(spec.model, payload, body)
    return decode_record(spec.model, payload, body)
