"""
Tool-use interface for language-model agents.

Agents discover the available endpoints with :func:`list_tools` (or
:func:`get_tool_details` for one of them), each described by a JSON
Schema of its parameters, and then execute one with :func:`call_tool`::

    result = await call_tool(client, {"tool": "time_series_daily", "params": {"symbol": "IBM"}})
    result.data["Meta Data"]["2. Symbol"]
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from . import fundamentals, time_series  # noqa: F401  (registers the endpoints)
from .client import AlphaVantageClient
from .decoder import parse_body
from .errors import ValidationError
from .logging_config import log_event
from .params import OutputMode
from .request import BUILDERS, ENDPOINTS, SectionRequest


logger = logging.getLogger(__name__)

TOOL_ORDER = (
    "time_series_intraday",
    "time_series_daily",
    "time_series_weekly",
    "time_series_monthly",
    "company_overview",
    "earnings",
    "earnings_estimates",
    "income_statement",
    "balance_sheet",
    "cash_flow",
)

_TOOL_NAMES = {
    "time_series_intraday": "Intraday Time Series",
    "time_series_daily": "Daily Time Series",
    "time_series_weekly": "Weekly Time Series",
    "time_series_monthly": "Monthly Time Series",
    "company_overview": "Company Overview",
    "earnings": "Earnings",
    "earnings_estimates": "Earnings Estimates",
    "income_statement": "Income Statement",
    "balance_sheet": "Balance Sheet",
    "cash_flow": "Cash Flow Statement",
}


@dataclass(frozen=True)
class ToolInfo:
    id: str
    name: str
    description: str
    schema: Dict[str, Any]


@dataclass(frozen=True)
class ToolCallResult:
    """Outcome of :func:`call_tool`.

    ``kind`` is ``"json"`` (``data`` is the parsed response body) or
    ``"table"`` (``data`` is a list of row dicts and ``schema`` maps
    each column to its pandas dtype).
    """

    kind: str
    data: Any
    schema: Optional[Dict[str, str]] = None


def _tool_info(tool_id: str) -> ToolInfo:
    builder = BUILDERS[tool_id]
    return ToolInfo(
        id=tool_id,
        name=_TOOL_NAMES[tool_id],
        description=ENDPOINTS[tool_id].description,
        schema=builder.Params.model_json_schema(),
    )


def list_tools() -> List[ToolInfo]:
    """List all available tools."""
    return [_tool_info(tool_id) for tool_id in TOOL_ORDER]


def get_tool_details(tool_id: str) -> Optional[ToolInfo]:
    if tool_id not in BUILDERS:
        return None
    return _tool_info(tool_id)


async def call_tool(client: AlphaVantageClient, request: Mapping[str, Any]) -> ToolCallResult:
    """Execute one tool call.

    Parameters
    ----------
    client : AlphaVantageClient
        Client used to perform the request.

    request : mapping
        ``{"tool": <id>, "params": {...}, "output": "json" | "table"}``.
        ``output`` defaults to ``json``; section tools also accept
        ``"period": "annual" | "quarterly"`` for table output.

    Returns
    -------
    ToolCallResult

    Raises
    ------
    ValidationError
        If ``tool`` or ``params`` is missing, the tool is unknown or the
        parameters do not match its schema.
    """
    if not isinstance(request, Mapping):
        raise ValidationError("Tool request must be an object.")
    tool = request.get("tool")
    if not isinstance(tool, str) or not tool:
        raise ValidationError("Missing 'tool' field", parameter="tool")
    params = request.get("params")
    if not isinstance(params, Mapping):
        raise ValidationError("Missing 'params' field", parameter="params")
    builder_cls = BUILDERS.get(tool)
    if builder_cls is None:
        raise ValidationError(f"Unknown tool: {tool}", parameter="tool")

    output = OutputMode.parse(request.get("output") or OutputMode.JSON)
    if output is OutputMode.TYPED:
        raise ValidationError("Tool output must be 'json' or 'table'.", parameter="output")

    builder = builder_cls.from_params(client, params)
    log_event(
        logger,
        logging.DEBUG,
        "Alpha Vantage tool call",
        av_event="tool_call",
        av_tool=tool,
        av_output=output.value,
    )

    if output is OutputMode.JSON:
        body = await builder.get_raw()
        return ToolCallResult(kind="json", data=parse_body(body))

    if isinstance(builder, SectionRequest):
        df = await builder.get_table(request.get("period"))
    else:
        df = await builder.get_table()
    if df.index.name is not None:
        df = df.reset_index()
    records = json.loads(df.to_json(orient="records", date_format="iso"))
    schema = {str(column): str(dtype) for column, dtype in df.dtypes.items()}
    return ToolCallResult(kind="table", data=records, schema=schema)
