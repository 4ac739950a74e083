"""
Fundamental data endpoints: company overview, earnings, earnings
estimates and the three financial statements.

All of them take a single required ``symbol``; only the earnings
estimates endpoint has an optional parameter (``horizon``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Union

from pydantic import Field

from .models import BalanceSheet, CashFlow, CompanyOverview, Earnings, EarningsEstimates, IncomeStatement
from .params import Horizon, ReportPeriod, validate_symbol
from .request import EndpointParams, EndpointSpec, Envelope, RequestBuilder, SectionRequest, register

if TYPE_CHECKING:
    from .client import AlphaVantageClient


class SymbolParams(EndpointParams):
    symbol: str = Field(description="Equity ticker, e.g. IBM.")


class EarningsEstimatesParams(SymbolParams):
    horizon: Optional[Horizon] = Field(default=None, description="Estimate horizon: 3month, 6month, 12month or all.")


def _statement_spec(function: str, model: type, description: str) -> EndpointSpec:
    return EndpointSpec(
        function=function,
        required=("symbol",),
        optional={},
        envelope=Envelope.SECTIONS,
        model=model,
        default_period=ReportPeriod.ANNUAL,
        description=description,
    )


class _SymbolRequest(RequestBuilder):
    Params = SymbolParams

    def __init__(self, client: "AlphaVantageClient", symbol: str) -> None:
        super().__init__(client, {"symbol": validate_symbol(symbol)})


class _SymbolSectionRequest(SectionRequest):
    Params = SymbolParams

    def __init__(self, client: "AlphaVantageClient", symbol: str) -> None:
        super().__init__(client, {"symbol": validate_symbol(symbol)})


@register("company_overview")
class CompanyOverviewRequest(_SymbolRequest):
    spec = EndpointSpec(
        function="OVERVIEW",
        required=("symbol",),
        optional={},
        envelope=Envelope.FLAT,
        model=CompanyOverview,
        description="Company information, financial ratios and key metrics.",
    )


@register("earnings")
class EarningsRequest(_SymbolSectionRequest):
    spec = _statement_spec("EARNINGS", Earnings, "Annual and quarterly reported EPS with estimates and surprises.")


@register("earnings_estimates")
class EarningsEstimatesRequest(_SymbolSectionRequest):
    spec = EndpointSpec(
        function="EARNINGS_ESTIMATES",
        required=("symbol",),
        optional={"horizon": None},
        envelope=Envelope.SECTIONS,
        model=EarningsEstimates,
        description="Analyst EPS and revenue estimates with revision history.",
    )
    Params = EarningsEstimatesParams

    def horizon(self, value: Union[Horizon, str]) -> "EarningsEstimatesRequest":
        return self._set("horizon", Horizon.parse(value).value)


@register("income_statement")
class IncomeStatementRequest(_SymbolSectionRequest):
    spec = _statement_spec("INCOME_STATEMENT", IncomeStatement, "Annual and quarterly income statements.")


@register("balance_sheet")
class BalanceSheetRequest(_SymbolSectionRequest):
    spec = _statement_spec("BALANCE_SHEET", BalanceSheet, "Annual and quarterly balance sheets.")


@register("cash_flow")
class CashFlowRequest(_SymbolSectionRequest):
    spec = _statement_spec("CASH_FLOW", CashFlow, "Annual and quarterly cash flow statements.")


def company_overview(client: "AlphaVantageClient", symbol: str) -> CompanyOverviewRequest:
    return CompanyOverviewRequest(client, symbol)


def earnings(client: "AlphaVantageClient", symbol: str) -> EarningsRequest:
    return EarningsRequest(client, symbol)


def earnings_estimates(client: "AlphaVantageClient", symbol: str) -> EarningsEstimatesRequest:
    return EarningsEstimatesRequest(client, symbol)


def income_statement(client: "AlphaVantageClient", symbol: str) -> IncomeStatementRequest:
    return IncomeStatementRequest(client, symbol)


def balance_sheet(client: "AlphaVantageClient", symbol: str) -> BalanceSheetRequest:
    return BalanceSheetRequest(client, symbol)


def cash_flow(client: "AlphaVantageClient", symbol: str) -> CashFlowRequest:
    return CashFlowRequest(client, symbol)
