"""
Typed results produced by :mod:`alphav.decoder`.

Record classes are frozen dataclasses whose fields carry the JSON key
they are read from (``metadata["source"]``) and how the value is
converted (``metadata["kind"]``).  Every scalar field defaults to
``None``, the absent marker: the service omits fields inconsistently and
a missing value must stay distinguishable from a real ``0``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional, Union

from .params import SortOrder

Number = Union[int, float]


def _f(source: str, kind: str = "str") -> Any:
    return field(default=None, metadata={"source": source, "kind": kind})


def _section_errors() -> Any:
    return field(default_factory=list)


def _section(source: str, item: type, period: Optional[str] = None) -> Any:
    return field(default_factory=list, metadata={"source": source, "item": item, "period": period})


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeSeriesMetadata:
    information: Optional[str] = None
    symbol: Optional[str] = None
    last_refreshed: Optional[str] = None
    interval: Optional[str] = None
    output_size: Optional[str] = None
    time_zone: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One bar of a series; ``values`` is keyed by normalized field name.

    ``key`` is the timestamp text exactly as the service sent it.
    """

    timestamp: datetime
    values: Dict[str, Number]
    key: Optional[str] = None

    @property
    def open(self) -> Optional[float]:
        return self.values.get("open")

    @property
    def high(self) -> Optional[float]:
        return self.values.get("high")

    @property
    def low(self) -> Optional[float]:
        return self.values.get("low")

    @property
    def close(self) -> Optional[float]:
        return self.values.get("close")

    @property
    def volume(self) -> Optional[int]:
        value = self.values.get("volume")
        return int(value) if value is not None else None


@dataclass(frozen=True)
class PointError:
    """A point that was left out of a series because a value did not parse."""

    timestamp: datetime
    field: str
    value: Any
    reason: str


@dataclass(frozen=True)
class TimeSeries:
    """Decoded time series in the order the service returned it.

    ``labels`` maps each normalized field name to the wire label
    (``"close" -> "4. close"``) so the series can be written back in its
    original shape by :meth:`to_payload`.
    """

    metadata: TimeSeriesMetadata
    series_key: str
    labels: Dict[str, str]
    points: List[TimeSeriesPoint]
    errors: List[PointError] = field(default_factory=list)
    date_only: bool = True

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[TimeSeriesPoint]:
        return iter(self.points)

    def sorted(self, order: Union[SortOrder, str] = SortOrder.ASC) -> "TimeSeries":
        """Return a copy ordered by timestamp."""
        descending = SortOrder.parse(order) is SortOrder.DESC
        points = sorted(self.points, key=lambda p: p.timestamp, reverse=descending)
        return replace(self, points=points)

    def format_timestamp(self, timestamp: datetime) -> str:
        if self.date_only:
            return timestamp.strftime("%Y-%m-%d")
        return timestamp.strftime("%Y-%m-%d %H:%M:%S")

    def to_payload(self) -> Dict[str, Any]:
        series: Dict[str, Dict[str, str]] = {}
        for point in self.points:
            entry: Dict[str, str] = {}
            for name, label in self.labels.items():
                value = point.values.get(name)
                if value is None:
                    continue
                entry[label] = str(value) if isinstance(value, int) else f"{value:.4f}"
            series[point.key or self.format_timestamp(point.timestamp)] = entry
        return {"Meta Data": dict(self.metadata.raw), self.series_key: series}


# ---------------------------------------------------------------------------
# Company overview (flat envelope)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompanyOverview:
    symbol: Optional[str] = _f("Symbol")
    asset_type: Optional[str] = _f("AssetType")
    name: Optional[str] = _f("Name")
    description: Optional[str] = _f("Description")
    cik: Optional[str] = _f("CIK")
    exchange: Optional[str] = _f("Exchange")
    currency: Optional[str] = _f("Currency")
    country: Optional[str] = _f("Country")
    sector: Optional[str] = _f("Sector")
    industry: Optional[str] = _f("Industry")
    address: Optional[str] = _f("Address")
    official_site: Optional[str] = _f("OfficialSite")
    fiscal_year_end: Optional[str] = _f("FiscalYearEnd")
    latest_quarter: Optional[date] = _f("LatestQuarter", "date")
    market_capitalization: Optional[int] = _f("MarketCapitalization", "int")
    ebitda: Optional[int] = _f("EBITDA", "int")
    pe_ratio: Optional[float] = _f("PERatio", "float")
    peg_ratio: Optional[float] = _f("PEGRatio", "float")
    book_value: Optional[float] = _f("BookValue", "float")
    dividend_per_share: Optional[float] = _f("DividendPerShare", "float")
    dividend_yield: Optional[float] = _f("DividendYield", "float")
    eps: Optional[float] = _f("EPS", "float")
    revenue_per_share_ttm: Optional[float] = _f("RevenuePerShareTTM", "float")
    profit_margin: Optional[float] = _f("ProfitMargin", "float")
    operating_margin_ttm: Optional[float] = _f("OperatingMarginTTM", "float")
    return_on_assets_ttm: Optional[float] = _f("ReturnOnAssetsTTM", "float")
    return_on_equity_ttm: Optional[float] = _f("ReturnOnEquityTTM", "float")
    revenue_ttm: Optional[int] = _f("RevenueTTM", "int")
    gross_profit_ttm: Optional[int] = _f("GrossProfitTTM", "int")
    diluted_eps_ttm: Optional[float] = _f("DilutedEPSTTM", "float")
    quarterly_earnings_growth_yoy: Optional[float] = _f("QuarterlyEarningsGrowthYOY", "float")
    quarterly_revenue_growth_yoy: Optional[float] = _f("QuarterlyRevenueGrowthYOY", "float")
    analyst_target_price: Optional[float] = _f("AnalystTargetPrice", "float")
    analyst_rating_strong_buy: Optional[int] = _f("AnalystRatingStrongBuy", "int")
    analyst_rating_buy: Optional[int] = _f("AnalystRatingBuy", "int")
    analyst_rating_hold: Optional[int] = _f("AnalystRatingHold", "int")
    analyst_rating_sell: Optional[int] = _f("AnalystRatingSell", "int")
    analyst_rating_strong_sell: Optional[int] = _f("AnalystRatingStrongSell", "int")
    trailing_pe: Optional[float] = _f("TrailingPE", "float")
    forward_pe: Optional[float] = _f("ForwardPE", "float")
    price_to_sales_ratio_ttm: Optional[float] = _f("PriceToSalesRatioTTM", "float")
    price_to_book_ratio: Optional[float] = _f("PriceToBookRatio", "float")
    ev_to_revenue: Optional[float] = _f("EVToRevenue", "float")
    ev_to_ebitda: Optional[float] = _f("EVToEBITDA", "float")
    beta: Optional[float] = _f("Beta", "float")
    week_52_high: Optional[float] = _f("52WeekHigh", "float")
    week_52_low: Optional[float] = _f("52WeekLow", "float")
    day_50_moving_average: Optional[float] = _f("50DayMovingAverage", "float")
    day_200_moving_average: Optional[float] = _f("200DayMovingAverage", "float")
    shares_outstanding: Optional[int] = _f("SharesOutstanding", "int")
    shares_float: Optional[int] = _f("SharesFloat", "int")
    percent_insiders: Optional[float] = _f("PercentInsiders", "float")
    percent_institutions: Optional[float] = _f("PercentInstitutions", "float")
    dividend_date: Optional[date] = _f("DividendDate", "date")
    ex_dividend_date: Optional[date] = _f("ExDividendDate", "date")


@dataclass(frozen=True)
class SectionError:
    """A report list that was emptied because one of its entries did not decode."""

    section: str
    message: str


# ---------------------------------------------------------------------------
# Earnings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnnualEarnings:
    fiscal_date_ending: Optional[date] = _f("fiscalDateEnding", "date")
    reported_eps: Optional[float] = _f("reportedEPS", "float")


@dataclass(frozen=True)
class QuarterlyEarnings:
    fiscal_date_ending: Optional[date] = _f("fiscalDateEnding", "date")
    reported_date: Optional[date] = _f("reportedDate", "date")
    reported_eps: Optional[float] = _f("reportedEPS", "float")
    estimated_eps: Optional[float] = _f("estimatedEPS", "float")
    surprise: Optional[float] = _f("surprise", "float")
    surprise_percentage: Optional[float] = _f("surprisePercentage", "float")
    report_time: Optional[str] = _f("reportTime")


@dataclass(frozen=True)
class Earnings:
    symbol: Optional[str] = _f("symbol")
    annual_earnings: List[AnnualEarnings] = _section("annualEarnings", AnnualEarnings, "annual")
    quarterly_earnings: List[QuarterlyEarnings] = _section("quarterlyEarnings", QuarterlyEarnings, "quarterly")
    errors: List[SectionError] = _section_errors()


@dataclass(frozen=True)
class EarningsEstimate:
    estimate_date: Optional[date] = _f("date", "date")
    horizon: Optional[str] = _f("horizon")
    eps_estimate_average: Optional[float] = _f("eps_estimate_average", "float")
    eps_estimate_high: Optional[float] = _f("eps_estimate_high", "float")
    eps_estimate_low: Optional[float] = _f("eps_estimate_low", "float")
    eps_estimate_analyst_count: Optional[int] = _f("eps_estimate_analyst_count", "int")
    eps_estimate_average_7_days_ago: Optional[float] = _f("eps_estimate_average_7_days_ago", "float")
    eps_estimate_average_30_days_ago: Optional[float] = _f("eps_estimate_average_30_days_ago", "float")
    eps_estimate_average_60_days_ago: Optional[float] = _f("eps_estimate_average_60_days_ago", "float")
    eps_estimate_average_90_days_ago: Optional[float] = _f("eps_estimate_average_90_days_ago", "float")
    eps_estimate_revision_up_trailing_7_days: Optional[int] = _f("eps_estimate_revision_up_trailing_7_days", "int")
    eps_estimate_revision_down_trailing_7_days: Optional[int] = _f(
        "eps_estimate_revision_down_trailing_7_days", "int"
    )
    eps_estimate_revision_up_trailing_30_days: Optional[int] = _f("eps_estimate_revision_up_trailing_30_days", "int")
    eps_estimate_revision_down_trailing_30_days: Optional[int] = _f(
        "eps_estimate_revision_down_trailing_30_days", "int"
    )
    revenue_estimate_average: Optional[float] = _f("revenue_estimate_average", "number")
    revenue_estimate_high: Optional[float] = _f("revenue_estimate_high", "number")
    revenue_estimate_low: Optional[float] = _f("revenue_estimate_low", "number")
    revenue_estimate_analyst_count: Optional[int] = _f("revenue_estimate_analyst_count", "int")


@dataclass(frozen=True)
class EarningsEstimates:
    symbol: Optional[str] = _f("symbol")
    estimates: List[EarningsEstimate] = _section("estimates", EarningsEstimate)
    errors: List[SectionError] = _section_errors()


# ---------------------------------------------------------------------------
# Financial statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IncomeStatementReport:
    fiscal_date_ending: Optional[date] = _f("fiscalDateEnding", "date")
    reported_currency: Optional[str] = _f("reportedCurrency")
    gross_profit: Optional[float] = _f("grossProfit", "number")
    total_revenue: Optional[float] = _f("totalRevenue", "number")
    cost_of_revenue: Optional[float] = _f("costOfRevenue", "number")
    cost_of_goods_and_services_sold: Optional[float] = _f("costofGoodsAndServicesSold", "number")
    operating_income: Optional[float] = _f("operatingIncome", "number")
    selling_general_and_administrative: Optional[float] = _f("sellingGeneralAndAdministrative", "number")
    research_and_development: Optional[float] = _f("researchAndDevelopment", "number")
    operating_expenses: Optional[float] = _f("operatingExpenses", "number")
    investment_income_net: Optional[float] = _f("investmentIncomeNet", "number")
    net_interest_income: Optional[float] = _f("netInterestIncome", "number")
    interest_income: Optional[float] = _f("interestIncome", "number")
    interest_expense: Optional[float] = _f("interestExpense", "number")
    non_interest_income: Optional[float] = _f("nonInterestIncome", "number")
    other_non_operating_income: Optional[float] = _f("otherNonOperatingIncome", "number")
    depreciation: Optional[float] = _f("depreciation", "number")
    depreciation_and_amortization: Optional[float] = _f("depreciationAndAmortization", "number")
    income_before_tax: Optional[float] = _f("incomeBeforeTax", "number")
    income_tax_expense: Optional[float] = _f("incomeTaxExpense", "number")
    interest_and_debt_expense: Optional[float] = _f("interestAndDebtExpense", "number")
    net_income_from_continuing_operations: Optional[float] = _f("netIncomeFromContinuingOperations", "number")
    comprehensive_income_net_of_tax: Optional[float] = _f("comprehensiveIncomeNetOfTax", "number")
    ebit: Optional[float] = _f("ebit", "number")
    ebitda: Optional[float] = _f("ebitda", "number")
    net_income: Optional[float] = _f("netIncome", "number")


@dataclass(frozen=True)
class BalanceSheetReport:
    fiscal_date_ending: Optional[date] = _f("fiscalDateEnding", "date")
    reported_currency: Optional[str] = _f("reportedCurrency")
    total_assets: Optional[float] = _f("totalAssets", "number")
    total_current_assets: Optional[float] = _f("totalCurrentAssets", "number")
    cash_and_cash_equivalents_at_carrying_value: Optional[float] = _f(
        "cashAndCashEquivalentsAtCarryingValue", "number"
    )
    cash_and_short_term_investments: Optional[float] = _f("cashAndShortTermInvestments", "number")
    inventory: Optional[float] = _f("inventory", "number")
    current_net_receivables: Optional[float] = _f("currentNetReceivables", "number")
    total_non_current_assets: Optional[float] = _f("totalNonCurrentAssets", "number")
    property_plant_equipment: Optional[float] = _f("propertyPlantEquipment", "number")
    accumulated_depreciation_amortization_ppe: Optional[float] = _f(
        "accumulatedDepreciationAmortizationPPE", "number"
    )
    intangible_assets: Optional[float] = _f("intangibleAssets", "number")
    intangible_assets_excluding_goodwill: Optional[float] = _f("intangibleAssetsExcludingGoodwill", "number")
    goodwill: Optional[float] = _f("goodwill", "number")
    investments: Optional[float] = _f("investments", "number")
    long_term_investments: Optional[float] = _f("longTermInvestments", "number")
    short_term_investments: Optional[float] = _f("shortTermInvestments", "number")
    other_current_assets: Optional[float] = _f("otherCurrentAssets", "number")
    other_non_current_assets: Optional[float] = _f("otherNonCurrentAssets", "number")
    total_liabilities: Optional[float] = _f("totalLiabilities", "number")
    total_current_liabilities: Optional[float] = _f("totalCurrentLiabilities", "number")
    current_accounts_payable: Optional[float] = _f("currentAccountsPayable", "number")
    deferred_revenue: Optional[float] = _f("deferredRevenue", "number")
    current_debt: Optional[float] = _f("currentDebt", "number")
    short_term_debt: Optional[float] = _f("shortTermDebt", "number")
    total_non_current_liabilities: Optional[float] = _f("totalNonCurrentLiabilities", "number")
    capital_lease_obligations: Optional[float] = _f("capitalLeaseObligations", "number")
    long_term_debt: Optional[float] = _f("longTermDebt", "number")
    current_long_term_debt: Optional[float] = _f("currentLongTermDebt", "number")
    long_term_debt_noncurrent: Optional[float] = _f("longTermDebtNoncurrent", "number")
    short_long_term_debt_total: Optional[float] = _f("shortLongTermDebtTotal", "number")
    other_current_liabilities: Optional[float] = _f("otherCurrentLiabilities", "number")
    other_non_current_liabilities: Optional[float] = _f("otherNonCurrentLiabilities", "number")
    total_shareholder_equity: Optional[float] = _f("totalShareholderEquity", "number")
    treasury_stock: Optional[float] = _f("treasuryStock", "number")
    retained_earnings: Optional[float] = _f("retainedEarnings", "number")
    common_stock: Optional[float] = _f("commonStock", "number")
    common_stock_shares_outstanding: Optional[int] = _f("commonStockSharesOutstanding", "int")


@dataclass(frozen=True)
class CashFlowReport:
    fiscal_date_ending: Optional[date] = _f("fiscalDateEnding", "date")
    reported_currency: Optional[str] = _f("reportedCurrency")
    operating_cashflow: Optional[float] = _f("operatingCashflow", "number")
    payments_for_operating_activities: Optional[float] = _f("paymentsForOperatingActivities", "number")
    proceeds_from_operating_activities: Optional[float] = _f("proceedsFromOperatingActivities", "number")
    change_in_operating_liabilities: Optional[float] = _f("changeInOperatingLiabilities", "number")
    change_in_operating_assets: Optional[float] = _f("changeInOperatingAssets", "number")
    depreciation_depletion_and_amortization: Optional[float] = _f("depreciationDepletionAndAmortization", "number")
    capital_expenditures: Optional[float] = _f("capitalExpenditures", "number")
    change_in_receivables: Optional[float] = _f("changeInReceivables", "number")
    change_in_inventory: Optional[float] = _f("changeInInventory", "number")
    profit_loss: Optional[float] = _f("profitLoss", "number")
    cashflow_from_investment: Optional[float] = _f("cashflowFromInvestment", "number")
    cashflow_from_financing: Optional[float] = _f("cashflowFromFinancing", "number")
    proceeds_from_repayments_of_short_term_debt: Optional[float] = _f(
        "proceedsFromRepaymentsOfShortTermDebt", "number"
    )
    payments_for_repurchase_of_common_stock: Optional[float] = _f("paymentsForRepurchaseOfCommonStock", "number")
    payments_for_repurchase_of_equity: Optional[float] = _f("paymentsForRepurchaseOfEquity", "number")
    payments_for_repurchase_of_preferred_stock: Optional[float] = _f(
        "paymentsForRepurchaseOfPreferredStock", "number"
    )
    dividend_payout: Optional[float] = _f("dividendPayout", "number")
    dividend_payout_common_stock: Optional[float] = _f("dividendPayoutCommonStock", "number")
    dividend_payout_preferred_stock: Optional[float] = _f("dividendPayoutPreferredStock", "number")
    proceeds_from_issuance_of_common_stock: Optional[float] = _f("proceedsFromIssuanceOfCommonStock", "number")
    proceeds_from_issuance_of_long_term_debt_and_capital_securities_net: Optional[float] = _f(
        "proceedsFromIssuanceOfLongTermDebtAndCapitalSecuritiesNet", "number"
    )
    proceeds_from_issuance_of_preferred_stock: Optional[float] = _f("proceedsFromIssuanceOfPreferredStock", "number")
    proceeds_from_repurchase_of_equity: Optional[float] = _f("proceedsFromRepurchaseOfEquity", "number")
    proceeds_from_sale_of_treasury_stock: Optional[float] = _f("proceedsFromSaleOfTreasuryStock", "number")
    change_in_cash_and_cash_equivalents: Optional[float] = _f("changeInCashAndCashEquivalents", "number")
    change_in_exchange_rate: Optional[float] = _f("changeInExchangeRate", "number")
    net_income: Optional[float] = _f("netIncome", "number")


@dataclass(frozen=True)
class IncomeStatement:
    symbol: Optional[str] = _f("symbol")
    annual_reports: List[IncomeStatementReport] = _section("annualReports", IncomeStatementReport, "annual")
    quarterly_reports: List[IncomeStatementReport] = _section("quarterlyReports", IncomeStatementReport, "quarterly")
    errors: List[SectionError] = _section_errors()


@dataclass(frozen=True)
class BalanceSheet:
    symbol: Optional[str] = _f("symbol")
    annual_reports: List[BalanceSheetReport] = _section("annualReports", BalanceSheetReport, "annual")
    quarterly_reports: List[BalanceSheetReport] = _section("quarterlyReports", BalanceSheetReport, "quarterly")
    errors: List[SectionError] = _section_errors()


@dataclass(frozen=True)
class CashFlow:
    symbol: Optional[str] = _f("symbol")
    annual_reports: List[CashFlowReport] = _section("annualReports", CashFlowReport, "annual")
    quarterly_reports: List[CashFlowReport] = _section("quarterlyReports", CashFlowReport, "quarterly")
    errors: List[SectionError] = _section_errors()
