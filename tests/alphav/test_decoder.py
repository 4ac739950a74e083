import json
import logging
from datetime import date, datetime

import pytest

from alphav.decoder import decode, parse_body
from alphav.errors import DecodeError
from alphav.models import CompanyOverview, Earnings, EarningsEstimates, IncomeStatement, TimeSeries
from alphav.request import ENDPOINTS


def _decode(payload, tool_id):
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return decode(body, ENDPOINTS[tool_id])


def test_daily_series_decodes_metadata_and_points(daily_payload):
    series = _decode(daily_payload, "time_series_daily")

    assert isinstance(series, TimeSeries)
    assert series.metadata.symbol == "IBM"
    assert series.metadata.last_refreshed == "2024-01-05"
    assert series.metadata.output_size == "Compact"
    assert series.metadata.time_zone == "US/Eastern"
    assert series.metadata.interval is None
    assert series.series_key == "Time Series (Daily)"

    assert len(series) == 3
    first = series.points[0]
    assert first.timestamp == datetime(2024, 1, 5)
    assert first.open == pytest.approx(162.46)
    assert first.close == pytest.approx(162.47)
    assert first.volume == 3246549
    assert isinstance(first.volume, int)
    assert series.errors == []


def test_source_order_is_preserved_and_sorted_reorders(daily_payload):
    series = _decode(daily_payload, "time_series_daily")
    stamps = [p.timestamp.day for p in series]
    assert stamps == [5, 4, 3]

    ascending = series.sorted("asc")
    assert [p.timestamp.day for p in ascending] == [3, 4, 5]
    assert [p.timestamp.day for p in series] == [5, 4, 3]


def test_to_payload_reproduces_the_wire_shape(daily_payload, intraday_payload):
    series = _decode(daily_payload, "time_series_daily")
    payload = series.to_payload()

    assert payload == daily_payload
    assert list(payload["Time Series (Daily)"]) == list(daily_payload["Time Series (Daily)"])
    assert list(payload["Time Series (Daily)"]["2024-01-05"]) == ["1. open", "2. high", "3. low", "4. close", "5. volume"]

    intraday = _decode(intraday_payload, "time_series_intraday")
    assert intraday.date_only is False
    assert intraday.metadata.interval == "5min"
    assert intraday.to_payload() == intraday_payload


def test_one_bad_value_fails_only_its_point(daily_payload, caplog):
    daily_payload["Time Series (Daily)"]["2024-01-04"]["4. close"] = "n/a-ish"

    with caplog.at_level(logging.WARNING, logger="alphav.decoder"):
        series = _decode(daily_payload, "time_series_daily")

    assert len(series) == 2
    assert [p.timestamp.day for p in series] == [5, 3]
    assert len(series.errors) == 1
    error = series.errors[0]
    assert error.timestamp == datetime(2024, 1, 4)
    assert error.field == "close"
    assert error.value == "n/a-ish"
    assert any(getattr(r, "context", {}).get("av_event") == "point_excluded" for r in caplog.records)


@pytest.mark.parametrize("placeholder", ["n/a", "-", "None", "", None])
def test_placeholder_price_fails_its_point(daily_payload, placeholder):
    daily_payload["Time Series (Daily)"]["2024-01-04"]["4. close"] = placeholder
    series = _decode(daily_payload, "time_series_daily")

    assert len(series) == 2
    assert all(p.close is not None for p in series)
    assert len(series.errors) == 1
    assert series.errors[0].field == "close"
    assert series.errors[0].value == placeholder


def test_minute_precision_keys_are_written_back_unchanged(intraday_payload):
    bars = intraday_payload["Time Series (5min)"]
    intraday_payload["Time Series (5min)"] = {
        "2024-01-05 19:55": bars["2024-01-05 19:55:00"],
        "2024-01-05 19:50": bars["2024-01-05 19:50:00"],
    }
    series = _decode(intraday_payload, "time_series_intraday")

    assert series.points[0].timestamp == datetime(2024, 1, 5, 19, 55)
    assert series.points[0].key == "2024-01-05 19:55"
    assert list(series.to_payload()["Time Series (5min)"]) == ["2024-01-05 19:55", "2024-01-05 19:50"]
    assert series.to_payload() == intraday_payload


def test_fractional_volume_is_a_point_error(daily_payload):
    daily_payload["Time Series (Daily)"]["2024-01-03"]["5. volume"] = "12.5"
    series = _decode(daily_payload, "time_series_daily")
    assert len(series) == 2
    assert series.errors[0].field == "volume"


def test_bad_timestamp_fails_the_whole_series(daily_payload):
    daily_payload["Time Series (Daily)"]["yesterday"] = daily_payload["Time Series (Daily)"]["2024-01-05"]
    with pytest.raises(DecodeError) as excinfo:
        _decode(daily_payload, "time_series_daily")
    assert "yesterday" in excinfo.value.message
    assert "yesterday" in excinfo.value.raw_body


def test_missing_series_section_is_a_decode_error():
    with pytest.raises(DecodeError):
        _decode({"Meta Data": {"2. Symbol": "IBM"}}, "time_series_weekly")


def test_weekly_and_adjusted_labels_are_normalised():
    payload = {
        "Meta Data": {"2. Symbol": "IBM"},
        "Weekly Adjusted Time Series": {
            "2024-01-05": {"4. close": "162.4700", "5. adjusted close": "160.1000", "6. volume": "100"},
        },
    }
    series = _decode(payload, "time_series_weekly")
    assert list(series.labels) == ["close", "adjusted_close", "volume"]
    assert series.points[0].values["adjusted_close"] == pytest.approx(160.1)


@pytest.mark.parametrize(
    "payload, code",
    [
        ({"Note": "Thank you for using Alpha Vantage! Our standard API rate limit is 25 requests per day."}, "throttle"),
        ({"Information": "This is a premium endpoint."}, "throttle"),
        ({"Error Message": "Invalid API call. Please retry or visit the documentation."}, "invalid_symbol"),
        ({"Error Message": "the parameter apikey is invalid or missing."}, "api_error"),
    ],
)
def test_error_envelopes_become_decode_errors(payload, code):
    body = json.dumps(payload)
    with pytest.raises(DecodeError) as excinfo:
        decode(body, ENDPOINTS["time_series_daily"])
    err = excinfo.value
    assert err.code == code
    assert err.api_message == next(iter(payload.values()))
    assert err.raw_body == body


def test_information_inside_metadata_is_not_an_error(daily_payload):
    series = _decode(daily_payload, "time_series_daily")
    assert series.metadata.information.startswith("Daily Prices")


@pytest.mark.parametrize("body", ["not json", "[1, 2, 3]", '"IBM"', ""])
def test_non_object_bodies_are_decode_errors(body):
    with pytest.raises(DecodeError) as excinfo:
        parse_body(body)
    assert excinfo.value.raw_body == body


def test_overview_market_cap_example():
    overview = _decode({"Symbol": "IBM", "MarketCapitalization": "216450000000"}, "company_overview")
    assert isinstance(overview, CompanyOverview)
    assert overview.symbol == "IBM"
    assert overview.market_capitalization == 216450000000
    assert overview.pe_ratio is None


def test_overview_absent_is_distinct_from_zero(overview_payload):
    overview = _decode(overview_payload, "company_overview")

    assert overview.dividend_yield == 0
    assert overview.dividend_yield is not None
    assert overview.peg_ratio is None
    assert overview.dividend_date is None
    assert overview.book_value is None
    assert overview.pe_ratio == pytest.approx(22.31)
    assert overview.analyst_rating_strong_buy == 3
    assert overview.week_52_high == pytest.approx(199.18)
    assert overview.latest_quarter == date(2023, 12, 31)
    assert overview.ex_dividend_date == date(2024, 2, 8)


@pytest.mark.parametrize("placeholder", [None, "None", "-", ""])
def test_overview_placeholders_decode_to_none(placeholder):
    overview = _decode({"Symbol": "IBM", "PERatio": placeholder}, "company_overview")
    assert overview.pe_ratio is None


def test_overview_unparseable_value_fails_the_record(overview_payload):
    overview_payload["PERatio"] = "twenty"
    with pytest.raises(DecodeError) as excinfo:
        _decode(overview_payload, "company_overview")
    assert "PERatio" in excinfo.value.message


def test_earnings_sections(earnings_payload):
    earnings = _decode(earnings_payload, "earnings")
    assert isinstance(earnings, Earnings)
    assert earnings.symbol == "IBM"
    assert [e.reported_eps for e in earnings.annual_earnings] == [9.61, 9.12]
    second = earnings.quarterly_earnings[1]
    assert second.reported_date == date(2023, 10, 25)
    assert second.estimated_eps is None
    assert second.surprise is None
    assert second.report_time == "post-market"


def test_missing_section_is_empty_and_malformed_section_fails(earnings_payload):
    del earnings_payload["quarterlyEarnings"]
    earnings = _decode(earnings_payload, "earnings")
    assert earnings.quarterly_earnings == []
    assert len(earnings.annual_earnings) == 2

    earnings_payload["annualEarnings"] = {"fiscalDateEnding": "2023-12-31"}
    with pytest.raises(DecodeError) as excinfo:
        _decode(earnings_payload, "earnings")
    assert "annualEarnings" in excinfo.value.message


def test_earnings_estimates(estimates_payload):
    estimates = _decode(estimates_payload, "earnings_estimates")
    assert isinstance(estimates, EarningsEstimates)
    assert len(estimates.estimates) == 2
    first = estimates.estimates[0]
    assert first.estimate_date == date(2024, 12, 31)
    assert first.eps_estimate_analyst_count == 17
    assert first.revenue_estimate_average == pytest.approx(63187390000.0)
    assert estimates.estimates[1].eps_estimate_high is None


def test_income_statement_amounts_are_integers(income_payload):
    statement = _decode(income_payload, "income_statement")
    assert isinstance(statement, IncomeStatement)
    report = statement.annual_reports[0]
    assert report.total_revenue == 61860000000
    assert isinstance(report.total_revenue, int)
    assert report.research_and_development is None
    assert report.fiscal_date_ending == date(2023, 12, 31)
    assert len(statement.quarterly_reports) == 1


def test_bad_report_value_empties_only_its_section(income_payload, caplog):
    income_payload["quarterlyReports"][0]["netIncome"] = "lots"

    with caplog.at_level(logging.WARNING, logger="alphav.decoder"):
        statement = _decode(income_payload, "income_statement")

    assert statement.symbol == "IBM"
    assert len(statement.annual_reports) == 2
    assert statement.quarterly_reports == []
    assert len(statement.errors) == 1
    error = statement.errors[0]
    assert error.section == "quarterlyReports"
    assert "netIncome" in error.message
    assert "[quarterlyReports][0]" in error.message
    assert any(getattr(r, "context", {}).get("av_event") == "section_excluded" for r in caplog.records)


def test_non_object_entry_empties_only_its_section(earnings_payload):
    earnings_payload["annualEarnings"].append("2022")
    earnings = _decode(earnings_payload, "earnings")

    assert earnings.annual_earnings == []
    assert len(earnings.quarterly_earnings) == 2
    assert [e.section for e in earnings.errors] == ["annualEarnings"]


def test_clean_sections_report_no_errors(income_payload):
    assert _decode(income_payload, "income_statement").errors == []
