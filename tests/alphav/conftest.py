import copy

import httpx
import pytest

from alphav import AlphaVantageClient, AlphaVantageConfig
from alphav.transport import HttpxTransport


DAILY_PAYLOAD = {
    "Meta Data": {
        "1. Information": "Daily Prices (open, high, low, close) and Volumes",
        "2. Symbol": "IBM",
        "3. Last Refreshed": "2024-01-05",
        "4. Output Size": "Compact",
        "5. Time Zone": "US/Eastern",
    },
    "Time Series (Daily)": {
        "2024-01-05": {
            "1. open": "162.4600",
            "2. high": "163.4000",
            "3. low": "161.6000",
            "4. close": "162.4700",
            "5. volume": "3246549",
        },
        "2024-01-04": {
            "1. open": "161.0000",
            "2. high": "161.9100",
            "3. low": "160.2600",
            "4. close": "161.8800",
            "5. volume": "2847934",
        },
        "2024-01-03": {
            "1. open": "161.0000",
            "2. high": "161.7300",
            "3. low": "160.0800",
            "4. close": "160.6800",
            "5. volume": "4086455",
        },
    },
}

INTRADAY_PAYLOAD = {
    "Meta Data": {
        "1. Information": "Intraday (5min) open, high, low, close prices and volume",
        "2. Symbol": "IBM",
        "3. Last Refreshed": "2024-01-05 19:55:00",
        "4. Interval": "5min",
        "5. Output Size": "Compact",
        "6. Time Zone": "US/Eastern",
    },
    "Time Series (5min)": {
        "2024-01-05 19:55:00": {
            "1. open": "159.0000",
            "2. high": "159.1000",
            "3. low": "158.9000",
            "4. close": "159.0500",
            "5. volume": "120",
        },
        "2024-01-05 19:50:00": {
            "1. open": "159.1000",
            "2. high": "159.2000",
            "3. low": "158.9500",
            "4. close": "159.0000",
            "5. volume": "85",
        },
    },
}

OVERVIEW_PAYLOAD = {
    "Symbol": "IBM",
    "AssetType": "Common Stock",
    "Name": "International Business Machines",
    "Exchange": "NYSE",
    "Currency": "USD",
    "Sector": "TECHNOLOGY",
    "LatestQuarter": "2023-12-31",
    "MarketCapitalization": "216450000000",
    "EBITDA": "14577000000",
    "PERatio": "22.31",
    "PEGRatio": "None",
    "DividendYield": "0",
    "EPS": "8.15",
    "AnalystRatingStrongBuy": "3",
    "52WeekHigh": "199.18",
    "DividendDate": "None",
    "ExDividendDate": "2024-02-08",
}

EARNINGS_PAYLOAD = {
    "symbol": "IBM",
    "annualEarnings": [
        {"fiscalDateEnding": "2023-12-31", "reportedEPS": "9.61"},
        {"fiscalDateEnding": "2022-12-31", "reportedEPS": "9.12"},
    ],
    "quarterlyEarnings": [
        {
            "fiscalDateEnding": "2023-12-31",
            "reportedDate": "2024-01-24",
            "reportedEPS": "3.87",
            "estimatedEPS": "3.78",
            "surprise": "0.09",
            "surprisePercentage": "2.381",
            "reportTime": "post-market",
        },
        {
            "fiscalDateEnding": "2023-09-30",
            "reportedDate": "2023-10-25",
            "reportedEPS": "2.2",
            "estimatedEPS": "None",
            "surprise": "None",
            "surprisePercentage": "None",
            "reportTime": "post-market",
        },
    ],
}

ESTIMATES_PAYLOAD = {
    "symbol": "IBM",
    "estimates": [
        {
            "date": "2024-12-31",
            "horizon": "current fiscal year",
            "eps_estimate_average": "10.1234",
            "eps_estimate_high": "10.4",
            "eps_estimate_low": "9.9",
            "eps_estimate_analyst_count": "17",
            "revenue_estimate_average": "63187390000.00",
            "revenue_estimate_analyst_count": "16",
        },
        {
            "date": "2024-03-31",
            "horizon": "next fiscal quarter",
            "eps_estimate_average": "1.6",
            "eps_estimate_analyst_count": "15",
        },
    ],
}

INCOME_PAYLOAD = {
    "symbol": "IBM",
    "annualReports": [
        {
            "fiscalDateEnding": "2023-12-31",
            "reportedCurrency": "USD",
            "grossProfit": "34300000000",
            "totalRevenue": "61860000000",
            "netIncome": "7502000000",
            "researchAndDevelopment": "None",
        },
        {
            "fiscalDateEnding": "2022-12-31",
            "reportedCurrency": "USD",
            "grossProfit": "32687000000",
            "totalRevenue": "60530000000",
            "netIncome": "1639000000",
        },
    ],
    "quarterlyReports": [
        {
            "fiscalDateEnding": "2023-12-31",
            "reportedCurrency": "USD",
            "grossProfit": "9990000000",
            "totalRevenue": "17380000000",
            "netIncome": "3288000000",
        },
    ],
}


@pytest.fixture
def daily_payload():
    return copy.deepcopy(DAILY_PAYLOAD)


@pytest.fixture
def intraday_payload():
    return copy.deepcopy(INTRADAY_PAYLOAD)


@pytest.fixture
def overview_payload():
    return copy.deepcopy(OVERVIEW_PAYLOAD)


@pytest.fixture
def earnings_payload():
    return copy.deepcopy(EARNINGS_PAYLOAD)


@pytest.fixture
def estimates_payload():
    return copy.deepcopy(ESTIMATES_PAYLOAD)


@pytest.fixture
def income_payload():
    return copy.deepcopy(INCOME_PAYLOAD)


@pytest.fixture
def make_client():
    """Return a factory building a client whose HTTP calls go to ``handler``."""

    def factory(handler, api_key="test"):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = HttpxTransport(http_client=http_client)
        return AlphaVantageClient(AlphaVantageConfig(api_key=api_key), transport=transport)

    return factory


@pytest.fixture
def serve(make_client):
    """Return a factory for a client that answers every request with ``payload``.

    The second element of the returned tuple collects the requests seen.
    """

    def factory(payload, *, status_code=200, api_key="test", headers=None):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if isinstance(payload, str):
                return httpx.Response(status_code, text=payload, headers=headers)
            return httpx.Response(status_code, json=payload, headers=headers)

        return make_client(handler, api_key=api_key), seen

    return factory
