import asyncio

import aiohttp
import httpx
import pytest

from alphav.config import AlphaVantageConfig
from alphav.errors import InvalidBodyError, TransportConnectionError, TransportError, TransportTimeoutError
from alphav.transport import AiohttpTransport, HttpxTransport, RawResponse, make_transport


URL = "https://www.alphavantage.co/query"


def _httpx_transport(handler):
    return HttpxTransport(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_httpx_transport_adds_key_and_returns_body():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(dict(request.url.params))
        return httpx.Response(200, text='{"ok": true}', headers={"X-Request-Id": "abc"})

    response = asyncio.run(_httpx_transport(handler).send(URL, {"function": "OVERVIEW", "symbol": "IBM"}, "k1"))

    assert response == RawResponse(status_code=200, body='{"ok": true}', request_id="abc")
    assert response.ok
    assert seen == [{"function": "OVERVIEW", "symbol": "IBM", "apikey": "k1"}]


def test_httpx_transport_passes_error_statuses_through():
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="slow down")

    response = asyncio.run(_httpx_transport(handler).send(URL, {}, "k1"))
    assert response.status_code == 429
    assert not response.ok


def test_httpx_connection_errors_are_mapped_and_redacted():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(f"connection refused for {request.url}", request=request)

    with pytest.raises(TransportConnectionError) as excinfo:
        asyncio.run(_httpx_transport(handler).send(URL, {"symbol": "IBM"}, "supersecret"))
    assert excinfo.value.code == "connection"
    assert "supersecret" not in excinfo.value.message
    assert isinstance(excinfo.value, TransportError)


def test_httpx_timeouts_are_mapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportTimeoutError):
        asyncio.run(_httpx_transport(handler).send(URL, {}, "k1"))


def test_non_utf8_body_is_invalid():
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"\xff\xfe\x00bad")

    with pytest.raises(InvalidBodyError):
        asyncio.run(_httpx_transport(handler).send(URL, {}, "k1"))


def test_injected_httpx_client_is_not_closed():
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    transport = HttpxTransport(http_client=http_client)
    asyncio.run(transport.aclose())
    assert not http_client.is_closed


class _FakeResponse:
    def __init__(self, status, content, headers=None):
        self.status = status
        self._content = content
        self.headers = headers or {}

    async def read(self):
        return self._content

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeSession:
    """Stands in for ``aiohttp.ClientSession``; records calls and replays one outcome."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []
        self.closed = False

    def get(self, url, params=None):
        self.calls.append((url, dict(params or {})))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def close(self):
        self.closed = True


def test_aiohttp_transport_sends_and_decodes():
    session = _FakeSession(_FakeResponse(200, b'{"Symbol": "IBM"}', {"X-Request-Id": "r-9"}))
    transport = AiohttpTransport(session=session)

    response = asyncio.run(transport.send(URL, {"function": "OVERVIEW", "symbol": "IBM"}, "k2"))

    assert response.body == '{"Symbol": "IBM"}'
    assert response.request_id == "r-9"
    assert session.calls == [(URL, {"function": "OVERVIEW", "symbol": "IBM", "apikey": "k2"})]

    asyncio.run(transport.aclose())
    assert session.closed is False


def test_aiohttp_errors_are_mapped():
    refused = AiohttpTransport(session=_FakeSession(aiohttp.ClientConnectionError("refused apikey=k3")))
    with pytest.raises(TransportConnectionError) as excinfo:
        asyncio.run(refused.send(URL, {}, "k3"))
    assert "k3" not in excinfo.value.message

    slow = AiohttpTransport(session=_FakeSession(asyncio.TimeoutError()))
    with pytest.raises(TransportTimeoutError):
        asyncio.run(slow.send(URL, {}, "k3"))

    garbled = AiohttpTransport(session=_FakeSession(_FakeResponse(200, b"\xc3\x28")))
    with pytest.raises(InvalidBodyError):
        asyncio.run(garbled.send(URL, {}, "k3"))


class _LoopBoundSession(_FakeSession):
    """Fails like a real session when used after its event loop is gone."""

    created = []

    def __init__(self, timeout=None):
        super().__init__(_FakeResponse(200, b"{}"))
        self.loop = asyncio.get_running_loop()
        _LoopBoundSession.created.append(self)

    def get(self, url, params=None):
        if self.loop is not asyncio.get_running_loop():
            raise RuntimeError("Event loop is closed")
        return super().get(url, params)


@pytest.fixture
def loop_bound_sessions(monkeypatch):
    monkeypatch.setattr(_LoopBoundSession, "created", [])
    monkeypatch.setattr(aiohttp, "ClientSession", _LoopBoundSession)
    return _LoopBoundSession.created


def test_owned_aiohttp_session_follows_the_running_loop(loop_bound_sessions):
    transport = AiohttpTransport()

    first = asyncio.run(transport.send(URL, {"function": "OVERVIEW"}, "k"))
    second = asyncio.run(transport.send(URL, {"function": "OVERVIEW"}, "k"))

    assert first.ok and second.ok
    assert len(loop_bound_sessions) == 2

    async def twice():
        await transport.send(URL, {}, "k")
        await transport.send(URL, {}, "k")
        await transport.aclose()

    asyncio.run(twice())
    assert len(loop_bound_sessions) == 3
    assert loop_bound_sessions[-1].closed is True
    assert loop_bound_sessions[0].closed is False


def test_owned_aiohttp_session_is_rebuilt_after_close(loop_bound_sessions):
    transport = AiohttpTransport()

    async def run():
        await transport.send(URL, {}, "k")
        await transport.aclose()
        await transport.send(URL, {}, "k")

    asyncio.run(run())
    assert [s.closed for s in loop_bound_sessions] == [True, False]


def test_make_transport_selects_backend():
    assert isinstance(make_transport(AlphaVantageConfig()), HttpxTransport)
    assert isinstance(make_transport(AlphaVantageConfig(backend="aiohttp")), AiohttpTransport)
