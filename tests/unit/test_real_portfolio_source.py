import httpx
import pytest

import navengine.infrastructure.portfolio_source.real_portfolio_source as real_module
from navengine.infrastructure.portfolio_source.real_portfolio_source import (
    PortfolioSourceError,
    RealPortfolioSource,
)

URL = "https://fund.example/api/positions"

CAMEL_RECORDS = [
    {"name": "Alpha", "value": 1_000_000, "current": 1_100_000, "tokenAmount": 1_000, "lastSpikeDay": 3},
    {"name": "Beta", "initialValue": 500_000, "tokenAmount": 250, "transactionId": "tx-1"},
]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _fake_client(response, calls):
    class FakeClient:
        def __init__(self, *args, **kwargs):
            calls.append(("init", kwargs))

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def get(self, url, headers=None, params=None):
            calls.append(("get", url, headers))
            if isinstance(response, Exception):
                raise response
            return response

    return FakeClient


def _install(monkeypatch, response):
    calls = []
    monkeypatch.setattr(real_module.httpx, "AsyncClient", _fake_client(response, calls))
    return calls


@pytest.mark.asyncio
async def test_fetch_parses_camel_case_array(monkeypatch):
    calls = _install(monkeypatch, FakeResponse(200, CAMEL_RECORDS))
    source = RealPortfolioSource(URL, timeout_seconds=3.0)

    positions = await source.fetch_positions()

    assert [p.name for p in positions] == ["Alpha", "Beta"]
    assert positions[0].current_value == 1_100_000
    assert positions[0].last_spike_day == 3
    assert positions[1].current_value == 500_000
    assert positions[1].transaction_id == "tx-1"
    assert calls[0] == ("init", {"timeout": 3.0})
    assert calls[1][1] == URL
    assert "Authorization" not in calls[1][2]


@pytest.mark.asyncio
async def test_fetch_unwraps_positions_envelope(monkeypatch):
    _install(monkeypatch, FakeResponse(200, {"positions": CAMEL_RECORDS, "updatedAt": "2024-01-10"}))
    positions = await RealPortfolioSource(URL).fetch_positions()
    assert [p.name for p in positions] == ["Alpha", "Beta"]


@pytest.mark.asyncio
async def test_api_key_sent_as_bearer_token(monkeypatch):
    calls = _install(monkeypatch, FakeResponse(200, []))
    assert await RealPortfolioSource(URL, api_key=" secret ").fetch_positions() == []
    assert calls[1][2]["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_non_200_raises(monkeypatch):
    _install(monkeypatch, FakeResponse(503, None, text="maintenance"))
    with pytest.raises(PortfolioSourceError, match="503"):
        await RealPortfolioSource(URL).fetch_positions()


@pytest.mark.asyncio
async def test_invalid_json_raises(monkeypatch):
    _install(monkeypatch, FakeResponse(200, ValueError("bad json")))
    with pytest.raises(PortfolioSourceError, match="invalid JSON"):
        await RealPortfolioSource(URL).fetch_positions()


@pytest.mark.parametrize(
    "payload",
    [
        {"items": []},
        [{"name": "Alpha", "value": 0, "tokenAmount": 1}],
        [{"name": "", "value": 10, "tokenAmount": 1}],
    ],
)
@pytest.mark.asyncio
async def test_invalid_payload_raises(monkeypatch, payload):
    _install(monkeypatch, FakeResponse(200, payload))
    with pytest.raises(PortfolioSourceError):
        await RealPortfolioSource(URL).fetch_positions()


@pytest.mark.asyncio
async def test_transport_error_raises(monkeypatch):
    _install(monkeypatch, httpx.ConnectError("connection refused"))
    with pytest.raises(PortfolioSourceError, match="request failed"):
        await RealPortfolioSource(URL).fetch_positions()


def test_url_required():
    with pytest.raises(ValueError):
        RealPortfolioSource("")
