"""
Unit tests for The Graph Token API / subgraph client (HTTP faked)
"""

import aiohttp
import pytest

import graph_indexer
from graph_indexer import GraphIndexer, to_query_params
from workflow_errors import MissingCapabilityError, ProviderTransportError


class FakeResponse:
    def __init__(self, status=200, payload=None, reason="OK"):
        self.status = status
        self.reason = reason
        self._payload = payload

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response, calls, error=None):
        self.response = response
        self.calls = calls
        self.error = error

    def _request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def fake_http(monkeypatch):
    calls = []

    def install(response=None, error=None):
        monkeypatch.setattr(graph_indexer.aiohttp, "ClientSession",
                            lambda *a, **kw: FakeSession(response, calls, error))
        return calls

    return install


@pytest.fixture
def indexer():
    return GraphIndexer(api_key="Bearer secret", base_url="https://token.test/",
                        subgraph_url="https://subgraph.test/{api_key}")


def test_query_params_are_renamed_and_stringified():
    params = {"networkId": "base", "contract": "0xc", "limit": 10, "transactionId": "0xt", "to": None}
    assert to_query_params(params, skip=("contract",)) == {
        "network_id": "base", "limit": "10", "transaction_id": "0xt",
    }


@pytest.mark.asyncio
async def test_token_holders_request(fake_http, indexer):
    calls = fake_http(FakeResponse(payload={"data": [{"address": "0x1"}]}))
    body = await indexer.token_holders({"networkId": "mainnet", "contract": "0xtok", "limit": 5, "page": 1})

    assert body == {"data": [{"address": "0x1"}]}
    assert calls[0]["url"] == "https://token.test/holders/evm/0xtok"
    assert calls[0]["params"] == {"network_id": "mainnet", "limit": "5", "page": "1"}
    assert calls[0]["headers"] == {"Authorization": "Bearer secret"}


@pytest.mark.asyncio
async def test_missing_api_key(fake_http):
    calls = fake_http(FakeResponse(payload={}))
    with pytest.raises(MissingCapabilityError, match="API key"):
        await GraphIndexer(api_key="").liquidity_pools({"networkId": "mainnet"})
    assert calls == []


@pytest.mark.asyncio
async def test_non_200_becomes_transport_error(fake_http, indexer):
    fake_http(FakeResponse(status=401, reason="Unauthorized"))
    with pytest.raises(ProviderTransportError, match="401 Unauthorized") as exc:
        await indexer.swap_events({"networkId": "mainnet"})
    assert exc.value.status == 401


@pytest.mark.asyncio
async def test_client_error_becomes_transport_error(fake_http, indexer):
    fake_http(error=aiohttp.ClientConnectionError("connection refused"))
    with pytest.raises(ProviderTransportError, match="connection refused"):
        await indexer.transfer_events({"networkId": "mainnet"})


@pytest.mark.asyncio
async def test_pool_info(fake_http, indexer):
    calls = fake_http(FakeResponse(payload={"data": {
        "pool": {
            "token0": {"symbol": "USDC"}, "token1": {"symbol": "WETH"},
            "token0Price": "3000.5", "totalValueLockedUSD": "125000000",
        },
        "poolDayDatas": [
            {"date": 2, "token0Price": "110", "volumeUSD": "5000"},
            {"date": 1, "token0Price": "100", "volumeUSD": "4000"},
        ],
    }}))

    info = await indexer.pool_info("0xpool")

    assert info == {
        "pairName": "USDC/WETH",
        "currentPrice": 3000.5,
        "priceChange24h": 10.0,
        "volume24h": 5000.0,
        "tvl": 125000000.0,
    }
    assert calls[0]["url"] == "https://subgraph.test/secret"
    assert '"0xpool"' in calls[0]["json"]["query"]


@pytest.mark.asyncio
async def test_pool_info_with_single_day(fake_http, indexer):
    fake_http(FakeResponse(payload={"data": {
        "pool": {"token0": {"symbol": "PEPE"}, "token1": {"symbol": "WETH"},
                 "token0Price": "1", "totalValueLockedUSD": "10"},
        "poolDayDatas": [{"date": 1, "token0Price": "1", "volumeUSD": "7"}],
    }}))
    info = await indexer.pool_info("0xpool")
    assert info["priceChange24h"] is None
    assert info["volume24h"] == 7.0


@pytest.mark.asyncio
async def test_pool_not_found(fake_http, indexer):
    fake_http(FakeResponse(payload={"data": {"pool": None, "poolDayDatas": []}}))
    with pytest.raises(ProviderTransportError, match="Pool data not found"):
        await indexer.pool_info("0xnope")


@pytest.mark.asyncio
async def test_graphql_errors(fake_http, indexer):
    fake_http(FakeResponse(payload={"errors": [{"message": "bad query"}]}))
    with pytest.raises(ProviderTransportError, match="Failed to fetch data"):
        await indexer.pool_info("0xpool")
