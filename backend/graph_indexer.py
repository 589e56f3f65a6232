"""
graph_indexer.py — The Graph Token API + Uniswap V3 Subgraph Client
=====================================================================
IndexingProvider used by the indexing blocks and the coin-symbol variant
of tokenInfo.

Token API (REST, bearer auth):
  balances_by_address → /balances/evm/{address}
  transfer_events     → /transfers/evm
  token_holders       → /holders/evm/{contract}
  token_metadata      → /tokens/evm/{contract}
  liquidity_pools     → /pools/evm
  swap_events         → /swaps/evm
  nft_activities      → /nft/activities/evm
  nft_collection      → /nft/collections/evm/{contract}

Uniswap V3 subgraph (GraphQL):
  pool_info(pool_address) → pair name, price, 24h change, 24h volume, TVL

Transport problems and non-2xx replies raise ProviderTransportError;
a missing API key raises MissingCapabilityError.
"""

import asyncio
import logging
import os
from typing import Optional

import aiohttp
from dotenv import load_dotenv

from workflow_errors import MissingCapabilityError, ProviderTransportError

load_dotenv()
logger = logging.getLogger("graph_indexer")

TOKEN_API_URL = "https://token-api.thegraph.com"
THE_GRAPH_API_KEY = os.getenv("THE_GRAPH_API_KEY", "")
UNISWAP_V3_SUBGRAPH_URL = os.getenv(
    "UNISWAP_V3_SUBGRAPH_URL",
    "https://gateway.thegraph.com/api/{api_key}/subgraphs/id/5zvR82QoaXYFyDEKLZ9t6v9adgnptxYpKpSbxtgVENFV",
)

# camelCase block params → Token API query names
QUERY_PARAM_NAMES = {
    "networkId": "network_id",
    "transactionId": "transaction_id",
}

POOL_QUERY = """
{
  pool(id: "%(pool)s") {
    token0 { symbol }
    token1 { symbol }
    token0Price
    totalValueLockedUSD
  }
  poolDayDatas(where: {pool: "%(pool)s"}, first: 2, orderBy: date, orderDirection: desc) {
    date
    token0Price
    volumeUSD
  }
}
"""


def _clean_key(raw: str) -> str:
    key = (raw or "").strip()
    if key.lower().startswith("bearer "):
        key = key[7:].strip()
    return key


def to_query_params(params: dict, skip: tuple = ()) -> dict:
    query = {}
    for key, value in params.items():
        if key in skip or value is None:
            continue
        query[QUERY_PARAM_NAMES.get(key, key)] = str(value)
    return query


class GraphIndexer:
    def __init__(self, api_key: str = THE_GRAPH_API_KEY, base_url: str = TOKEN_API_URL,
                 subgraph_url: str = UNISWAP_V3_SUBGRAPH_URL, timeout: float = 10):
        self.api_key = _clean_key(api_key)
        self.base_url = base_url.rstrip("/")
        self.subgraph_url = subgraph_url
        self.timeout = timeout

    # ═══════════════════════════════════════════════════════════════
    #  TRANSPORT
    # ═══════════════════════════════════════════════════════════════

    def _require_key(self) -> str:
        if not self.api_key:
            raise MissingCapabilityError("The Graph API key is not configured", name="indexer")
        return self.api_key

    async def _api_get(self, path: str, params: Optional[dict] = None) -> dict:
        """GET a Token API endpoint and return the decoded JSON body."""
        headers = {"Authorization": f"Bearer {self._require_key()}"}
        url = f"{self.base_url}{path}"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, params=params, headers=headers,
                                       timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                    if resp.status != 200:
                        logger.error("Token API %d on %s", resp.status, path)
                        raise ProviderTransportError(
                            "The Graph", f"{resp.status} {resp.reason or ''}".strip(), status=resp.status,
                        )
                    return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Token API request failed: %s", e)
            raise ProviderTransportError("The Graph", str(e)) from e

    async def _subgraph_query(self, query: str) -> dict:
        url = self.subgraph_url.format(api_key=self._require_key())
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(url, json={"query": query},
                                        timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                    if resp.status != 200:
                        logger.error("Subgraph HTTP %d", resp.status)
                        raise ProviderTransportError("Uniswap subgraph", f"HTTP {resp.status}", status=resp.status)
                    body = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Subgraph request failed: %s", e)
            raise ProviderTransportError("Uniswap subgraph", str(e)) from e

        if body.get("errors"):
            logger.error("Subgraph GraphQL errors: %s", body["errors"])
            raise ProviderTransportError("Uniswap subgraph", "Failed to fetch data from subgraph")
        return body.get("data") or {}

    # ═══════════════════════════════════════════════════════════════
    #  TOKEN API QUERIES
    # ═══════════════════════════════════════════════════════════════

    async def balances_by_address(self, params: dict) -> dict:
        return await self._api_get(f"/balances/evm/{params['address']}",
                                   to_query_params(params, skip=("address",)))

    async def transfer_events(self, params: dict) -> dict:
        return await self._api_get("/transfers/evm", to_query_params(params))

    async def token_holders(self, params: dict) -> dict:
        return await self._api_get(f"/holders/evm/{params['contract']}",
                                   to_query_params(params, skip=("contract",)))

    async def token_metadata(self, params: dict) -> dict:
        return await self._api_get(f"/tokens/evm/{params['contract']}",
                                   to_query_params(params, skip=("contract",)))

    async def liquidity_pools(self, params: dict) -> dict:
        return await self._api_get("/pools/evm", to_query_params(params))

    async def swap_events(self, params: dict) -> dict:
        return await self._api_get("/swaps/evm", to_query_params(params))

    async def nft_activities(self, params: dict) -> dict:
        return await self._api_get("/nft/activities/evm", to_query_params(params))

    async def nft_collection(self, params: dict) -> dict:
        return await self._api_get(f"/nft/collections/evm/{params['contract']}",
                                   to_query_params(params, skip=("contract",)))

    # ═══════════════════════════════════════════════════════════════
    #  UNISWAP V3 POOL STATS
    # ═══════════════════════════════════════════════════════════════

    async def pool_info(self, pool_address: str) -> dict:
        data = await self._subgraph_query(POOL_QUERY % {"pool": pool_address})
        pool = data.get("pool")
        if not pool:
            raise ProviderTransportError("Uniswap subgraph", "Pool data not found", status=404)

        day_datas = data.get("poolDayDatas") or []
        change = None
        if len(day_datas) >= 2:
            current, previous = float(day_datas[0]["token0Price"]), float(day_datas[1]["token0Price"])
            if previous:
                change = round((current - previous) / previous * 100, 4)

        return {
            "pairName": f"{pool['token0']['symbol']}/{pool['token1']['symbol']}",
            "currentPrice": float(pool["token0Price"]),
            "priceChange24h": change,
            "volume24h": float(day_datas[0]["volumeUSD"]) if day_datas else None,
            "tvl": float(pool["totalValueLockedUSD"]),
        }
