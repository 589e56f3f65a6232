"""
Shared fixtures: capability provider doubles and context builders.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from capability_registry import Capabilities, ChainRegistry
from execution_context import ExecutionContext
from preview_cache import PreviewCache
from workflow_engine import WorkflowEngine


@pytest.fixture
def sui_provider():
    """WalletProvider double for the 'Sui' chain (50 SUI native balance)"""
    provider = MagicMock()
    provider.native_symbol = "SUI"
    provider.requires_token_type = False
    provider.get_balance = AsyncMock(return_value={
        "native": {"coinType": "0x2::sui::SUI", "balance": "50000000000", "formatted": "50.0000"},
    })
    provider.get_transactions = AsyncMock(return_value=[
        {"digest": "tx1", "type": "send"},
        {"digest": "tx2", "type": "receive"},
    ])
    provider.get_nfts_and_tokens = AsyncMock(return_value={"tokens": {}, "nfts": []})
    provider.get_token_info = AsyncMock(return_value={"symbol": "SUI", "decimals": 9})
    provider.stake = AsyncMock(return_value={"txId": "stake-1"})
    provider.swap = AsyncMock(return_value={"txId": "swap-1"})
    return provider


@pytest.fixture
def ai_provider():
    provider = MagicMock()
    provider.generate_explanation = AsyncMock(return_value={
        "success": True,
        "explanation": "Your portfolio is concentrated in SUI.",
        "insights": ["Single-asset exposure", "Low activity"],
        "recommendations": ["Diversify"],
        "confidence": 0.9,
        "model": "gemini-test",
        "timestamp": "2026-01-01T00:00:00+00:00",
    })
    return provider


@pytest.fixture
def email_provider():
    provider = MagicMock()
    provider.send = AsyncMock(return_value={"success": True, "id": "m1", "dryRun": False})
    return provider


@pytest.fixture
def indexer():
    provider = MagicMock()
    for method in ("balances_by_address", "transfer_events", "token_holders", "token_metadata",
                   "liquidity_pools", "swap_events", "nft_activities", "nft_collection"):
        setattr(provider, method, AsyncMock(return_value={"data": [{"value": "1"}, {"value": "2"}]}))
    provider.pool_info = AsyncMock(return_value={
        "pairName": "USDC/WETH", "currentPrice": 3000.0, "priceChange24h": 1.5,
        "volume24h": 1000000.0, "tvl": 5000000.0,
    })
    return provider


@pytest.fixture
def capabilities(sui_provider, ai_provider, email_provider, indexer):
    return Capabilities(
        chains=ChainRegistry({"Sui": sui_provider}),
        ai=ai_provider,
        email=email_provider,
        indexer=indexer,
    )


@pytest.fixture
def engine(capabilities):
    return WorkflowEngine(capabilities, preview_cache=PreviewCache())


@pytest.fixture
def make_context():
    """Factory: ExecutionContext pre-loaded with results, in the given order."""

    def _make(results=None, name="Daily Digest", wallets=None):
        context = ExecutionContext("wf_test", name, user_wallets=wallets)
        for block_id, result in (results or {}).items():
            context.record_result(block_id, result)
        return context

    return _make
