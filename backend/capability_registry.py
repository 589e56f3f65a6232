"""
capability_registry.py — External Collaborator Contracts + Registry
=====================================================================
The engine never talks to a chain, an LLM, a mail relay or an indexer
directly. It goes through the narrow contracts below, and the caller
decides which concrete implementations are plugged in:

  WalletProvider   — one per chain name ("Algorand", "Sui", …)
  AIProvider       — generate_explanation(prompt, context_data)
  EmailProvider    — send(message)
  IndexingProvider — one coroutine per Token-API query kind

Capabilities bundles them for injection into WorkflowEngine.
"""

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from workflow_errors import MissingCapabilityError

logger = logging.getLogger("capability_registry")


# ═══════════════════════════════════════════════════════════════════
#  CONTRACTS
# ═══════════════════════════════════════════════════════════════════

@runtime_checkable
class WalletProvider(Protocol):
    native_symbol: str
    requires_token_type: bool

    async def get_balance(self, address: str, token_type: str,
                          token_address: Optional[str] = None,
                          network: Optional[str] = None) -> dict: ...

    async def get_transactions(self, address: str, limit: int,
                               transaction_type: str,
                               network: Optional[str] = None) -> list: ...

    async def get_nfts_and_tokens(self, address: str, include_nfts: bool,
                                  include_tokens: bool,
                                  network: Optional[str] = None) -> dict: ...

    async def get_token_info(self, token_address: str, include_price: bool,
                             include_metrics: bool,
                             network: Optional[str] = None) -> dict: ...

    async def stake(self, config: dict, wallet: Any) -> dict: ...

    async def swap(self, config: dict, wallet: Any) -> dict: ...


class AIProvider(Protocol):
    async def generate_explanation(self, prompt: str, context_data: dict) -> dict: ...


class EmailProvider(Protocol):
    async def send(self, message: dict) -> dict: ...


class IndexingProvider(Protocol):
    async def balances_by_address(self, params: dict) -> dict: ...
    async def transfer_events(self, params: dict) -> dict: ...
    async def token_holders(self, params: dict) -> dict: ...
    async def token_metadata(self, params: dict) -> dict: ...
    async def liquidity_pools(self, params: dict) -> dict: ...
    async def swap_events(self, params: dict) -> dict: ...
    async def nft_activities(self, params: dict) -> dict: ...
    async def nft_collection(self, params: dict) -> dict: ...
    async def pool_info(self, pool_address: str) -> dict: ...


# ═══════════════════════════════════════════════════════════════════
#  REGISTRY
# ═══════════════════════════════════════════════════════════════════

class ChainRegistry:
    """Chain name → WalletProvider."""

    def __init__(self, providers: Optional[dict] = None):
        self._providers: dict[str, WalletProvider] = dict(providers or {})

    def register(self, chain: str, provider: WalletProvider) -> None:
        self._providers[chain] = provider
        logger.info("🔗 Chain provider registered: %s", chain)

    def get(self, chain: Optional[str]) -> WalletProvider:
        provider = self._providers.get(chain) if chain else None
        if provider is None:
            raise MissingCapabilityError(f"Unsupported chain: {chain}", name=chain)
        return provider

    @property
    def chains(self) -> list[str]:
        return list(self._providers)


class Capabilities:
    """Everything a block executor may call out to."""

    def __init__(
        self,
        chains: Optional[ChainRegistry] = None,
        ai: Optional[AIProvider] = None,
        email: Optional[EmailProvider] = None,
        indexer: Optional[IndexingProvider] = None,
    ):
        self.chains = chains or ChainRegistry()
        self.ai = ai
        self.email = email
        self.indexer = indexer

    def chain(self, name: Optional[str]) -> WalletProvider:
        return self.chains.get(name)

    def require_ai(self) -> AIProvider:
        if self.ai is None:
            raise MissingCapabilityError("AI provider is not configured", name="ai")
        return self.ai

    def require_email(self) -> EmailProvider:
        if self.email is None:
            raise MissingCapabilityError("Email provider is not configured", name="email")
        return self.email

    def require_indexer(self) -> IndexingProvider:
        if self.indexer is None:
            raise MissingCapabilityError("Indexing provider is not configured", name="indexer")
        return self.indexer
