"""
algorand_wallet.py — Algorand WalletProvider (py-algorand-sdk)
================================================================
Chain provider registered as "Algorand":
  • balances via algod account_info (ALGO + opted-in ASAs)
  • transaction history via the Indexer
  • NFT/token split of held assets (total=1, decimals=0 → NFT)
  • ASA metadata for tokenInfo
  • stake / swap build UNSIGNED transactions and hand them to the
    connected wallet handle (`await wallet.sign_and_send(txn)`).
    The backend never holds keys.

All SDK calls are blocking, so they run in the default executor.
"""

import asyncio
import base64
import functools
import json
import logging
import math
import os
from typing import Any, Optional

from algosdk import transaction
from algosdk.error import AlgodHTTPError, IndexerHTTPError
from algosdk.v2client import algod, indexer
from dotenv import load_dotenv

from workflow_errors import ConfigurationError, ProviderTransportError

load_dotenv()
logger = logging.getLogger("algorand_wallet")

# ─── Algorand network config (Algonode public endpoints) ─────────
NETWORK_ENDPOINTS = {
    "mainnet": ("https://mainnet-api.algonode.cloud", "https://mainnet-idx.algonode.cloud"),
    "testnet": ("https://testnet-api.algonode.cloud", "https://testnet-idx.algonode.cloud"),
}
DEFAULT_NETWORK = os.getenv("ALGORAND_NETWORK", "testnet")
ALGOD_URL = os.getenv("ALGOD_URL", NETWORK_ENDPOINTS[DEFAULT_NETWORK][0])
INDEXER_URL = os.getenv("INDEXER_URL", NETWORK_ENDPOINTS[DEFAULT_NETWORK][1])
ALGOD_TOKEN = os.getenv("ALGOD_TOKEN", "")
STAKING_ADDRESS = os.getenv("ALGORAND_STAKING_ADDRESS", "")
SWAP_ROUTER_ADDRESS = os.getenv("ALGORAND_SWAP_ROUTER_ADDRESS", "")

ALGO_DECIMALS = 6
MICROALGOS = 10 ** ALGO_DECIMALS

# transactionType → Indexer search filters
TRANSACTION_FILTERS = {
    "All": {},
    "Send": {"address_role": "sender"},
    "Receive": {"address_role": "receiver"},
    "Swap": {"txn_type": "appl"},
    "Stake": {"txn_type": "keyreg"},
}


def _format_amount(amount: int, decimals: int) -> str:
    return f"{amount / (10 ** decimals):.{decimals}f}" if decimals else str(amount)


def _is_algo(token: Any) -> bool:
    return str(token or "ALGO").strip().upper() in ("ALGO", "NATIVE", "0")


class AlgorandWalletProvider:
    native_symbol = "ALGO"
    requires_token_type = False

    def __init__(self, algod_url: str = ALGOD_URL, indexer_url: str = INDEXER_URL,
                 algod_token: str = ALGOD_TOKEN, network: str = DEFAULT_NETWORK):
        self.network = network
        self._clients = {network: (algod.AlgodClient(algod_token, algod_url),
                                   indexer.IndexerClient("", indexer_url))}
        self._asset_params: dict[int, dict] = {}

    # ═══════════════════════════════════════════════════════════════
    #  PLUMBING
    # ═══════════════════════════════════════════════════════════════

    def _clients_for(self, network: Optional[str]):
        network = network or self.network
        if network not in self._clients:
            if network not in NETWORK_ENDPOINTS:
                raise ConfigurationError(f"Unsupported Algorand network: {network}", field="network")
            algod_url, indexer_url = NETWORK_ENDPOINTS[network]
            self._clients[network] = (algod.AlgodClient("", algod_url),
                                      indexer.IndexerClient("", indexer_url))
        return self._clients[network]

    async def _call(self, fn, *args, **kwargs):
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))
        except (AlgodHTTPError, IndexerHTTPError) as e:
            logger.error("Algorand call %s failed: %s", getattr(fn, "__name__", fn), e)
            raise ProviderTransportError("Algorand", str(e), status=getattr(e, "code", None)) from e

    async def _asset(self, client, asset_id: int) -> dict:
        if asset_id not in self._asset_params:
            info = await self._call(client.asset_info, asset_id)
            self._asset_params[asset_id] = info.get("params", {})
        return self._asset_params[asset_id]

    # ═══════════════════════════════════════════════════════════════
    #  READS
    # ═══════════════════════════════════════════════════════════════

    async def get_balance(self, address: str, token_type: str,
                          token_address: Optional[str] = None,
                          network: Optional[str] = None) -> dict:
        algod_client, _ = self._clients_for(network)
        info = await self._call(algod_client.account_info, address)

        balances = {}
        if token_type in ("Native", "All Tokens"):
            amount = info.get("amount", 0)
            balances["native"] = {
                "symbol": self.native_symbol,
                "balance": str(amount),
                "formatted": _format_amount(amount, ALGO_DECIMALS),
                "minBalance": _format_amount(info.get("min-balance", 100_000), ALGO_DECIMALS),
            }
        if token_type == "Native":
            return balances

        for holding in info.get("assets", []):
            asset_id = holding.get("asset-id")
            if token_type == "Specific Token" and str(asset_id) != str(token_address):
                continue
            params = await self._asset(algod_client, asset_id)
            decimals = params.get("decimals", 0)
            balances[str(asset_id)] = {
                "assetId": asset_id,
                "symbol": params.get("unit-name"),
                "name": params.get("name"),
                "balance": str(holding.get("amount", 0)),
                "formatted": _format_amount(holding.get("amount", 0), decimals),
            }
        return balances

    async def get_transactions(self, address: str, limit: int,
                               transaction_type: str,
                               network: Optional[str] = None) -> list:
        _, indexer_client = self._clients_for(network)
        filters = TRANSACTION_FILTERS.get(transaction_type, {})
        data = await self._call(indexer_client.search_transactions,
                                address=address, limit=limit, **filters)

        result = []
        for txn in data.get("transactions", []):
            pay = txn.get("payment-transaction", {})
            axfer = txn.get("asset-transfer-transaction", {})
            receiver = pay.get("receiver") or axfer.get("receiver", "")
            result.append({
                "txId": txn.get("id", ""),
                "type": txn.get("tx-type", ""),
                "direction": "sent" if txn.get("sender") == address else "received",
                "sender": txn.get("sender", ""),
                "receiver": receiver,
                "amount": pay.get("amount", axfer.get("amount", 0)),
                "assetId": axfer.get("asset-id"),
                "fee": txn.get("fee", 0),
                "round": txn.get("confirmed-round", 0),
                "timestamp": txn.get("round-time", 0),
            })
        return result

    async def get_nfts_and_tokens(self, address: str, include_nfts: bool,
                                  include_tokens: bool,
                                  network: Optional[str] = None) -> dict:
        algod_client, _ = self._clients_for(network)
        info = await self._call(algod_client.account_info, address)

        tokens, nfts = [], []
        for holding in info.get("assets", []):
            if not holding.get("amount"):
                continue
            asset_id = holding.get("asset-id")
            params = await self._asset(algod_client, asset_id)
            entry = {
                "assetId": asset_id,
                "name": params.get("name"),
                "symbol": params.get("unit-name"),
                "amount": holding.get("amount", 0),
                "url": params.get("url"),
            }
            if params.get("total") == 1 and params.get("decimals", 0) == 0:
                nfts.append(entry)
            else:
                entry["formatted"] = _format_amount(entry["amount"], params.get("decimals", 0))
                tokens.append(entry)

        result = {}
        if include_tokens:
            result["tokens"] = tokens
        if include_nfts:
            result["nfts"] = nfts
        return result

    async def get_token_info(self, token_address: str, include_price: bool,
                             include_metrics: bool,
                             network: Optional[str] = None) -> dict:
        try:
            asset_id = int(str(token_address).strip())
        except ValueError:
            raise ConfigurationError(f"Invalid Algorand asset id: {token_address}", field="tokenAddress")

        algod_client, _ = self._clients_for(network)
        params = await self._asset(algod_client, asset_id)
        result = {
            "address": str(asset_id),
            "name": params.get("name"),
            "symbol": params.get("unit-name"),
            "decimals": params.get("decimals", 0),
            "url": params.get("url"),
        }
        if include_metrics:
            result["totalSupply"] = _format_amount(params.get("total", 0), params.get("decimals", 0))
            result["creator"] = params.get("creator")
        if include_price:
            # No on-chain price oracle is wired for Algorand ASAs
            result["price"] = None
        return result

    # ═══════════════════════════════════════════════════════════════
    #  WRITES — unsigned txn → wallet handle signs + submits
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _wallet_address(wallet: Any) -> str:
        address = getattr(wallet, "address", None)
        if not address:
            raise ConfigurationError("Connected Algorand wallet has no address", field="wallet")
        return address

    @staticmethod
    def _signer(wallet: Any):
        sign_and_send = getattr(wallet, "sign_and_send", None)
        if sign_and_send is None:
            raise ConfigurationError("Connected Algorand wallet cannot sign transactions", field="wallet")
        return sign_and_send

    @staticmethod
    def _amount(config: dict) -> float:
        amount = float(config["amount"])
        if not math.isfinite(amount) or amount <= 0:
            raise ConfigurationError("Amount must be a positive number", field="amount")
        return amount

    async def _submit(self, sign_and_send, txn) -> dict:
        receipt = await sign_and_send(txn)
        if isinstance(receipt, dict):
            return receipt
        return {"txId": receipt}

    async def _build_transfer(self, network: Optional[str], sender: str, receiver: str,
                              token: Any, amount: float, note: dict):
        algod_client, _ = self._clients_for(network)
        sp = await self._call(algod_client.suggested_params)
        encoded_note = json.dumps(note).encode("utf-8")

        if _is_algo(token):
            return transaction.PaymentTxn(
                sender=sender, sp=sp, receiver=receiver,
                amt=int(amount * MICROALGOS), note=encoded_note,
            )
        asset_id = int(str(token))
        params = await self._asset(algod_client, asset_id)
        return transaction.AssetTransferTxn(
            sender=sender, sp=sp, receiver=receiver,
            amt=int(amount * (10 ** params.get("decimals", 0))),
            index=asset_id, note=encoded_note,
        )

    async def stake(self, config: dict, wallet: Any) -> dict:
        validator = config.get("validator") or STAKING_ADDRESS
        if not validator:
            raise ConfigurationError("Validator address is required", field="validator")
        amount = self._amount(config)
        sign_and_send = self._signer(wallet)

        txn = await self._build_transfer(
            config.get("network"), self._wallet_address(wallet), validator,
            config.get("tokenAddress"), amount,
            {"action": "stake", "autoCompound": bool(config.get("autoCompound", False))},
        )
        logger.info("🥩 Stake txn built — %s from %s to %s", amount, self._wallet_address(wallet)[:8], validator[:8])
        receipt = await self._submit(sign_and_send, txn)
        return {"status": "submitted", "validator": validator, "amount": amount, **receipt}

    async def swap(self, config: dict, wallet: Any) -> dict:
        router = config.get("router") or SWAP_ROUTER_ADDRESS
        if not router:
            raise ConfigurationError("Swap router address is required", field="router")
        amount = self._amount(config)
        sign_and_send = self._signer(wallet)
        slippage = float(config.get("slippage") or 0.5)

        txn = await self._build_transfer(
            config.get("network"), self._wallet_address(wallet), router,
            config.get("fromToken"), amount,
            {"action": "swap", "to": str(config.get("toToken")), "slippage": slippage},
        )
        logger.info("🔄 Swap txn built — %s %s → %s", amount, config.get("fromToken"), config.get("toToken"))
        receipt = await self._submit(sign_and_send, txn)
        return {
            "status": "submitted",
            "fromToken": config.get("fromToken"),
            "toToken": config.get("toToken"),
            "amount": amount,
            "slippage": slippage,
            **receipt,
        }


def decode_note(txn) -> dict:
    """Recover the JSON note attached to a built transaction."""
    raw = txn.note or b""
    if isinstance(raw, str):
        raw = base64.b64decode(raw)
    return json.loads(raw.decode("utf-8")) if raw else {}
