"""
block_executors.py — One Executor per Workflow Block Type
===========================================================
Every block kind the builder can place on the canvas has an executor
registered here under its `block.type` string. An executor:

  1. checks the required fields of `block.config` (ConfigurationError),
  2. calls the relevant capability provider(s),
  3. wraps the raw payload into a stable tagged result `{type, ...}`.

Each executor also declares how its failures surface:

  failure_mode = "throws"   — provider errors propagate; the run stops
  failure_mode = "reports"  — provider errors become a result payload
                              ({success: False, error} / {status: "failed"})

and whether such a reported failure should halt the run
(`halts_on_reported_failure`). The interpreter reads these declarations
instead of special-casing block types.

Adding a block kind = subclass BlockExecutor + @register_executor.
"""

import logging
import math
import re
import time
from datetime import datetime, timezone
from typing import Any, Optional

from capability_registry import Capabilities
from execution_context import ExecutionContext
from field_resolver import resolve_field
from template_engine import interpolate, stringify
from workflow_errors import (
    ConfigurationError,
    MissingCapabilityError,
    MissingWalletError,
    UnknownBlockTypeError,
)

logger = logging.getLogger("block_executors")

THROWS = "throws"
REPORTS = "reports"

CONDITIONS = ("Greater Than", "Less Than", "Equal To", "Contains")

# Uniswap V3 pools used by the coin-symbol variant of tokenInfo
COIN_POOL_ADDRESSES = {
    "eth": "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640",
    "pepe": "0xcee31c846cbf003f4ceb5bbd234cba03c6e940c7",
    "shib": "0x2f62f2b4c5fcd7570a709dec05d68ea19c82a9ec",
}

TOKEN_API_NETWORKS = (
    "arbitrum-one", "avalanche", "base", "bsc",
    "mainnet", "matic", "optimism", "unichain",
)

TIME_PRESETS = {
    "Last 1h": 60 * 60,
    "Last 24h": 24 * 60 * 60,
    "Last 7d": 7 * 24 * 60 * 60,
    "Last 30d": 30 * 24 * 60 * 60,
}
MAX_END_TIME = 9999999999

_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


# ═══════════════════════════════════════════════════════════════════
#  SMALL HELPERS
# ═══════════════════════════════════════════════════════════════════

def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_float(value: Any) -> float:
    """Permissive number parse: leading numeric prefix of the text, else NaN."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_NUMBER_RE.match(str(value))
    return float(match.group(1)) if match else math.nan


def _as_int(value: Any, default: int, lo: Optional[int] = None, hi: Optional[int] = None) -> int:
    number = parse_float(value)
    if math.isnan(number):
        result = default
    elif math.isinf(number):
        # Out of range: clamp to the matching bound when there is one
        bound = hi if number > 0 else lo
        result = default if bound is None else bound
    else:
        result = int(number)
    if lo is not None:
        result = max(lo, result)
    if hi is not None:
        result = min(hi, result)
    return result


def _flag(config: dict, key: str, default: bool) -> bool:
    value = config.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "")
    return bool(value)


def _config_of(block: dict) -> dict:
    config = block.get("config")
    if not isinstance(config, dict):
        raise ConfigurationError("Block configuration is missing", field="config")
    return config


def evaluate_condition(condition: str, value: Any, field_value: Any) -> bool:
    if condition == "Contains":
        return stringify(value).lower() in stringify(field_value).lower()

    expected = parse_float(value)
    actual = parse_float(field_value)
    if math.isnan(expected) or math.isnan(actual):
        return False
    if condition == "Greater Than":
        return actual > expected
    if condition == "Less Than":
        return actual < expected
    if condition == "Equal To":
        return actual == expected
    return False


# ═══════════════════════════════════════════════════════════════════
#  BASE CLASS + REGISTRY
# ═══════════════════════════════════════════════════════════════════

class BlockExecutor:
    block_type: str = ""
    failure_mode: str = THROWS
    halts_on_reported_failure: bool = True
    # (config key, human label) pairs that must be present
    required_fields: tuple = ()

    def missing_fields(self, config: dict) -> list[tuple[str, str]]:
        return [(key, label) for key, label in self.required_fields
                if is_missing(config.get(key))]

    def validation_errors(self, config: dict) -> list[str]:
        """Structural problems, as messages. Used by the pre-flight validator."""
        return [f"{label} is required" for _, label in self.missing_fields(config)]

    def check_config(self, config: dict) -> None:
        missing = self.missing_fields(config)
        if missing:
            key, label = missing[0]
            raise ConfigurationError.missing(key, label)

    async def execute(self, block: dict, context: ExecutionContext,
                      caps: Capabilities) -> dict:
        raise NotImplementedError


EXECUTORS: dict[str, BlockExecutor] = {}


def register_executor(cls):
    EXECUTORS[cls.block_type] = cls()
    return cls


def get_executor(block_type: Optional[str]) -> BlockExecutor:
    executor = EXECUTORS.get(block_type or "")
    if executor is None:
        raise UnknownBlockTypeError(str(block_type))
    return executor


async def run_block(block: dict, context: ExecutionContext, caps: Capabilities) -> dict:
    """Dispatch one block and stamp executionTime / timestamp onto its result."""
    executor = get_executor(block.get("type"))
    started = time.monotonic()
    result = await executor.execute(block, context, caps)
    return {
        **result,
        "executionTime": int((time.monotonic() - started) * 1000),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ═══════════════════════════════════════════════════════════════════
#  WALLET BLOCKS
# ═══════════════════════════════════════════════════════════════════

_WALLET_FIELDS = (("walletAddress", "Wallet address"), ("chain", "Chain selection"))


@register_executor
class WalletBalanceExecutor(BlockExecutor):
    block_type = "walletBalance"
    required_fields = _WALLET_FIELDS

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)
        chain = config["chain"]
        provider = caps.chain(chain)

        token_type = config.get("tokenType")
        if is_missing(token_type):
            if getattr(provider, "requires_token_type", False) is True:
                raise ConfigurationError(f"tokenType is required for {chain}", field="tokenType")
            token_type = "All Tokens"
        token_address = config.get("tokenAddress") if token_type == "Specific Token" else None

        balance = await provider.get_balance(
            config["walletAddress"], token_type, token_address,
            network=config.get("network"),
        )
        return {
            "type": "wallet_balance",
            "chain": chain,
            "address": config["walletAddress"],
            "balance": balance,
            "tokenType": token_type,
            "network": config.get("network"),
        }


@register_executor
class WalletTransactionExecutor(BlockExecutor):
    block_type = "walletTransaction"
    required_fields = _WALLET_FIELDS

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)
        chain = config["chain"]
        provider = caps.chain(chain)

        transactions = await provider.get_transactions(
            config["walletAddress"],
            _as_int(config.get("limit"), 10, lo=1, hi=100),
            config.get("transactionType") or "All",
            network=config.get("network"),
        )
        transactions = list(transactions or [])
        return {
            "type": "wallet_transactions",
            "chain": chain,
            "address": config["walletAddress"],
            "transactions": transactions,
            "count": len(transactions),
        }


@register_executor
class WalletNFTExecutor(BlockExecutor):
    block_type = "walletNFT"
    required_fields = _WALLET_FIELDS

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)
        chain = config["chain"]
        provider = caps.chain(chain)

        data = await provider.get_nfts_and_tokens(
            config["walletAddress"],
            _flag(config, "includeNFTs", True),
            _flag(config, "includeTokens", True),
            network=config.get("network"),
        )
        return {
            "type": "wallet_nft_tokens",
            "chain": chain,
            "address": config["walletAddress"],
            "data": data,
        }


# ═══════════════════════════════════════════════════════════════════
#  TOKEN INFO
# ═══════════════════════════════════════════════════════════════════

@register_executor
class TokenInfoExecutor(BlockExecutor):
    """
    Two variants:
      Coin Symbol   — `coin` → fixed pool address → subgraph pool stats
      Token Address — `tokenAddress` + `chain` → chain provider metadata
    """

    block_type = "tokenInfo"

    @staticmethod
    def input_type(config: dict) -> str:
        explicit = config.get("inputType")
        if explicit in ("Coin Symbol", "Token Address"):
            return explicit
        if not is_missing(config.get("coin")) and is_missing(config.get("tokenAddress")):
            return "Coin Symbol"
        return "Token Address"

    def missing_fields(self, config):
        if self.input_type(config) == "Coin Symbol":
            fields = (("coin", "Coin symbol"),)
        else:
            fields = (("tokenAddress", "Token address"), ("chain", "Chain selection"))
        return [(k, label) for k, label in fields if is_missing(config.get(k))]

    def validation_errors(self, config):
        errors = super().validation_errors(config)
        coin = config.get("coin")
        if (self.input_type(config) == "Coin Symbol" and not is_missing(coin)
                and str(coin).lower() not in COIN_POOL_ADDRESSES):
            errors.append(f"Unsupported coin: {coin}")
        return errors

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)

        if self.input_type(config) == "Coin Symbol":
            coin = str(config["coin"]).lower()
            pool_address = COIN_POOL_ADDRESSES.get(coin)
            if pool_address is None:
                raise ConfigurationError(
                    f"Unsupported coin: {coin}. Supported coins: {', '.join(COIN_POOL_ADDRESSES)}",
                    field="coin",
                )
            pool = await caps.require_indexer().pool_info(pool_address)
            return {
                "type": "token_info",
                "inputType": "Coin Symbol",
                "coin": coin.upper(),
                "poolAddress": pool_address,
                "tokenInfo": pool,
            }

        chain = config["chain"]
        provider = caps.chain(chain)
        token_info = await provider.get_token_info(
            config["tokenAddress"],
            _flag(config, "includePrice", True),
            _flag(config, "includeMetrics", True),
            network=config.get("network"),
        )
        return {
            "type": "token_info",
            "inputType": "Token Address",
            "chain": chain,
            "tokenAddress": config["tokenAddress"],
            "tokenInfo": token_info,
        }


# ═══════════════════════════════════════════════════════════════════
#  CONDITIONAL
# ═══════════════════════════════════════════════════════════════════

@register_executor
class ConditionalExecutor(BlockExecutor):
    block_type = "conditional"
    required_fields = (("condition", "Condition"), ("value", "Value"), ("field", "Field"))

    def validation_errors(self, config):
        if self.missing_fields(config):
            return ["Condition, value, and field are required"]
        if config["condition"] not in CONDITIONS:
            return [f"Unsupported condition: {config['condition']}"]
        return []

    async def execute(self, block, context, caps):
        config = _config_of(block)
        if self.missing_fields(config):
            raise ConfigurationError("Condition, value, and field are required", field="condition")
        condition = config["condition"]
        if condition not in CONDITIONS:
            raise ConfigurationError(f"Unsupported condition: {condition}", field="condition")

        field_value = resolve_field(str(config["field"]), context)
        passed = evaluate_condition(condition, config["value"], field_value)
        logger.info("🔀 Condition %s %r %s %r → %s",
                    config["field"], field_value, condition, config["value"], passed)
        return {
            "type": "conditional",
            "condition": condition,
            "value": config["value"],
            "field": config["field"],
            "fieldValue": field_value,
            "result": passed,
            "passed": passed,
        }


# ═══════════════════════════════════════════════════════════════════
#  STAKE / SWAP — need a connected wallet handle
# ═══════════════════════════════════════════════════════════════════

def _is_positive_amount(value: Any) -> bool:
    amount = parse_float(value)
    return math.isfinite(amount) and amount > 0


class _WalletActionExecutor(BlockExecutor):
    result_type = ""

    def validation_errors(self, config):
        errors = super().validation_errors(config)
        amount = config.get("amount")
        if not is_missing(amount) and not _is_positive_amount(amount):
            errors.append("Amount must be a positive number")
        return errors

    def check_config(self, config):
        super().check_config(config)
        if not _is_positive_amount(config["amount"]):
            raise ConfigurationError("Amount must be a positive number", field="amount")

    async def perform(self, provider, config: dict, wallet: Any) -> dict:
        raise NotImplementedError

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)
        chain = config["chain"]

        wallet = context.user_wallets.get(chain)
        if wallet is None:
            raise MissingWalletError(chain)
        provider = caps.chain(chain)

        amount = parse_float(config["amount"])
        receipt = await self.perform(provider, {**config, "amount": amount}, wallet)
        return {
            "type": self.result_type,
            "chain": chain,
            "amount": amount,
            "result": receipt,
        }


@register_executor
class StakeExecutor(_WalletActionExecutor):
    block_type = "stake"
    result_type = "stake"
    required_fields = (("chain", "Chain selection"), ("amount", "Amount"))

    async def perform(self, provider, config, wallet):
        return await provider.stake(config, wallet)


@register_executor
class SwapExecutor(_WalletActionExecutor):
    block_type = "swap"
    result_type = "swap"
    required_fields = (
        ("chain", "Chain selection"),
        ("amount", "Amount"),
        ("fromToken", "From token"),
        ("toToken", "To token"),
    )

    async def perform(self, provider, config, wallet):
        return await provider.swap(config, wallet)


# ═══════════════════════════════════════════════════════════════════
#  CONFIGURATION-ECHO BLOCKS (wallet connect + scheduling live in the host)
# ═══════════════════════════════════════════════════════════════════

@register_executor
class EmbeddedWalletExecutor(BlockExecutor):
    block_type = "embeddedWallet"
    required_fields = (("chain", "Chain selection"),)

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)
        return {
            "type": "embedded_wallet",
            "chain": config["chain"],
            "status": "initialized",
            "autoConnect": _flag(config, "autoConnect", True),
            "loginMethod": config.get("loginMethod"),
            "network": config.get("network"),
        }


MIN_CRON_INTERVAL = 5


def cron_settings(config: dict) -> dict:
    """interval (seconds, min 5), enabled, maxRuns (0 = unlimited) with defaults applied."""
    return {
        "interval": _as_int(config.get("interval"), MIN_CRON_INTERVAL, lo=MIN_CRON_INTERVAL),
        "enabled": _flag(config, "enabled", True),
        "maxRuns": _as_int(config.get("maxRuns"), 0, lo=0),
    }


@register_executor
class CronjobExecutor(BlockExecutor):
    block_type = "cronjob"

    def validation_errors(self, config):
        interval = config.get("interval")
        if not is_missing(interval):
            seconds = parse_float(interval)
            if math.isinf(seconds):
                return ["Interval must be a finite number of seconds"]
            if not seconds >= MIN_CRON_INTERVAL:
                return [f"Interval must be at least {MIN_CRON_INTERVAL} seconds"]
        max_runs = config.get("maxRuns")
        if not is_missing(max_runs):
            runs = parse_float(max_runs)
            if math.isinf(runs):
                return ["Max runs must be a finite number"]
            if not runs >= 0:
                return ["Max runs must be zero or more"]
        return []

    async def execute(self, block, context, caps):
        config = _config_of(block)
        errors = self.validation_errors(config)
        if errors:
            raise ConfigurationError(errors[0], field="interval")
        return {"type": "cronjob", **cron_settings(config), "status": "configured"}


# ═══════════════════════════════════════════════════════════════════
#  AI EXPLANATION
# ═══════════════════════════════════════════════════════════════════

def _native_symbol(caps: Capabilities, chain: Optional[str]) -> Optional[str]:
    try:
        symbol = getattr(caps.chain(chain), "native_symbol", None)
    except MissingCapabilityError:
        return None
    return symbol if isinstance(symbol, str) else None


def summarize_portfolio(context: ExecutionContext, caps: Capabilities) -> dict:
    """
    Condense prior wallet results for the AI prompt:
      nativeTotals      — {chain: {symbol: summed formatted amount}}
      transactionCounts — {chain: number of transactions seen}
    """
    native_totals: dict[str, dict[str, float]] = {}
    tx_counts: dict[str, int] = {}

    for result in context.results.values():
        if not isinstance(result, dict):
            continue
        chain = result.get("chain") or "unknown"

        if result.get("type") == "wallet_balance":
            balance = result.get("balance")
            if not isinstance(balance, dict):
                continue
            totals = native_totals.setdefault(chain, {})
            for key, entry in balance.items():
                if not isinstance(entry, dict):
                    continue
                amount = parse_float(entry.get("formatted"))
                if math.isnan(amount):
                    continue
                symbol = entry.get("symbol")
                if not symbol and key == "native":
                    symbol = _native_symbol(caps, chain)
                symbol = symbol or str(key).split("::")[-1]
                totals[symbol] = round(totals.get(symbol, 0.0) + amount, 9)

        elif result.get("type") == "wallet_transactions":
            count = result.get("count")
            if not isinstance(count, int):
                count = len(result.get("transactions") or [])
            tx_counts[chain] = tx_counts.get(chain, 0) + count

    return {"nativeTotals": native_totals, "transactionCounts": tx_counts}


def fallback_explanation(error: str, model: Optional[str] = None) -> dict:
    return {
        "success": False,
        "explanation": "AI analysis is currently unavailable. Please check your Gemini API configuration.",
        "insights": [
            "Unable to generate AI insights at this time",
            "Please verify your Gemini API key is configured correctly",
            "Manual analysis of the provided data may be required",
        ],
        "recommendations": [
            "Check API configuration and try again",
            "Consider manual analysis of the data",
            "Contact support if the issue persists",
        ],
        "confidence": 0,
        "model": model,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "error": error,
    }


@register_executor
class AIExplanationExecutor(BlockExecutor):
    block_type = "aiExplanation"
    required_fields = (("prompt", "AI prompt"),)

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)
        ai = caps.require_ai()

        context_data: dict = {}
        if _flag(config, "includeContext", True):
            context_data = {
                "results": dict(context.results),
                "portfolioSummary": summarize_portfolio(context, caps),
                "workflow": context.workflow_constants,
            }

        try:
            response = await ai.generate_explanation(config["prompt"], context_data)
        except Exception as e:
            logger.error("🧠 AI explanation failed for block %s: %s", block.get("id"), e)
            response = fallback_explanation(str(e))
        if not isinstance(response, dict):
            response = fallback_explanation("AI provider returned an unexpected payload")

        return {
            "type": "ai_explanation",
            "prompt": config["prompt"],
            "model": response.get("model"),
            "response": response,
        }


# ═══════════════════════════════════════════════════════════════════
#  SEND EMAIL — reports failures, never halts the run
# ═══════════════════════════════════════════════════════════════════

@register_executor
class SendEmailExecutor(BlockExecutor):
    block_type = "sendEmail"
    failure_mode = REPORTS
    halts_on_reported_failure = False
    required_fields = (("to", "Recipient"), ("subject", "Subject"), ("body", "Body"))

    async def execute(self, block, context, caps):
        config = _config_of(block)
        self.check_config(config)
        email = caps.require_email()

        message = {
            key: interpolate(config.get(key) or "", context)
            for key in ("to", "cc", "bcc", "from", "subject", "body")
        }
        message.update({
            "useHtml": _flag(config, "useHtml", False),
            "provider": config.get("provider") or "Resend",
            "dryRun": _flag(config, "dryRun", True),
        })

        try:
            response = await email.send(message)
        except Exception as e:
            logger.error("📧 Email send failed for block %s: %s", block.get("id"), e)
            response = {"success": False, "error": str(e)}
        if not isinstance(response, dict):
            response = {"success": False, "error": "Email provider returned an unexpected payload"}

        sent = bool(response.get("success"))
        return {
            "type": "send_email",
            "status": "sent" if sent else "failed",
            "messageId": response.get("id"),
            "dryRun": bool(response.get("dryRun", False)),
            "error": None if sent else (response.get("error") or "Email provider reported a failure"),
            "to": message["to"],
            "subject": message["subject"],
        }


# ═══════════════════════════════════════════════════════════════════
#  INDEXING (Token API) BLOCKS — report failures, never raise
# ═══════════════════════════════════════════════════════════════════

class IndexingExecutor(BlockExecutor):
    failure_mode = REPORTS
    halts_on_reported_failure = False

    method_name: str = ""
    id_field: Optional[tuple] = None       # (config key, label)
    paginated: bool = True
    ordered: bool = False
    default_order_by: str = "timestamp"
    time_range: Optional[str] = None       # "preset" | "fixed"
    filters: tuple = ()
    allowed_networks: Optional[tuple] = None

    @property
    def required_fields(self):
        return (self.id_field,) if self.id_field else ()

    def validation_errors(self, config):
        errors = super().validation_errors(config)
        network = config.get("networkId") or "mainnet"
        if self.allowed_networks and network not in self.allowed_networks:
            errors.append(f'Unsupported network_id "{network}" for Token API')
        return errors

    def _time_window(self, config: dict) -> tuple[int, int]:
        start, end = config.get("startTime"), config.get("endTime")
        if self.time_range == "preset":
            preset = config.get("timePreset") or "Last 24h"
            now = int(time.time())
            if preset == "All":
                default_start, default_end = 0, MAX_END_TIME
            else:
                default_start, default_end = now - TIME_PRESETS.get(preset, TIME_PRESETS["Last 24h"]), now
        else:
            default_start, default_end = 0, MAX_END_TIME
        return _as_int(start, default_start, lo=0), _as_int(end, default_end, lo=0)

    def build_params(self, config: dict) -> dict:
        params: dict[str, Any] = {"networkId": config.get("networkId") or "mainnet"}
        if self.id_field:
            params[self.id_field[0]] = config[self.id_field[0]]
        if self.paginated:
            params["limit"] = _as_int(config.get("limit"), 10, lo=1, hi=1000)
            params["page"] = _as_int(config.get("page"), 1, lo=1)
        if self.ordered:
            params["orderBy"] = config.get("orderBy") or self.default_order_by
            params["orderDirection"] = config.get("orderDirection") or "desc"
        if self.time_range:
            params["startTime"], params["endTime"] = self._time_window(config)
        for key in self.filters:
            if not is_missing(config.get(key)):
                params[key] = config[key]
        return params

    async def execute(self, block, context, caps):
        try:
            config = _config_of(block)
            errors = self.validation_errors(config)
            if errors:
                raise ConfigurationError(errors[0])
            params = self.build_params(config)
            indexer = caps.require_indexer()
            raw = await getattr(indexer, self.method_name)(params)
        except Exception as e:
            logger.warning("⚠️ %s block %s failed: %s", self.block_type, block.get("id"), e)
            return {"type": self.block_type, "success": False, "error": str(e)}

        data = raw.get("data", []) if isinstance(raw, dict) else raw
        if data is None:
            data = []
        elif not isinstance(data, list):
            data = [data]

        metadata = {
            "networkId": params["networkId"],
            "totalResults": len(data),
        }
        if self.paginated:
            metadata.update(limit=params["limit"], page=params["page"])
        if isinstance(raw, dict) and isinstance(raw.get("pagination"), dict):
            metadata["pagination"] = raw["pagination"]

        return {"type": self.block_type, "success": True, "data": data, "metadata": metadata}


@register_executor
class BalancesByAddressExecutor(IndexingExecutor):
    block_type = "balancesByAddress"
    method_name = "balances_by_address"
    id_field = ("address", "Wallet address")
    allowed_networks = TOKEN_API_NETWORKS


@register_executor
class TransferEventsExecutor(IndexingExecutor):
    block_type = "transferEvents"
    method_name = "transfer_events"
    ordered = True
    time_range = "preset"
    filters = ("from", "to", "contract", "transactionId")


@register_executor
class TokenHoldersExecutor(IndexingExecutor):
    block_type = "tokenHolders"
    method_name = "token_holders"
    id_field = ("contract", "Token contract address")
    ordered = True
    default_order_by = "value"


@register_executor
class TokenMetadataExecutor(IndexingExecutor):
    block_type = "tokenMetadata"
    method_name = "token_metadata"
    id_field = ("contract", "Token contract address")
    paginated = False


@register_executor
class LiquidityPoolsExecutor(IndexingExecutor):
    block_type = "liquidityPools"
    method_name = "liquidity_pools"


@register_executor
class SwapEventsExecutor(IndexingExecutor):
    block_type = "swapEvents"
    method_name = "swap_events"
    ordered = True
    time_range = "preset"
    filters = ("pool", "protocol", "caller", "sender", "recipient", "transactionId")


@register_executor
class NFTActivitiesExecutor(IndexingExecutor):
    block_type = "nftActivities"
    method_name = "nft_activities"
    ordered = True
    time_range = "fixed"


@register_executor
class NFTCollectionExecutor(IndexingExecutor):
    block_type = "nftCollection"
    method_name = "nft_collection"
    id_field = ("contract", "NFT contract address")
    paginated = False
