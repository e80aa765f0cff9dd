# PATH: core/constants.py
"""
Constants for the Odos connector.

Contains enums, API paths and configuration defaults.
"""

from enum import Enum
from typing import Final

# =============================================================================
# ODOS API
# =============================================================================

ODOS_API_URL: Final[str] = "https://api.odos.xyz"
ODOS_QUOTE_PATH: Final[str] = "/sor/quote/v2"
ODOS_ASSEMBLE_PATH: Final[str] = "/sor/assemble"

# Fraction of output value routed to the single output token
FULL_PROPORTION: Final[float] = 1.0

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_ALLOWED_SLIPPAGE = "1/100"
DEFAULT_GAS_LIMIT_ESTIMATE = 150_000
DEFAULT_TTL_SECONDS = 600
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10
DEFAULT_GAS_PRICE_GWEI = "1"


class ErrorCode(str, Enum):
    """Error codes surfaced to gateway callers."""
    # Quote failures
    PRICE_FAILED = "PRICE_FAILED"
    TRADE_FAILED = "TRADE_FAILED"

    # Lookup failures
    TOKEN_NOT_SUPPORTED = "TOKEN_NOT_SUPPORTED"
    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"

    # Input validation
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ADDRESS = "INVALID_ADDRESS"

    # Infrastructure
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    INVALID_CONFIG = "INVALID_CONFIG"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class TradeType(str, Enum):
    """Which side of a quoted trade the caller fixed."""
    EXACT_INPUT = "EXACT_INPUT"


class AmountScaling(str, Enum):
    """
    Token whose decimals scale the requested amount of a buy quote.

    QUOTE keeps the long-standing behaviour: the amount handed to
    estimate_buy_trade is scaled by the quote (input) token's decimals.
    BASE scales it by the base (output) token's decimals instead.
    """
    QUOTE = "quote"
    BASE = "base"


class ChainKind(str, Enum):
    """Chains a connector can be instantiated for."""
    ETHEREUM = "ethereum"
    AVALANCHE = "avalanche"
    POLYGON = "polygon"
    HARMONY = "harmony"
    BINANCE_SMART_CHAIN = "binance-smart-chain"
    CRONOS = "cronos"
    TELOS = "telos"
