"""
core - Core utilities and models for the Odos connector.

This package contains:
- models.py: Data models (Token, QuoteRequest, QuotedTrade, TransactionDescriptor)
- constants.py: Enums, API paths and defaults
- exceptions.py: Typed exceptions with error codes
- math.py: Decimal token-amount conversions (no float)
- logging.py: Structured JSON logging
"""

from core.constants import (
    AmountScaling,
    ChainKind,
    ErrorCode,
    TradeType,
)
from core.exceptions import (
    ConfigError,
    ExecutionFailedError,
    GatewayError,
    InfraError,
    NoRouteFoundError,
    TokenNotFoundError,
    UnsupportedChainError,
    UpstreamRequestError,
    ValidationError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    ExpectedTrade,
    QuoteRequest,
    QuoteResult,
    QuotedTrade,
    SubmittedTransaction,
    Token,
    TokenAmount,
    TransactionDescriptor,
    checksum_address,
)

__all__ = [
    # Constants
    "AmountScaling",
    "ChainKind",
    "ErrorCode",
    "TradeType",
    # Exceptions
    "ConfigError",
    "ExecutionFailedError",
    "GatewayError",
    "InfraError",
    "NoRouteFoundError",
    "TokenNotFoundError",
    "UnsupportedChainError",
    "UpstreamRequestError",
    "ValidationError",
    # Models
    "ExpectedTrade",
    "QuoteRequest",
    "QuoteResult",
    "QuotedTrade",
    "SubmittedTransaction",
    "Token",
    "TokenAmount",
    "TransactionDescriptor",
    "checksum_address",
    # Logging
    "get_logger",
    "setup_logging",
]
