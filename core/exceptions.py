# PATH: core/exceptions.py
"""
Typed exceptions for the Odos connector.

Every error carries an ErrorCode and the HTTP status a gateway route should
answer with, so callers can tell "no liquidity" apart from transport failures.
"""

from typing import Optional

from core.constants import ErrorCode


class GatewayError(Exception):
    """Base exception for the connector."""

    default_code = ErrorCode.UNKNOWN_ERROR
    default_status = 500

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        http_status: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.http_status = http_status or self.default_status
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "status": self.http_status,
            "message": self.message,
            "details": self.details,
        }


class NoRouteFoundError(GatewayError):
    """Aggregator returned no positive output for the pair."""

    default_code = ErrorCode.PRICE_FAILED


class UpstreamRequestError(GatewayError):
    """
    Aggregator request failed.

    http_status is the upstream status for non-200 answers and 500 for
    transport or parse failures.
    """

    default_code = ErrorCode.TRADE_FAILED


class ExecutionFailedError(GatewayError):
    """Signing or submitting a transaction failed."""

    default_code = ErrorCode.UNKNOWN_ERROR


class TokenNotFoundError(GatewayError):
    """Token is not in the chain's token table."""

    default_code = ErrorCode.TOKEN_NOT_SUPPORTED
    default_status = 404


class UnsupportedChainError(GatewayError):
    """Chain name has no registered implementation."""

    default_code = ErrorCode.UNSUPPORTED_CHAIN
    default_status = 404


class ValidationError(GatewayError):
    """Malformed caller input (amount, address)."""

    default_code = ErrorCode.INVALID_AMOUNT
    default_status = 400


class ConfigError(GatewayError):
    """Missing or malformed configuration value."""

    default_code = ErrorCode.INVALID_CONFIG


class InfraError(GatewayError):
    """Infrastructure-related errors (RPC, timeouts)."""

    default_code = ErrorCode.INFRA_RPC_ERROR
    default_status = 503
