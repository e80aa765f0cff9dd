# PATH: core/models.py
"""
Core data models for the Odos connector.

TOKEN IDENTITY CONTRACT:
========================
A token is identified by (chain_id, checksum address). Addresses are
canonicalized with EIP-55 checksums on construction, so two descriptors of
the same contract compare equal whatever casing the caller used.
========================

QUOTED TRADE CONTRACT:
======================
Aggregator quotes are not backed by a single pool, so a QuotedTrade never
carries reserves. Its execution price is derived from the quoted amounts and
is fixed at construction; nothing mutates it afterwards.
======================
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from web3 import Web3

from core.constants import ErrorCode, FULL_PROPORTION, TradeType
from core.exceptions import UpstreamRequestError, ValidationError
from core.math import from_base_units, parse_int


def checksum_address(address: str) -> str:
    """
    Canonicalize an EVM address to its checksum form.

    Raises:
        ValidationError: If the value is not a 20-byte hex address
    """
    if not isinstance(address, str) or not Web3.is_address(address.strip()):
        raise ValidationError(
            f"Invalid address: {address!r}",
            code=ErrorCode.INVALID_ADDRESS,
            details={"address": str(address)},
        )
    return Web3.to_checksum_address(address.strip())


# ============================================================================
# TOKENS
# ============================================================================

@dataclass(frozen=True)
class Token:
    """Token on a specific chain."""
    chain_id: int
    address: str
    decimals: int
    symbol: str
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "address", checksum_address(self.address))

    def __hash__(self) -> int:
        return hash((self.chain_id, self.address))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return False
        return self.chain_id == other.chain_id and self.address == other.address

    @classmethod
    def from_dict(cls, chain_id: int, data: Dict[str, Any]) -> "Token":
        return cls(
            chain_id=chain_id,
            address=data["address"],
            decimals=int(data["decimals"]),
            symbol=data["symbol"],
            name=data.get("name", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "address": self.address,
            "decimals": self.decimals,
            "symbol": self.symbol,
            "name": self.name,
        }


@dataclass(frozen=True)
class TokenAmount:
    """Integer base-unit amount of a token."""
    token: Token
    raw: int

    def to_decimal(self) -> Decimal:
        return from_base_units(self.raw, self.token.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token.symbol,
            "address": self.token.address,
            "raw": str(self.raw),
            "amount": str(self.to_decimal()),
        }


# ============================================================================
# QUOTES
# ============================================================================

@dataclass
class QuoteRequest:
    """Body of a single /sor/quote/v2 call."""
    chain_id: int
    input_token: Token
    input_amount: str  # integer base units
    output_token: Token
    gas_price: str
    slippage_percent: Decimal
    proportion: float = FULL_PROPORTION
    user_address: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "chainId": self.chain_id,
            "inputTokens": [
                {"tokenAddress": self.input_token.address, "amount": self.input_amount},
            ],
            "outputTokens": [
                {"tokenAddress": self.output_token.address, "proportion": self.proportion},
            ],
            "gasPrice": self.gas_price,
            "slippageLimitPercent": float(self.slippage_percent),
        }
        if self.user_address:
            payload["userAddr"] = self.user_address
        return payload


@dataclass
class QuoteResult:
    """Fields consumed from a /sor/quote/v2 response."""
    in_amount: int
    out_amount: int
    net_out_value: Decimal
    path_id: Optional[str] = None
    gas_estimate: Optional[int] = None
    price_impact: Optional[Decimal] = None
    latency_ms: int = 0

    @property
    def has_route(self) -> bool:
        return self.net_out_value > 0

    @classmethod
    def from_response(cls, data: Dict[str, Any], latency_ms: int = 0) -> "QuoteResult":
        """
        Parse an aggregator quote body.

        Raises:
            UpstreamRequestError: If required fields are missing or malformed
        """
        try:
            net_out_value = Decimal(str(data["netOutValue"]))
            if not net_out_value.is_finite():
                raise ValueError(f"netOutValue is not finite: {data['netOutValue']!r}")
            in_amount = parse_int(data["inAmounts"][0])
            out_amount = parse_int(data["outAmounts"][0])

            gas_estimate = data.get("gasEstimate")
            if gas_estimate is not None:
                gas_estimate = parse_int(gas_estimate)
            price_impact = data.get("priceImpact")
            if price_impact is not None:
                price_impact = Decimal(str(price_impact))
        except (KeyError, IndexError, TypeError, ValueError, ArithmeticError) as e:
            raise UpstreamRequestError(
                f"Malformed Odos quote response: {e}",
                details={"error_type": type(e).__name__, "keys": sorted(data) if isinstance(data, dict) else None},
            )

        return cls(
            in_amount=in_amount,
            out_amount=out_amount,
            net_out_value=net_out_value,
            path_id=data.get("pathId"),
            gas_estimate=gas_estimate,
            price_impact=price_impact,
            latency_ms=latency_ms,
        )


@dataclass(frozen=True)
class QuotedTrade:
    """
    Two-leg trade quoted by an aggregator.

    Satisfies the generic trade shape (route, amounts, execution price)
    without pretending to hold pool reserves.
    """
    token_in: Token
    token_out: Token
    amount_in: TokenAmount
    amount_out: TokenAmount
    trade_type: TradeType = TradeType.EXACT_INPUT
    path_id: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        amount_out: int,
        trade_type: TradeType = TradeType.EXACT_INPUT,
        path_id: Optional[str] = None,
    ) -> "QuotedTrade":
        return cls(
            token_in=token_in,
            token_out=token_out,
            amount_in=TokenAmount(token_in, amount_in),
            amount_out=TokenAmount(token_out, amount_out),
            trade_type=trade_type,
            path_id=path_id,
        )

    @property
    def route(self) -> List[Token]:
        return [self.token_in, self.token_out]

    @property
    def execution_price(self) -> Decimal:
        """Units of token_out per unit of token_in."""
        amount_in = self.amount_in.to_decimal()
        if amount_in == 0:
            return Decimal("0")
        return self.amount_out.to_decimal() / amount_in

    def to_dict(self) -> Dict[str, Any]:
        return {
            "route": [t.symbol for t in self.route],
            "amount_in": self.amount_in.to_dict(),
            "amount_out": self.amount_out.to_dict(),
            "execution_price": str(self.execution_price),
            "trade_type": self.trade_type.value,
            "path_id": self.path_id,
        }


@dataclass(frozen=True)
class ExpectedTrade:
    """Quoted trade plus the amount the caller cares about."""
    trade: QuotedTrade
    expected_amount: TokenAmount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trade": self.trade.to_dict(),
            "expected_amount": self.expected_amount.to_dict(),
        }


# ============================================================================
# TRANSACTIONS
# ============================================================================

@dataclass(frozen=True)
class TransactionDescriptor:
    """Pre-assembled swap transaction, forwarded verbatim to a wallet."""
    to: str
    data: str
    gas: int
    gas_price: int
    value: int = 0

    @classmethod
    def from_response(cls, tx: Dict[str, Any]) -> "TransactionDescriptor":
        """
        Build from an Odos /sor/assemble `transaction` object.

        Numeric fields may be ints, decimal strings or 0x-hex strings.
        """
        return cls(
            to=tx["to"],
            data=tx["data"],
            gas=parse_int(tx.get("gas")),
            gas_price=parse_int(tx.get("gasPrice")),
            value=parse_int(tx.get("value")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "to": self.to,
            "data": self.data,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "value": self.value,
        }


@dataclass
class SubmittedTransaction:
    """Transaction accepted by a node."""
    hash: str
    chain_id: int
    to: str
    nonce: int
    gas: int
    gas_price: int
    value: int = 0
    data: str = "0x"
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "chain_id": self.chain_id,
            "to": self.to,
            "nonce": self.nonce,
            "gas": self.gas,
            "gas_price": self.gas_price,
            "value": self.value,
            "data": self.data,
        }
