"""
tests/unit/test_models.py - Tests for core/models.py
"""

import pytest
from decimal import Decimal

from core.constants import ErrorCode, TradeType
from core.exceptions import UpstreamRequestError, ValidationError
from core.models import (
    ExpectedTrade,
    QuoteRequest,
    QuoteResult,
    QuotedTrade,
    Token,
    TokenAmount,
    TransactionDescriptor,
    checksum_address,
)

from conftest import USDC_ADDRESS, WETH_ADDRESS


class TestChecksumAddress:
    """Test address canonicalization."""

    def test_lowercase_is_checksummed(self):
        assert checksum_address(WETH_ADDRESS.lower()) == WETH_ADDRESS

    def test_whitespace_is_stripped(self):
        assert checksum_address(f"  {USDC_ADDRESS}\n") == USDC_ADDRESS

    @pytest.mark.parametrize("value", ["", "0x123", "not-an-address", None, 42])
    def test_invalid_raises(self, value):
        with pytest.raises(ValidationError) as exc_info:
            checksum_address(value)
        assert exc_info.value.code == ErrorCode.INVALID_ADDRESS


class TestToken:
    """Test token identity."""

    def test_address_is_canonical(self):
        token = Token(chain_id=1, address=WETH_ADDRESS.lower(), decimals=18, symbol="WETH")
        assert token.address == WETH_ADDRESS

    def test_equality_ignores_symbol_and_case(self, weth):
        other = Token(chain_id=1, address=WETH_ADDRESS.lower(), decimals=18, symbol="weth")
        assert other == weth
        assert hash(other) == hash(weth)

    def test_chain_id_distinguishes(self, weth):
        other = Token(chain_id=10, address=WETH_ADDRESS, decimals=18, symbol="WETH")
        assert other != weth

    def test_from_dict(self):
        token = Token.from_dict(1, {"address": USDC_ADDRESS.lower(), "decimals": "6", "symbol": "USDC"})

        assert token.address == USDC_ADDRESS
        assert token.decimals == 6
        assert token.name == ""

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            Token.from_dict(1, {"address": USDC_ADDRESS, "symbol": "USDC"})


class TestQuoteRequest:
    """Test quote body construction."""

    def test_payload(self, weth, usdc):
        request = QuoteRequest(
            chain_id=1,
            input_token=weth,
            input_amount="1500000000000000000",
            output_token=usdc,
            gas_price="20",
            slippage_percent=Decimal("1"),
        )

        assert request.to_payload() == {
            "chainId": 1,
            "inputTokens": [{"tokenAddress": WETH_ADDRESS, "amount": "1500000000000000000"}],
            "outputTokens": [{"tokenAddress": USDC_ADDRESS, "proportion": 1.0}],
            "gasPrice": "20",
            "slippageLimitPercent": 1.0,
        }

    def test_payload_with_user(self, weth, usdc):
        request = QuoteRequest(1, weth, "1", usdc, "20", Decimal("0.5"), user_address=WETH_ADDRESS)
        payload = request.to_payload()

        assert payload["userAddr"] == WETH_ADDRESS
        assert payload["slippageLimitPercent"] == 0.5


class TestQuoteResult:
    """Test quote response parsing."""

    def test_parses_required_and_optional_fields(self):
        result = QuoteResult.from_response({
            "inAmounts": ["1000000000000000000"],
            "outAmounts": ["3000000000"],
            "netOutValue": 2999.5,
            "pathId": "abc123",
            "gasEstimate": 180000,
            "priceImpact": -0.01,
        }, latency_ms=42)

        assert result.in_amount == 10**18
        assert result.out_amount == 3_000_000_000
        assert result.net_out_value == Decimal("2999.5")
        assert result.path_id == "abc123"
        assert result.gas_estimate == 180000
        assert result.price_impact == Decimal("-0.01")
        assert result.latency_ms == 42
        assert result.has_route

    def test_optional_fields_absent(self):
        result = QuoteResult.from_response({"inAmounts": ["1"], "outAmounts": ["2"], "netOutValue": "1"})

        assert result.path_id is None
        assert result.gas_estimate is None
        assert result.price_impact is None

    @pytest.mark.parametrize("net_out_value", [0, -1, "0"])
    def test_no_route(self, net_out_value):
        result = QuoteResult.from_response({"inAmounts": ["1"], "outAmounts": ["0"], "netOutValue": net_out_value})
        assert not result.has_route

    @pytest.mark.parametrize("body", [
        {},
        {"inAmounts": [], "outAmounts": ["1"], "netOutValue": 1},
        {"inAmounts": ["1"], "outAmounts": ["1"]},
        {"inAmounts": ["x"], "outAmounts": ["1"], "netOutValue": 1},
        {"inAmounts": ["1"], "outAmounts": ["1"], "netOutValue": "lots"},
        {"inAmounts": ["1"], "outAmounts": ["1"], "netOutValue": "NaN"},
        {"inAmounts": ["1"], "outAmounts": ["1"], "netOutValue": "Infinity"},
        {"inAmounts": ["1"], "outAmounts": ["1"], "netOutValue": 1, "gasEstimate": "n/a"},
        {"inAmounts": ["1"], "outAmounts": ["1"], "netOutValue": 1, "priceImpact": "unknown"},
    ])
    def test_malformed_raises(self, body):
        with pytest.raises(UpstreamRequestError) as exc_info:
            QuoteResult.from_response(body)
        assert exc_info.value.code == ErrorCode.TRADE_FAILED


class TestQuotedTrade:
    """Test the aggregator trade shape."""

    def test_route_and_amounts(self, weth, usdc):
        trade = QuotedTrade.from_raw(weth, usdc, 10**18, 3_000_000_000, path_id="p1")

        assert trade.route == [weth, usdc]
        assert trade.amount_in == TokenAmount(weth, 10**18)
        assert trade.amount_out.to_decimal() == Decimal("3000")
        assert trade.trade_type == TradeType.EXACT_INPUT

    def test_execution_price(self, weth, usdc):
        trade = QuotedTrade.from_raw(weth, usdc, 2 * 10**18, 5_000_000_000)
        assert trade.execution_price == Decimal("2500")

    def test_execution_price_zero_input(self, weth, usdc):
        trade = QuotedTrade.from_raw(weth, usdc, 0, 1)
        assert trade.execution_price == Decimal("0")

    def test_is_immutable(self, weth, usdc):
        trade = QuotedTrade.from_raw(weth, usdc, 1, 1)
        with pytest.raises(AttributeError):
            trade.path_id = "changed"

    def test_expected_trade_to_dict(self, weth, usdc):
        trade = QuotedTrade.from_raw(weth, usdc, 10**18, 3_000_000_000, path_id="p1")
        expected = ExpectedTrade(trade=trade, expected_amount=trade.amount_out)

        data = expected.to_dict()

        assert data["trade"]["route"] == ["WETH", "USDC"]
        assert data["trade"]["execution_price"] == "3000"
        assert data["trade"]["path_id"] == "p1"
        assert data["expected_amount"] == {
            "token": "USDC",
            "address": USDC_ADDRESS,
            "raw": "3000000000",
            "amount": "3000",
        }


class TestTransactionDescriptor:
    """Test assembled transaction parsing."""

    def test_from_response_mixed_encodings(self):
        tx = TransactionDescriptor.from_response({
            "to": "0xCf5540fFFCdC3d510B18bFcA6d2b9987b0772559",
            "data": "0xdeadbeef",
            "gas": 210000,
            "gasPrice": "20000000000",
            "value": "0x0de0b6b3a7640000",
        })

        assert tx.gas == 210000
        assert tx.gas_price == 20_000_000_000
        assert tx.value == 10**18
        assert tx.to_dict()["gasPrice"] == 20_000_000_000

    def test_missing_value_defaults_to_zero(self):
        tx = TransactionDescriptor.from_response({"to": "0x1", "data": "0x", "gas": "1", "gasPrice": "1"})
        assert tx.value == 0

    def test_missing_to_raises(self):
        with pytest.raises(KeyError):
            TransactionDescriptor.from_response({"data": "0x"})
