"""
dex/adapters/odos.py - Odos aggregator adapter.

Odos routes a swap across many liquidity sources and answers with a single
quote. This adapter turns that quote into the gateway's generic trade shape:

- estimate_sell_trade: fixed input of the base token, expected output
- estimate_buy_trade: quote token in, base token out, expected input
- assemble_transaction: turns a quote's pathId into a ready-to-sign tx
- execute_trade: forwards an assembled tx to a wallet

Each public call makes at most one HTTP request. Nothing is retried.
"""

import time
from decimal import Decimal
from typing import Any, Dict, Optional, Union

import httpx

from chains.chain import EvmChain
from config import OdosConfig, load_odos_config
from core.constants import (
    AmountScaling,
    ErrorCode,
    ODOS_ASSEMBLE_PATH,
    ODOS_QUOTE_PATH,
    TradeType,
)
from core.exceptions import (
    ExecutionFailedError,
    NoRouteFoundError,
    TokenNotFoundError,
    UpstreamRequestError,
    ValidationError,
)
from core.logging import get_logger, log_error
from core.math import parse_amount, to_base_units
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
from execution.wallet import Wallet

logger = get_logger(__name__)


class OdosAdapter:
    """
    Adapter for Odos smart order routing.

    Usage:
        adapter = OdosAdapter("ethereum", "mainnet", chain, config)
        await adapter.init()
        weth = adapter.get_token_by_address(WETH)
        expected = await adapter.estimate_sell_trade(weth, usdc, "1.5")
    """

    def __init__(
        self,
        chain_name: str,
        network: str,
        chain: EvmChain,
        config: Optional[OdosConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or load_odos_config()
        self.chain = chain
        self._chain_name = chain_name
        self._network = network
        self._router = self.config.router_address(chain_name, network)
        self._gas_limit_estimate = self.config.gas_limit_estimate
        self._ttl = self.config.ttl
        self._client = client
        self._owns_client = client is None
        self._token_table: Dict[str, Token] = {}
        self._ready = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def init(self) -> None:
        """Initialize the chain if needed and load its token list."""
        if not self.chain.ready():
            await self.chain.init()

        chain_id = self.chain.chain_id
        table = {}
        for token in self.chain.stored_token_list:
            descriptor = Token(
                chain_id=chain_id,
                address=token.address,
                decimals=token.decimals,
                symbol=token.symbol,
                name=token.name,
            )
            table[descriptor.address] = descriptor

        # Readers see either the old table or the complete new one
        self._token_table = table
        self._ready = True

        logger.info(
            f"Odos connector ready on {self._chain_name}/{self._network}",
            extra={"context": {
                "chain_id": chain_id,
                "odos_chain": self.chain_name,
                "tokens": len(table),
                "router": self._router,
            }},
        )

    def ready(self) -> bool:
        return self._ready

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.request_timeout_seconds),
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def router(self) -> str:
        """Router address."""
        return self._router

    @property
    def router_abi(self) -> str:
        """Odos transactions arrive pre-encoded, so no ABI is needed."""
        return ""

    @property
    def gas_limit_estimate(self) -> int:
        """Default gas limit for swap transactions."""
        return self._gas_limit_estimate

    @property
    def ttl(self) -> int:
        """Default time-to-live for swap transactions, in seconds."""
        return self._ttl

    @property
    def chain_id(self) -> int:
        return self.chain.chain_id

    @property
    def network(self) -> str:
        return self._network

    @property
    def chain_name(self) -> str:
        """Odos chain name for this chain/network pair."""
        return self.config.chain_name(self._chain_name, self._network)

    @property
    def tokens(self) -> list[Token]:
        return list(self._token_table.values())

    def get_slippage_percent(self) -> Decimal:
        return self.config.slippage_percent

    def get_token_by_address(self, address: str) -> Optional[Token]:
        """
        Given a token's address, return the connector's descriptor for it.

        Returns None for unknown or malformed addresses.
        """
        try:
            return self._token_table.get(checksum_address(address))
        except ValidationError:
            return None

    def _require_token(self, token: Token) -> Token:
        known = self.get_token_by_address(token.address)
        if known is None:
            raise TokenNotFoundError(
                f"Token {token.symbol} ({token.address}) is not supported on "
                f"{self._chain_name}/{self._network}",
                details={"address": token.address, "ready": self._ready},
            )
        return known

    # =========================================================================
    # HTTP
    # =========================================================================

    async def _post(self, path: str, payload: Dict[str, Any]) -> tuple[Dict[str, Any], int]:
        """
        POST a JSON body to the Odos API.

        Returns:
            (parsed body, latency_ms)

        Raises:
            UpstreamRequestError: On transport errors, non-200 answers or
                bodies that are not JSON objects
        """
        client = await self._get_client()
        url = f"{self.config.api_url}{path}"

        start_ms = int(time.time() * 1000)
        try:
            response = await client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            log_error(logger, ErrorCode.TRADE_FAILED.value, f"Error calling Odos: {e}", path=path)
            raise UpstreamRequestError(
                f"Odos API Error: {e}",
                details={"path": path, "error_type": type(e).__name__},
            )
        latency_ms = int(time.time() * 1000) - start_ms

        if response.status_code != 200:
            log_error(
                logger,
                ErrorCode.TRADE_FAILED.value,
                f"Unexpected response from Odos API: {response.status_code} {response.reason_phrase}",
                path=path,
                status=response.status_code,
            )
            raise UpstreamRequestError(
                f"Odos API returned unexpected status: {response.status_code} {response.reason_phrase}",
                http_status=response.status_code,
                details={"path": path, "body": response.text[:500]},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamRequestError(
                f"Odos API returned invalid JSON: {e}",
                details={"path": path, "body": response.text[:500]},
            )
        if not isinstance(data, dict):
            raise UpstreamRequestError(
                "Odos API returned a non-object body",
                details={"path": path},
            )

        return data, latency_ms

    async def _quote(
        self,
        input_token: Token,
        output_token: Token,
        amount: str,
        user_address: Optional[str] = None,
    ) -> QuoteResult:
        request = QuoteRequest(
            chain_id=self.chain.chain_id,
            input_token=input_token,
            input_amount=amount,
            output_token=output_token,
            gas_price=str(self.chain.gas_price),
            slippage_percent=self.get_slippage_percent(),
            user_address=checksum_address(user_address) if user_address else None,
        )

        data, latency_ms = await self._post(ODOS_QUOTE_PATH, request.to_payload())
        logger.debug(
            "Odos quote response",
            extra={"context": {"response": data, "latency_ms": latency_ms}},
        )

        result = QuoteResult.from_response(data, latency_ms)
        if not result.has_route:
            log_error(
                logger,
                ErrorCode.PRICE_FAILED.value,
                f"No valid output from Odos for {input_token.address} to {output_token.address}.",
                net_out_value=str(result.net_out_value),
            )
            raise NoRouteFoundError(
                f"No trade pair found for {input_token.address} to {output_token.address}.",
                details={
                    "token_in": input_token.address,
                    "token_out": output_token.address,
                    "amount_in": amount,
                    "net_out_value": str(result.net_out_value),
                },
            )
        return result

    # =========================================================================
    # QUOTES
    # =========================================================================

    async def estimate_sell_trade(
        self,
        base_token: Token,
        quote_token: Token,
        amount: Union[Decimal, str, int],
        user_address: Optional[str] = None,
    ) -> ExpectedTrade:
        """
        Given the amount of `base_token` to put into a transaction, calculate
        the amount of `quote_token` that can be expected from it.

        Args:
            base_token: Token input for the transaction
            quote_token: Output from the transaction
            amount: Amount of `base_token` in human units
            user_address: Sender, required if the quote will be assembled

        Raises:
            NoRouteFoundError: Odos found no positive output
            UpstreamRequestError: The request itself failed
        """
        base_token = self._require_token(base_token)
        quote_token = self._require_token(quote_token)
        raw_amount = to_base_units(parse_amount(amount), base_token.decimals)

        logger.info(
            f"estimateSellTrade {base_token.symbol} -> {quote_token.symbol}",
            extra={"context": {
                "chain_id": self.chain_id,
                "base": base_token.address,
                "quote": quote_token.address,
                "amount": raw_amount,
            }},
        )

        result = await self._quote(base_token, quote_token, raw_amount, user_address)
        trade = QuotedTrade.from_raw(
            base_token,
            quote_token,
            result.in_amount,
            result.out_amount,
            TradeType.EXACT_INPUT,
            result.path_id,
        )
        return ExpectedTrade(trade=trade, expected_amount=TokenAmount(quote_token, result.out_amount))

    async def estimate_buy_trade(
        self,
        quote_token: Token,
        base_token: Token,
        amount: Union[Decimal, str, int],
        user_address: Optional[str] = None,
    ) -> ExpectedTrade:
        """
        Given the amount of `base_token` desired from a transaction,
        calculate the amount of `quote_token` needed for it.

        Odos only quotes exact inputs, so `amount` is sent as the input
        amount of `quote_token`. It is scaled by the decimals of the token
        chosen by `buy_amount_scaling` (quote token unless configured).

        Args:
            quote_token: Token input for the transaction
            base_token: Token output from the transaction
            amount: Requested amount in human units
            user_address: Sender, required if the quote will be assembled
        """
        quote_token = self._require_token(quote_token)
        base_token = self._require_token(base_token)
        scaling_token = base_token if self.config.buy_amount_scaling == AmountScaling.BASE else quote_token
        raw_amount = to_base_units(parse_amount(amount), scaling_token.decimals)

        logger.info(
            f"estimateBuyTrade {quote_token.symbol} -> {base_token.symbol}",
            extra={"context": {
                "chain_id": self.chain_id,
                "quote": quote_token.address,
                "base": base_token.address,
                "amount": raw_amount,
                "scaling": self.config.buy_amount_scaling.value,
            }},
        )

        result = await self._quote(quote_token, base_token, raw_amount, user_address)
        trade = QuotedTrade.from_raw(
            quote_token,
            base_token,
            result.in_amount,
            result.out_amount,
            TradeType.EXACT_INPUT,
            result.path_id,
        )
        return ExpectedTrade(trade=trade, expected_amount=TokenAmount(quote_token, result.in_amount))

    # =========================================================================
    # EXECUTION
    # =========================================================================

    async def assemble_transaction(
        self,
        trade: Union[QuotedTrade, str],
        user_address: str,
        simulate: bool = False,
    ) -> TransactionDescriptor:
        """
        Turn a quote's pathId into a transaction ready to be signed.

        Args:
            trade: Quoted trade carrying a path_id, or the path_id itself
            user_address: Address that will send the transaction
            simulate: Ask Odos to simulate the transaction first
        """
        path_id = trade.path_id if isinstance(trade, QuotedTrade) else trade
        if not path_id:
            raise ValidationError(
                "Quote has no pathId; request it with a user_address to assemble it",
                code=ErrorCode.TRADE_FAILED,
            )

        payload = {
            "userAddr": checksum_address(user_address),
            "pathId": path_id,
            "simulate": simulate,
        }
        data, _ = await self._post(ODOS_ASSEMBLE_PATH, payload)

        try:
            return TransactionDescriptor.from_response(data["transaction"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamRequestError(
                f"Malformed Odos assemble response: {e}",
                details={"path_id": path_id, "error_type": type(e).__name__},
            )

    async def execute_trade(
        self,
        wallet: Wallet,
        transaction: Union[TransactionDescriptor, Dict[str, Any]],
    ) -> SubmittedTransaction:
        """
        Given a wallet and an assembled Odos transaction, submit it on chain.

        Args:
            wallet: Wallet that signs and broadcasts
            transaction: Descriptor (or raw /sor/assemble transaction object)

        Raises:
            ExecutionFailedError: Signing or submission failed
        """
        try:
            if not isinstance(transaction, TransactionDescriptor):
                transaction = TransactionDescriptor.from_response(transaction)

            logger.info(
                "Executing Odos transaction",
                extra={"context": {"chain_id": self.chain_id, **transaction.to_dict()}},
            )

            submitted = await wallet.send_transaction({
                "to": transaction.to,
                "data": transaction.data,
                "gasLimit": transaction.gas,
                "gasPrice": transaction.gas_price,
                "value": transaction.value,
                "chainId": self.chain_id,
            })
        except Exception as e:
            log_error(
                logger,
                ErrorCode.UNKNOWN_ERROR.value,
                f"Error executing transaction on Odos: {e}",
                error_type=type(e).__name__,
            )
            raise ExecutionFailedError(
                f"Transaction Execution Error: {e}",
                details={"chain_id": self.chain_id, "error_type": type(e).__name__},
            )

        logger.info(
            f"Transaction sent: {submitted.hash}",
            extra={"context": submitted.to_dict()},
        )
        return submitted
