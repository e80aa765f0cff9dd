"""
dex/adapters/base.py - Generic trading connector interface.

The gateway drives every swap connector through this protocol; an adapter
only has to expose the members below to be usable by trade routes.
"""

from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from core.models import ExpectedTrade, SubmittedTransaction, Token


@runtime_checkable
class TradingConnector(Protocol):
    """Capability set required from a swap connector."""

    @property
    def router(self) -> str:
        ...

    @property
    def router_abi(self) -> Any:
        ...

    @property
    def gas_limit_estimate(self) -> int:
        ...

    @property
    def ttl(self) -> int:
        ...

    def ready(self) -> bool:
        ...

    async def init(self) -> None:
        ...

    def get_token_by_address(self, address: str) -> Token | None:
        ...

    async def estimate_sell_trade(
        self,
        base_token: Token,
        quote_token: Token,
        amount: Decimal | str,
    ) -> ExpectedTrade:
        ...

    async def estimate_buy_trade(
        self,
        quote_token: Token,
        base_token: Token,
        amount: Decimal | str,
    ) -> ExpectedTrade:
        ...

    async def execute_trade(self, wallet: Any, transaction: Any) -> SubmittedTransaction:
        ...
