"""
tests/unit/test_chain.py - EvmChain and ChainRegistry tests.
"""

import httpx
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from chains.chain import ChainRegistry, EvmChain, default_chain_registry
from chains.providers import RPCProvider
from core.constants import ChainKind, ErrorCode
from core.exceptions import ConfigError, InfraError, UnsupportedChainError

from conftest import USDC_ADDRESS, WETH_ADDRESS

TOKEN_LIST = [
    {"symbol": "WETH", "name": "Wrapped Ether", "address": WETH_ADDRESS.lower(), "decimals": 18},
    {"symbol": "USDC", "name": "USD Coin", "address": USDC_ADDRESS.lower(), "decimals": 6},
]


def make_chain(provider=None, token_list=None):
    if provider is None:
        provider = MagicMock()
        provider.get_gas_price = AsyncMock(return_value=25 * 10**9)
        provider.close = AsyncMock()
    return EvmChain(
        kind=ChainKind.ETHEREUM,
        network="mainnet",
        chain_id=1,
        provider=provider,
        token_list=TOKEN_LIST if token_list is None else token_list,
        default_gas_price_gwei="20",
    )


class TestEvmChain:
    """Test chain initialization."""

    @pytest.mark.asyncio
    async def test_init_loads_tokens_and_gas_price(self):
        chain = make_chain()
        assert not chain.ready()
        assert chain.gas_price == Decimal("20")

        await chain.init()

        assert chain.ready()
        assert chain.gas_price == Decimal("25")
        assert [t.symbol for t in chain.stored_token_list] == ["WETH", "USDC"]
        assert chain.stored_token_list[0].address == WETH_ADDRESS

    @pytest.mark.asyncio
    async def test_fractional_gwei(self):
        provider = MagicMock()
        provider.get_gas_price = AsyncMock(return_value=10_000_000)
        chain = make_chain(provider)

        await chain.init()

        assert chain.gas_price == Decimal("0.01")

    @pytest.mark.asyncio
    async def test_rpc_failure_keeps_default_gas_price(self):
        provider = MagicMock()
        provider.get_gas_price = AsyncMock(side_effect=InfraError("all endpoints failed"))
        chain = make_chain(provider)

        await chain.init()

        assert chain.ready()
        assert chain.gas_price == Decimal("20")

    @pytest.mark.asyncio
    async def test_null_gas_price_keeps_default(self):
        rpc = "https://rpc.test"
        client = httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None})
        ))
        chain = make_chain(RPCProvider(1, [rpc], client=client))

        await chain.init()

        assert chain.ready()
        assert chain.gas_price == Decimal("20")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_malformed_token_list(self):
        chain = make_chain(token_list=[{"symbol": "BAD", "address": "0x123", "decimals": 18}])

        with pytest.raises(ConfigError):
            await chain.init()
        assert not chain.ready()

    @pytest.mark.asyncio
    async def test_close_closes_provider(self):
        chain = make_chain()
        await chain.close()
        chain.provider.close.assert_awaited_once()

    def test_from_config(self):
        chain = EvmChain.from_config(ChainKind.ETHEREUM, "mainnet")

        assert chain.chain_id == 1
        assert chain.network == "mainnet"
        assert chain.native_currency == "ETH"

    def test_from_config_unknown_network(self):
        with pytest.raises(UnsupportedChainError) as exc_info:
            EvmChain.from_config(ChainKind.ETHEREUM, "ropsten")
        assert exc_info.value.http_status == 404


class TestChainRegistry:
    """Test chain lookup by name."""

    @pytest.mark.parametrize("name,kind", [
        ("ethereum", ChainKind.ETHEREUM),
        ("Ethereum", ChainKind.ETHEREUM),
        ("avalanche", ChainKind.AVALANCHE),
        ("polygon", ChainKind.POLYGON),
        ("harmony", ChainKind.HARMONY),
        ("binance-smart-chain", ChainKind.BINANCE_SMART_CHAIN),
        ("cronos", ChainKind.CRONOS),
        ("telos", ChainKind.TELOS),
    ])
    def test_resolve_kind(self, name, kind):
        assert ChainRegistry.resolve_kind(name) == kind

    def test_resolve_unknown(self):
        with pytest.raises(UnsupportedChainError) as exc_info:
            ChainRegistry.resolve_kind("solana")
        assert exc_info.value.code == ErrorCode.UNSUPPORTED_CHAIN

    def test_get_is_memoized(self):
        factory = MagicMock(side_effect=lambda network: make_chain())
        registry = ChainRegistry({ChainKind.ETHEREUM: factory})

        first = registry.get("ethereum", "mainnet")
        second = registry.get("ETHEREUM", "mainnet")

        assert first is second
        factory.assert_called_once_with("mainnet")

    def test_networks_are_separate(self):
        factory = MagicMock(side_effect=lambda network: make_chain())
        registry = ChainRegistry({ChainKind.ETHEREUM: factory})

        assert registry.get("ethereum", "mainnet") is not registry.get("ethereum", "arbitrum")

    def test_known_kind_without_factory(self):
        registry = ChainRegistry({ChainKind.ETHEREUM: MagicMock()})

        with pytest.raises(UnsupportedChainError):
            registry.get("polygon", "mainnet")

    @pytest.mark.asyncio
    async def test_close_all(self):
        chain = make_chain()
        registry = ChainRegistry({ChainKind.ETHEREUM: lambda network: chain})
        registry.get("ethereum", "mainnet")

        await registry.close_all()

        chain.provider.close.assert_awaited_once()

    def test_default_registry_covers_every_kind(self):
        registry = default_chain_registry()

        assert set(registry.supported) == set(ChainKind)
        assert registry.get("polygon", "mainnet").chain_id == 137
