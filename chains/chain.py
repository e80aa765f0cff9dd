"""
chains/chain.py - EVM chain instances and the chain registry.

An EvmChain is the upstream collaborator a connector reads from:
chain_id, gas_price, stored_token_list, ready() and init().

ChainRegistry replaces per-class instance caches: the caller builds one
registry at startup with an explicit ChainKind -> factory table, and the
registry owns the lifetime of every chain it hands out.
"""

from decimal import Decimal
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from chains.providers import RPCProvider
from config import get_chain_config
from core.constants import ChainKind, DEFAULT_GAS_PRICE_GWEI, DEFAULT_REQUEST_TIMEOUT_SECONDS
from core.exceptions import ConfigError, InfraError, UnsupportedChainError, ValidationError
from core.logging import get_logger
from core.math import from_base_units, safe_decimal
from core.models import Token

logger = get_logger(__name__)


class EvmChain:
    """
    An EVM chain/network pair.

    Usage:
        chain = EvmChain.from_config(ChainKind.ETHEREUM, "mainnet")
        await chain.init()
        chain.gas_price        # gwei
        chain.stored_token_list
    """

    def __init__(
        self,
        kind: ChainKind,
        network: str,
        chain_id: int,
        provider: RPCProvider,
        token_list: List[Dict[str, Any]],
        default_gas_price_gwei: str = DEFAULT_GAS_PRICE_GWEI,
        native_currency: str = "ETH",
    ):
        self.kind = kind
        self.network = network
        self.provider = provider
        self.native_currency = native_currency
        self._chain_id = chain_id
        self._raw_token_list = token_list
        self._gas_price = safe_decimal(default_gas_price_gwei, Decimal(DEFAULT_GAS_PRICE_GWEI))
        self._tokens: List[Token] = []
        self._ready = False

    @classmethod
    def from_config(
        cls,
        kind: ChainKind,
        network: str,
        config_dir: Optional[Path] = None,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> "EvmChain":
        """
        Build a chain from chains.yaml.

        Raises:
            UnsupportedChainError: If the chain/network pair is not configured
        """
        try:
            config = get_chain_config(kind.value, network, config_dir)
        except KeyError as e:
            raise UnsupportedChainError(
                f"Network {network} is not configured for {kind.value}",
                details={"chain": kind.value, "network": network, "error": str(e)},
            )

        chain_id = int(config["chain_id"])
        return cls(
            kind=kind,
            network=network,
            chain_id=chain_id,
            provider=RPCProvider(chain_id, config.get("rpc_urls", []), timeout_seconds),
            token_list=config.get("tokens", []),
            default_gas_price_gwei=str(config.get("default_gas_price_gwei", DEFAULT_GAS_PRICE_GWEI)),
            native_currency=config.get("native_currency", "ETH"),
        )

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def gas_price(self) -> Decimal:
        """Gas price in gwei."""
        return self._gas_price

    @property
    def stored_token_list(self) -> List[Token]:
        return list(self._tokens)

    def ready(self) -> bool:
        return self._ready

    async def init(self) -> None:
        """
        Load the token list and refresh the gas price.

        An unreachable RPC leaves the configured default gas price in place.
        """
        try:
            tokens = [Token.from_dict(self._chain_id, t) for t in self._raw_token_list]
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ConfigError(
                f"Malformed token list for {self.kind.value}/{self.network}: {e}",
                details={"chain": self.kind.value, "network": self.network},
            )
        self._tokens = tokens

        try:
            wei = await self.provider.get_gas_price()
            self._gas_price = from_base_units(wei, 9)
        except InfraError as e:
            logger.warning(
                f"Gas price lookup failed, using default: {e}",
                extra={"context": {
                    "chain": self.kind.value,
                    "network": self.network,
                    "gas_price_gwei": str(self._gas_price),
                    "rpc": self.provider.get_stats_summary(),
                }},
            )

        self._ready = True
        logger.info(
            f"Chain ready: {self.kind.value}/{self.network}",
            extra={"context": {
                "chain_id": self._chain_id,
                "tokens": len(tokens),
                "gas_price_gwei": str(self._gas_price),
            }},
        )

    async def close(self) -> None:
        await self.provider.close()


ChainFactory = Callable[[str], EvmChain]


class ChainRegistry:
    """
    Registry of chain instances by (chain, network).

    Chain names resolve through a closed ChainKind lookup table; unknown
    names are rejected instead of falling through to a default.
    """

    def __init__(self, factories: Dict[ChainKind, ChainFactory]):
        self._factories = dict(factories)
        self._chains: Dict[tuple[ChainKind, str], EvmChain] = {}

    @staticmethod
    def resolve_kind(chain: str | ChainKind) -> ChainKind:
        """
        Map a gateway chain name to its ChainKind.

        Raises:
            UnsupportedChainError: If the name is not a known chain
        """
        if isinstance(chain, ChainKind):
            return chain
        try:
            return ChainKind(chain.strip().lower())
        except ValueError:
            raise UnsupportedChainError(
                f"Unsupported chain: {chain}",
                details={"chain": chain, "supported": [k.value for k in ChainKind]},
            )

    @property
    def supported(self) -> List[ChainKind]:
        return list(self._factories)

    def get(self, chain: str | ChainKind, network: str) -> EvmChain:
        """Get or create the chain instance for a chain/network pair."""
        kind = self.resolve_kind(chain)
        key = (kind, network)
        if key not in self._chains:
            factory = self._factories.get(kind)
            if factory is None:
                raise UnsupportedChainError(
                    f"No chain implementation registered for {kind.value}",
                    details={"chain": kind.value},
                )
            self._chains[key] = factory(network)
        return self._chains[key]

    async def close_all(self) -> None:
        """Close all chains."""
        for chain in self._chains.values():
            await chain.close()
        self._chains.clear()


def default_chain_registry(
    config_dir: Optional[Path] = None,
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
) -> ChainRegistry:
    """Registry with every ChainKind backed by chains.yaml."""
    return ChainRegistry({
        kind: partial(EvmChain.from_config, kind, config_dir=config_dir, timeout_seconds=timeout_seconds)
        for kind in ChainKind
    })
