"""
dex/registry.py - Connector instances by chain and network.

The caller owns a ConnectorRegistry and closes it on shutdown; there is no
process-wide instance cache.
"""

from typing import Dict, Optional

import httpx

from chains.chain import ChainRegistry
from config import OdosConfig, load_odos_config
from core.constants import ChainKind
from core.logging import get_logger
from dex.adapters.odos import OdosAdapter

logger = get_logger(__name__)


class ConnectorRegistry:
    """
    Memoized OdosAdapter factory keyed by (chain, network).

    Usage:
        registry = ConnectorRegistry(default_chain_registry())
        adapter = await registry.get_initialized("ethereum", "mainnet")
        ...
        await registry.close_all()
    """

    def __init__(
        self,
        chains: ChainRegistry,
        config: Optional[OdosConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.chains = chains
        self.config = config or load_odos_config()
        self._client = client
        self._connectors: Dict[tuple[ChainKind, str], OdosAdapter] = {}

    def get(self, chain: str | ChainKind, network: str) -> OdosAdapter:
        """Get or create the connector for a chain/network pair."""
        kind = ChainRegistry.resolve_kind(chain)
        key = (kind, network)
        if key not in self._connectors:
            self._connectors[key] = OdosAdapter(
                chain_name=kind.value,
                network=network,
                chain=self.chains.get(kind, network),
                config=self.config,
                client=self._client,
            )
            logger.debug(
                f"Created Odos connector for {kind.value}/{network}",
                extra={"context": {"connectors": len(self._connectors)}},
            )
        return self._connectors[key]

    async def get_initialized(self, chain: str | ChainKind, network: str) -> OdosAdapter:
        """Get the connector and make sure its token table is loaded."""
        connector = self.get(chain, network)
        if not connector.ready():
            await connector.init()
        return connector

    async def close_all(self) -> None:
        """Close every connector and the chains behind them."""
        for connector in self._connectors.values():
            await connector.close()
        self._connectors.clear()
        await self.chains.close_all()
