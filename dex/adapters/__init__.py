"""
dex/adapters/ - Swap connector adapters.

Adapters:
- odos: Odos smart order routing (aggregator quotes + assembled swaps)
"""

from dex.adapters.base import TradingConnector
from dex.adapters.odos import OdosAdapter

__all__ = [
    "OdosAdapter",
    "TradingConnector",
]
