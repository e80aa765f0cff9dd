"""
chains - Chain instances and JSON-RPC access.
"""

from chains.chain import ChainRegistry, EvmChain, default_chain_registry
from chains.providers import RPCProvider, RPCResponse

__all__ = [
    "ChainRegistry",
    "EvmChain",
    "RPCProvider",
    "RPCResponse",
    "default_chain_registry",
]
