# PATH: execution/__init__.py
"""
Execution layer: wallets that sign and broadcast swap transactions.
"""

from execution.wallet import LocalWallet, Wallet

__all__ = [
    "LocalWallet",
    "Wallet",
]
