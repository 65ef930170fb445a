"""
Wallet session and chain client boundaries.
"""
from .base import Account, BaseChainClient, BaseWalletSession, ConnectionState

__all__ = ["Account", "BaseChainClient", "BaseWalletSession", "ConnectionState"]
