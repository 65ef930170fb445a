"""
Trade payload generation and external venue submission.
"""
from .payload import TradePayloadGenerator, to_onchain_signal
from .venue import BaseVenueClient, HttpVenueClient

__all__ = [
    "BaseVenueClient",
    "HttpVenueClient",
    "TradePayloadGenerator",
    "to_onchain_signal",
]
