from .base import BaseConsumer
from .marketplace_consumer import MarketplaceConsumer

__all__ = ["BaseConsumer", "MarketplaceConsumer"]
