"""
Services Package

Endpoint wrappers built on the shared KrakenClientManager:
- market_data: public market data (MarketData)
- account: private, signed account data (Account)
"""

from services.account import Account
from services.market_data import MarketData

__all__ = ["Account", "MarketData"]
