"""
Kraken Exchange Connector

REST-only connector for the Kraken spot API.

Modules:
    api_client.py  # KrakenAPIClient: limiter, retry loop, envelope decoding
    auth.py        # PublicAuth / PrivateAuth request preparation, Credentials
    signing.py     # API-Sign computation and nonce generation
    params.py      # key=value&... parameter encoding
    endpoints.py   # endpoint paths

Endpoints Used:
    Public:  /0/public/Time, SystemStatus, Assets, AssetPairs, Ticker,
             OHLC, Depth, Trades, Spread
    Private: /0/private/Balance, BalanceEx, TradeBalance, OpenOrders,
             ClosedOrders, QueryOrders, TradesHistory, OpenPositions,
             Ledgers, TradeVolume
"""

from exchanges.kraken.api_client import KrakenAPIClient
from exchanges.kraken.auth import Credentials, PrivateAuth, PublicAuth
from exchanges.kraken.signing import NonceGenerator, sign

__all__ = [
    "KrakenAPIClient",
    "Credentials",
    "PrivateAuth",
    "PublicAuth",
    "NonceGenerator",
    "sign",
]
