"""
Public Market Data Service

Thin wrappers over the public Kraken endpoints. Each method validates its
arguments, builds the parameter dict and makes one call through the shared
KrakenClientManager. Invalid arguments raise ValidationError before the
limiter or the network is touched.
"""

from typing import Any, Dict, Optional

from core.errors import ValidationError
from core.schemas import AssetInfo, ServerTime, SystemStatus, TickerInfo
from exchanges.kraken import endpoints
from exchanges.kraken.params import build_params


VALID_OHLC_INTERVALS = (1, 5, 15, 30, 60, 240, 1440, 10080, 21600)
VALID_ASSET_PAIR_INFO = ("info", "leverage", "fees", "margin")
MAX_RECENT_TRADES = 1000


class MarketData:
    """
    Public market data calls.

    Example:
        >>> market = MarketData(manager)
        >>> server_time = await market.get_server_time()
        >>> server_time.unixtime > 0
        True
    """

    def __init__(self, manager):
        self.manager = manager

    async def _call(self, endpoint: str, params: Optional[Dict[str, Any]] = None, result_type: Any = Any) -> Any:
        return await self.manager.public_request(endpoint, params or None, result_type)

    async def get_server_time(self) -> ServerTime:
        """Get the exchange server time."""
        return await self._call(endpoints.SERVER_TIME, result_type=ServerTime)

    async def get_system_status(self) -> SystemStatus:
        """Get the exchange status (online, maintenance, cancel_only, post_only)."""
        return await self._call(endpoints.SYSTEM_STATUS, result_type=SystemStatus)

    async def get_asset_info(
        self,
        asset: Optional[str] = None,
        aclass: Optional[str] = None
    ) -> Dict[str, AssetInfo]:
        """
        Get information about assets.

        Args:
            asset: Comma-delimited list of assets (e.g. "XBT,ETH"), all if omitted
            aclass: Asset class (e.g. "currency")
        """
        params = build_params(asset=asset, aclass=aclass)
        return await self._call(endpoints.ASSET_INFO, params, Dict[str, AssetInfo])

    async def get_tradable_asset_pairs(
        self,
        pair: Optional[str] = None,
        info: Optional[str] = None,
        country_code: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Get tradable asset pairs.

        Args:
            pair: Asset pairs to get data for (e.g. "BTC/USD,ETH/BTC")
            info: One of "info" (default), "leverage", "fees", "margin"
            country_code: Restrict to pairs available in these countries/regions
                          (e.g. "US:TX,GB,CA")

        Raises:
            ValidationError: If info is not a known value
        """
        if info is not None and info not in VALID_ASSET_PAIR_INFO:
            raise ValidationError(
                f"Invalid info parameter. Must be one of: {', '.join(VALID_ASSET_PAIR_INFO)}"
            )
        params = build_params(pair=pair, info=info, country_code=country_code)
        return await self._call(endpoints.TRADABLE_ASSET_PAIRS, params, Dict[str, Any])

    async def get_ticker(self, pair: str) -> Dict[str, TickerInfo]:
        """Get ticker information for one or more pairs (e.g. "XBTUSD")."""
        return await self._call(endpoints.TICKER, build_params(pair=pair), Dict[str, TickerInfo])

    async def get_ohlc(
        self,
        pair: str,
        interval: Optional[int] = None,
        since: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Get OHLC data.

        The result maps the pair name to a list of
        [time, open, high, low, close, vwap, volume, count] rows, plus a
        "last" id to use as ``since`` when polling.

        Args:
            pair: Asset pair (e.g. "XBTUSD")
            interval: Minutes per candle: 1, 5, 15, 30, 60, 240, 1440, 10080, 21600
            since: Return entries since this id/timestamp

        Raises:
            ValidationError: If interval is not supported
        """
        if interval is not None and interval not in VALID_OHLC_INTERVALS:
            raise ValidationError(
                "Invalid interval value. Must be one of: "
                + ", ".join(str(i) for i in VALID_OHLC_INTERVALS)
            )
        params = build_params(pair=pair, interval=interval, since=since)
        return await self._call(endpoints.OHLC, params, Dict[str, Any])

    async def get_order_book(self, pair: str, count: Optional[int] = None) -> Dict[str, Any]:
        """Get the order book (asks/bids) for a pair."""
        return await self._call(endpoints.ORDER_BOOK, build_params(pair=pair, count=count), Dict[str, Any])

    async def get_recent_trades(
        self,
        pair: str,
        since: Optional[int] = None,
        count: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Get recent trades.

        Raises:
            ValidationError: If count exceeds 1000
        """
        if count is not None and count > MAX_RECENT_TRADES:
            raise ValidationError(f"Count cannot exceed {MAX_RECENT_TRADES}")
        params = build_params(pair=pair, since=since, count=count)
        return await self._call(endpoints.RECENT_TRADES, params, Dict[str, Any])

    async def get_recent_spreads(self, pair: str, since: Optional[int] = None) -> Dict[str, Any]:
        """Get recent bid/ask spreads for a pair."""
        return await self._call(endpoints.RECENT_SPREADS, build_params(pair=pair, since=since), Dict[str, Any])
