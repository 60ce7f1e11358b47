"""
Kraken REST endpoint paths.

Paths are relative to the configured base URL and are also the exact bytes
that go into the request signature for private endpoints.
"""

# ============================================
# Public market data
# ============================================

SERVER_TIME = "/0/public/Time"
SYSTEM_STATUS = "/0/public/SystemStatus"
ASSET_INFO = "/0/public/Assets"
TRADABLE_ASSET_PAIRS = "/0/public/AssetPairs"
TICKER = "/0/public/Ticker"
OHLC = "/0/public/OHLC"
ORDER_BOOK = "/0/public/Depth"
RECENT_TRADES = "/0/public/Trades"
RECENT_SPREADS = "/0/public/Spread"

# ============================================
# Private account data
# ============================================

BALANCE = "/0/private/Balance"
BALANCE_EX = "/0/private/BalanceEx"
TRADE_BALANCE = "/0/private/TradeBalance"
OPEN_ORDERS = "/0/private/OpenOrders"
CLOSED_ORDERS = "/0/private/ClosedOrders"
QUERY_ORDERS = "/0/private/QueryOrders"
TRADES_HISTORY = "/0/private/TradesHistory"
OPEN_POSITIONS = "/0/private/OpenPositions"
LEDGERS = "/0/private/Ledgers"
TRADE_VOLUME = "/0/private/TradeVolume"
ORDER_AMENDS = "/0/private/OrderAmends"
QUERY_TRADES = "/0/private/QueryTrades"
QUERY_LEDGERS = "/0/private/QueryLedgers"

# ============================================
# Private data exports
# ============================================

REQUEST_EXPORT_REPORT = "/0/private/AddExport"
GET_EXPORT_REPORT_STATUS = "/0/private/ExportStatus"
RETRIEVE_EXPORT = "/0/private/RetrieveExport"
DELETE_EXPORT_REPORT = "/0/private/RemoveExport"
