"""
Unit Tests for MarketData and Account Services

These tests verify that the service wrappers:
- Call the right endpoint with the right parameters
- Reject invalid arguments before any request is made
- Load credentials lazily, so public calls work without them

The manager is replaced by a recording fake.

Run with:
    pytest tests/unit/test_services.py -v
"""

import pytest
from pydantic import SecretStr

from core.config import Settings
from core.errors import AuthError, ValidationError
from core.schemas import ServerTime, TickerInfo, TradeVolume
from exchanges.kraken import endpoints
from exchanges.kraken.auth import Credentials
from services.account import Account
from services.market_data import MarketData


class RecordingManager:
    """Stands in for KrakenClientManager; returns canned results."""

    def __init__(self, result=None):
        self.result = result if result is not None else {}
        self.calls = []

    async def public_request(self, endpoint, params=None, result_type=None):
        self.calls.append(("public", endpoint, params, result_type))
        return self.result

    async def private_request(self, endpoint, credentials, params=None, result_type=None):
        self.calls.append(("private", endpoint, params, result_type, credentials))
        return self.result


def no_credentials():
    return Settings(_env_file=None, kraken_api_key="", kraken_api_secret=SecretStr(""))


@pytest.fixture
def manager():
    return RecordingManager()


@pytest.fixture
def credentials():
    return Credentials(api_key="key", api_secret="c2VjcmV0")


# ============================================
# Market Data
# ============================================

class TestMarketData:
    """Tests for MarketData"""

    @pytest.mark.asyncio
    async def test_server_time(self, manager):
        await MarketData(manager).get_server_time()

        assert manager.calls == [("public", endpoints.SERVER_TIME, None, ServerTime)]

    @pytest.mark.asyncio
    async def test_ticker(self, manager):
        await MarketData(manager).get_ticker("XBTUSD")

        kind, endpoint, params, result_type = manager.calls[0]
        assert endpoint == endpoints.TICKER
        assert params == {"pair": "XBTUSD"}
        assert result_type.__args__[1] is TickerInfo

    @pytest.mark.asyncio
    async def test_recent_trades_params(self, manager):
        await MarketData(manager).get_recent_trades("ETHGBP", count=10)

        assert manager.calls[0][1:3] == (endpoints.RECENT_TRADES, {"pair": "ETHGBP", "count": 10})

    @pytest.mark.asyncio
    async def test_recent_trades_count_limit(self, manager):
        with pytest.raises(ValidationError):
            await MarketData(manager).get_recent_trades("ETHGBP", count=1001)

        assert manager.calls == []

    @pytest.mark.asyncio
    async def test_recent_trades_count_at_limit_is_allowed(self, manager):
        await MarketData(manager).get_recent_trades("ETHGBP", count=1000)
        assert len(manager.calls) == 1

    @pytest.mark.asyncio
    async def test_ohlc_interval_validation(self, manager):
        market = MarketData(manager)

        with pytest.raises(ValidationError) as exc_info:
            await market.get_ohlc("XBTUSD", interval=7)
        assert "Invalid interval" in exc_info.value.message
        assert manager.calls == []

        await market.get_ohlc("XBTUSD", interval=60, since=1700000000)
        assert manager.calls[0][2] == {"pair": "XBTUSD", "interval": 60, "since": 1700000000}

    @pytest.mark.asyncio
    async def test_asset_pairs_info_validation(self, manager):
        market = MarketData(manager)

        with pytest.raises(ValidationError):
            await market.get_tradable_asset_pairs(info="everything")
        assert manager.calls == []

        await market.get_tradable_asset_pairs(pair="XBTUSD", info="fees")
        assert manager.calls[0][2] == {"pair": "XBTUSD", "info": "fees"}

    @pytest.mark.asyncio
    async def test_remaining_public_endpoints(self, manager):
        market = MarketData(manager)

        await market.get_system_status()
        await market.get_asset_info(asset="XBT,ETH")
        await market.get_order_book("XBTUSD", count=5)
        await market.get_recent_spreads("ETHGBP", since=1)

        assert [call[1] for call in manager.calls] == [
            endpoints.SYSTEM_STATUS,
            endpoints.ASSET_INFO,
            endpoints.ORDER_BOOK,
            endpoints.RECENT_SPREADS,
        ]
        assert manager.calls[1][2] == {"asset": "XBT,ETH"}
        assert manager.calls[2][2] == {"pair": "XBTUSD", "count": 5}


# ============================================
# Account
# ============================================

class TestAccount:
    """Tests for Account"""

    @pytest.mark.asyncio
    async def test_balance_uses_private_request(self, manager, credentials):
        await Account(manager, credentials).get_balance()

        kind, endpoint, params, _, used = manager.calls[0]
        assert kind == "private"
        assert endpoint == endpoints.BALANCE
        assert params is None
        assert used is credentials

    @pytest.mark.asyncio
    async def test_trade_volume(self, manager, credentials):
        await Account(manager, credentials).get_trade_volume("ETHUSD")

        assert manager.calls[0][1:4] == (endpoints.TRADE_VOLUME, {"pair": "ETHUSD"}, TradeVolume)

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_on_first_private_call(self, manager):
        account = Account(manager, settings=no_credentials())

        with pytest.raises(AuthError) as exc_info:
            await account.get_balance()

        assert "KRAKEN_API_KEY" in exc_info.value.message
        assert manager.calls == []

    @pytest.mark.asyncio
    async def test_public_calls_work_without_credentials(self, manager):
        Account(manager, settings=no_credentials())

        await MarketData(manager).get_server_time()

        assert len(manager.calls) == 1

    def test_credentials_loaded_from_settings(self):
        source = Settings(_env_file=None, kraken_api_key="key", kraken_api_secret=SecretStr("c2VjcmV0"))

        account = Account(RecordingManager(), settings=source)

        assert account.credentials.api_key == "key"
        assert account.credentials.api_secret.get_secret_value() == "c2VjcmV0"

    def test_missing_secret_only(self):
        source = Settings(_env_file=None, kraken_api_key="key", kraken_api_secret=SecretStr(""))

        with pytest.raises(AuthError) as exc_info:
            Credentials.from_settings(source)

        assert "KRAKEN_API_SECRET" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_closed_orders_closetime_validation(self, manager, credentials):
        account = Account(manager, credentials)

        with pytest.raises(ValidationError):
            await account.get_closed_orders(closetime="later")
        assert manager.calls == []

        await account.get_closed_orders(trades=True, closetime="both")
        assert manager.calls[0][2] == {"trades": True, "closetime": "both"}

    @pytest.mark.asyncio
    async def test_query_orders_requires_txid(self, manager, credentials):
        account = Account(manager, credentials)

        with pytest.raises(ValidationError):
            await account.query_orders([])

        await account.query_orders(["OQCLML-BW3P3-BUCMWZ"])
        assert manager.calls[0][2] == {"txid": ["OQCLML-BW3P3-BUCMWZ"]}

    @pytest.mark.asyncio
    async def test_type_param_maps_to_type(self, manager, credentials):
        account = Account(manager, credentials)

        await account.get_trades_history(type_param="all")
        await account.get_ledgers(asset="ZUSD", type_param="deposit")

        assert manager.calls[0][2] == {"type": "all"}
        assert manager.calls[1][2] == {"asset": "ZUSD", "type": "deposit"}

    @pytest.mark.asyncio
    async def test_remaining_private_endpoints(self, manager, credentials):
        account = Account(manager, credentials)

        await account.get_balance_ex()
        await account.get_trade_balance(asset="ZUSD")
        await account.get_open_orders(trades=True)
        await account.get_open_positions(docalcs=True)
        await account.get_order_amends("OHYO67-6LP66-HMQ437")
        await account.query_trades(["THVRQM-33VKH-UCI7BS", "TTEUX3-HDAAA-RC2RUO"], trades=True)
        await account.query_ledgers(["L4UESK-KG3EQ-UFO4T5"])
        await account.request_export_report("trades", "my trades", format="CSV", starttm=1704067200)
        await account.get_export_report_status("trades")
        await account.retrieve_export("TCJA")
        await account.delete_export_report("TCJA", type_param="cancel")

        assert [call[1] for call in manager.calls] == [
            endpoints.BALANCE_EX,
            endpoints.TRADE_BALANCE,
            endpoints.OPEN_ORDERS,
            endpoints.OPEN_POSITIONS,
            endpoints.ORDER_AMENDS,
            endpoints.QUERY_TRADES,
            endpoints.QUERY_LEDGERS,
            endpoints.REQUEST_EXPORT_REPORT,
            endpoints.GET_EXPORT_REPORT_STATUS,
            endpoints.RETRIEVE_EXPORT,
            endpoints.DELETE_EXPORT_REPORT,
        ]
        params = [call[2] for call in manager.calls[4:]]
        assert params == [
            {"order_id": "OHYO67-6LP66-HMQ437"},
            {"txid": ["THVRQM-33VKH-UCI7BS", "TTEUX3-HDAAA-RC2RUO"], "trades": True},
            {"id": ["L4UESK-KG3EQ-UFO4T5"]},
            {"report": "trades", "description": "my trades", "format": "CSV", "starttm": 1704067200},
            {"report": "trades"},
            {"id": "TCJA"},
            {"id": "TCJA", "type": "cancel"},
        ]
        assert manager.calls[9][3] is bytes

    @pytest.mark.parametrize("call", [
        lambda account: account.query_trades([]),
        lambda account: account.query_ledgers([]),
        lambda account: account.get_order_amends(""),
        lambda account: account.request_export_report("orders", "bad kind"),
        lambda account: account.request_export_report("ledgers", ""),
        lambda account: account.request_export_report("ledgers", "x", format="XLS"),
        lambda account: account.get_export_report_status("orders"),
        lambda account: account.retrieve_export(""),
        lambda account: account.delete_export_report("TCJA", type_param="purge"),
    ])
    @pytest.mark.asyncio
    async def test_invalid_arguments_fail_before_any_call(self, manager, credentials, call):
        with pytest.raises(ValidationError):
            await call(Account(manager, credentials))

        assert manager.calls == []
