"""
Private Account Service

Signed wrappers over the private Kraken account endpoints.

Credentials are resolved on the first private call, not at construction, so
the service (and the process) can start without them. Missing credentials
surface as AuthError from that first call.
"""

from typing import Any, Dict, List, Optional

from core.errors import ValidationError
from core.schemas import TradeBalance, TradeVolume
from exchanges.kraken import endpoints
from exchanges.kraken.auth import Credentials
from exchanges.kraken.params import build_params


VALID_EXPORT_REPORTS = ("trades", "ledgers")
VALID_EXPORT_FORMATS = ("CSV", "TSV")


class Account:
    """
    Private account calls.

    Example:
        >>> account = Account(manager)
        >>> balance = await account.get_balance()
        >>> balance.get("ZUSD")
        '171288.6158'
    """

    def __init__(self, manager, credentials: Optional[Credentials] = None, settings=None):
        """
        Args:
            manager: Shared KrakenClientManager
            credentials: Explicit credentials (read from settings when omitted)
            settings: Settings to read credentials from (defaults to global settings)
        """
        self.manager = manager
        self._credentials = credentials
        self._settings = settings

    @property
    def credentials(self) -> Credentials:
        """
        Credentials for signing, loaded lazily.

        Raises:
            AuthError: If KRAKEN_API_KEY or KRAKEN_API_SECRET is missing
        """
        if self._credentials is None:
            self._credentials = Credentials.from_settings(self._settings)
        return self._credentials

    async def _call(self, endpoint: str, params: Optional[Dict[str, Any]] = None, result_type: Any = Any) -> Any:
        return await self.manager.private_request(endpoint, self.credentials, params or None, result_type)

    async def get_balance(self) -> Dict[str, str]:
        """Get all cash balances, net of pending withdrawals."""
        return await self._call(endpoints.BALANCE, result_type=Dict[str, str])

    async def get_balance_ex(self) -> Dict[str, Dict[str, Any]]:
        """Get extended balances (balance, credit, credit_used, hold_trade)."""
        return await self._call(endpoints.BALANCE_EX, result_type=Dict[str, Dict[str, Any]])

    async def get_trade_balance(self, asset: Optional[str] = None) -> TradeBalance:
        """Get the trade balance summary, in ``asset`` (default ZUSD)."""
        return await self._call(endpoints.TRADE_BALANCE, build_params(asset=asset), TradeBalance)

    async def get_open_orders(
        self,
        trades: Optional[bool] = None,
        userref: Optional[int] = None,
        cl_ord_id: Optional[str] = None
    ) -> Dict[str, Any]:
        params = build_params(trades=trades, userref=userref, cl_ord_id=cl_ord_id)
        return await self._call(endpoints.OPEN_ORDERS, params, Dict[str, Any])

    async def get_closed_orders(
        self,
        trades: Optional[bool] = None,
        userref: Optional[int] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
        ofs: Optional[int] = None,
        closetime: Optional[str] = None,
        consolidate_taker: Optional[bool] = None,
        without_count: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Get closed orders, 50 per page.

        Args:
            closetime: Which time to use for start/end: "open", "close" or "both"
        """
        if closetime is not None and closetime not in ("open", "close", "both"):
            raise ValidationError("Invalid closetime. Must be one of: open, close, both")
        params = build_params(
            trades=trades,
            userref=userref,
            start=start,
            end=end,
            ofs=ofs,
            closetime=closetime,
            consolidate_taker=consolidate_taker,
            without_count=without_count,
        )
        return await self._call(endpoints.CLOSED_ORDERS, params, Dict[str, Any])

    async def query_orders(
        self,
        txid: List[str],
        trades: Optional[bool] = None,
        userref: Optional[int] = None,
        consolidate_taker: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Query orders by transaction id.

        Raises:
            ValidationError: If no txid is given
        """
        if not txid:
            raise ValidationError("At least one txid is required")
        params = build_params(trades=trades, userref=userref, txid=txid, consolidate_taker=consolidate_taker)
        return await self._call(endpoints.QUERY_ORDERS, params, Dict[str, Any])

    async def get_trades_history(
        self,
        trades: Optional[bool] = None,
        type_param: Optional[str] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
        ofs: Optional[int] = None,
        consolidate_taker: Optional[bool] = None
    ) -> Dict[str, Any]:
        params = build_params(
            trades=trades,
            type=type_param,
            start=start,
            end=end,
            ofs=ofs,
            consolidate_taker=consolidate_taker,
        )
        return await self._call(endpoints.TRADES_HISTORY, params, Dict[str, Any])

    async def get_open_positions(
        self,
        txid: Optional[List[str]] = None,
        docalcs: Optional[bool] = None
    ) -> Dict[str, Any]:
        params = build_params(txid=txid or None, docalcs=docalcs)
        return await self._call(endpoints.OPEN_POSITIONS, params, Dict[str, Any])

    async def get_ledgers(
        self,
        asset: Optional[str] = None,
        aclass: Optional[str] = None,
        type_param: Optional[str] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
        ofs: Optional[int] = None,
        without_count: Optional[bool] = None
    ) -> Dict[str, Any]:
        params = build_params(
            asset=asset,
            aclass=aclass,
            type=type_param,
            start=start,
            end=end,
            ofs=ofs,
            without_count=without_count,
        )
        return await self._call(endpoints.LEDGERS, params, Dict[str, Any])

    async def get_trade_volume(self, pair: Optional[str] = None) -> TradeVolume:
        """Get 30 day USD trading volume and fee schedule (for ``pair`` if given)."""
        return await self._call(endpoints.TRADE_VOLUME, build_params(pair=pair), TradeVolume)

    async def get_order_amends(self, order_id: str) -> Dict[str, Any]:
        """
        Get the amend history of one order.

        Raises:
            ValidationError: If order_id is empty
        """
        if not order_id:
            raise ValidationError("order_id is required")
        return await self._call(endpoints.ORDER_AMENDS, build_params(order_id=order_id), Dict[str, Any])

    async def query_trades(
        self,
        txid: List[str],
        trades: Optional[bool] = None,
        consolidate_taker: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Query trades by transaction id (up to 20 per call).

        Raises:
            ValidationError: If no txid is given
        """
        if not txid:
            raise ValidationError("At least one txid is required")
        params = build_params(txid=txid, trades=trades, consolidate_taker=consolidate_taker)
        return await self._call(endpoints.QUERY_TRADES, params, Dict[str, Any])

    async def query_ledgers(self, id: List[str], trades: Optional[bool] = None) -> Dict[str, Any]:
        """
        Query ledger entries by id (up to 20 per call).

        Raises:
            ValidationError: If no id is given
        """
        if not id:
            raise ValidationError("At least one ledger id is required")
        return await self._call(endpoints.QUERY_LEDGERS, build_params(id=id, trades=trades), Dict[str, Any])

    # ============================================
    # Data Exports
    # ============================================

    async def request_export_report(
        self,
        report: str,
        description: str,
        format: Optional[str] = None,
        starttm: Optional[int] = None,
        endtm: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Queue a trades or ledgers export.

        Args:
            report: "trades" or "ledgers"
            description: Free-form label for the report
            format: "CSV" or "TSV" (server default is CSV)
            starttm: Unix start time of the exported range
            endtm: Unix end time of the exported range

        Returns:
            dict: {"id": <report id>}
        """
        if report not in VALID_EXPORT_REPORTS:
            raise ValidationError(f"Invalid report. Must be one of: {', '.join(VALID_EXPORT_REPORTS)}")
        if not description:
            raise ValidationError("description is required")
        if format is not None and format not in VALID_EXPORT_FORMATS:
            raise ValidationError(f"Invalid format. Must be one of: {', '.join(VALID_EXPORT_FORMATS)}")
        params = build_params(
            report=report,
            description=description,
            format=format,
            starttm=starttm,
            endtm=endtm,
        )
        return await self._call(endpoints.REQUEST_EXPORT_REPORT, params, Dict[str, Any])

    async def get_export_report_status(self, report: str) -> List[Dict[str, Any]]:
        """Status of every export of the given kind ("trades" or "ledgers")."""
        if report not in VALID_EXPORT_REPORTS:
            raise ValidationError(f"Invalid report. Must be one of: {', '.join(VALID_EXPORT_REPORTS)}")
        return await self._call(endpoints.GET_EXPORT_REPORT_STATUS, build_params(report=report), List[Dict[str, Any]])

    async def retrieve_export(self, report_id: str) -> bytes:
        """Download a finished export. Returns the raw zip archive."""
        if not report_id:
            raise ValidationError("report_id is required")
        return await self._call(endpoints.RETRIEVE_EXPORT, build_params(id=report_id), bytes)

    async def delete_export_report(self, report_id: str, type_param: str = "delete") -> Dict[str, Any]:
        """
        Delete a finished export, or cancel a queued one.

        Args:
            report_id: Id returned by request_export_report
            type_param: "delete" or "cancel"
        """
        if not report_id:
            raise ValidationError("report_id is required")
        if type_param not in ("delete", "cancel"):
            raise ValidationError("Invalid type. Must be one of: delete, cancel")
        params = build_params(id=report_id, type=type_param)
        return await self._call(endpoints.DELETE_EXPORT_REPORT, params, Dict[str, Any])
