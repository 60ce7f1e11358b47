"""
Kraken Response Schemas

This module defines Pydantic models for the Kraken response envelope and for
the response payloads whose shape is stable enough to type.

Key Principle:
    Every Kraken endpoint answers with the same envelope:

        {"error": ["EGeneral:Invalid arguments", ...], "result": {...}}

    The transport client validates the envelope with KrakenResponse, and then
    validates ``result`` against whatever type the caller asked for (one of
    the models below, a typing construct such as Dict[str, str], or Any).

Models:
    - KrakenResponse: The uniform error/result envelope
    - ServerTime: /0/public/Time
    - SystemStatus: /0/public/SystemStatus
    - AssetInfo: entries of /0/public/Assets
    - TickerInfo: entries of /0/public/Ticker
    - TradeBalance: /0/private/TradeBalance
    - TradeVolume: /0/private/TradeVolume

Payload models allow extra fields so new keys added by Kraken do not turn a
good response into a deserialization error.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.utils.time import to_utc_datetime


# ============================================
# Response Envelope
# ============================================

class KrakenResponse(BaseModel):
    """
    Uniform Kraken response envelope.

    Invariant:
        When ``error`` is non-empty, ``result`` is treated as absent no matter
        what the wire contains; use ``payload`` rather than ``result``.
    """

    error: List[str] = Field(
        default_factory=list,
        description="Error strings, e.g. ['EAPI:Rate limit exceeded']"
    )

    result: Optional[Any] = Field(
        default=None,
        description="Endpoint specific payload"
    )

    @property
    def payload(self) -> Optional[Any]:
        """Result honoring the envelope invariant (None whenever errors are present)."""
        if self.error:
            return None
        return self.result


class KrakenModel(BaseModel):
    """Base for payload models: tolerate fields we do not model."""

    model_config = ConfigDict(extra="allow")


# ============================================
# Market Data Payloads
# ============================================

class ServerTime(KrakenModel):
    """
    Kraken server time.

    Example:
        >>> ServerTime(unixtime=1704110400, rfc1123="Mon,  1 Jan 24 12:00:00 +0000").as_datetime
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """

    unixtime: int = Field(..., gt=0, description="Unix timestamp in seconds")
    rfc1123: str = Field(..., min_length=1, description="RFC 1123 formatted date")

    @property
    def as_datetime(self) -> datetime:
        return to_utc_datetime(self.unixtime)


class SystemStatus(KrakenModel):
    """Exchange status: online, maintenance, cancel_only or post_only."""

    status: str = Field(..., examples=["online", "maintenance", "cancel_only", "post_only"])
    timestamp: str = Field(..., description="Current timestamp, RFC 3339")


class AssetInfo(KrakenModel):
    aclass: str
    altname: str
    decimals: int
    display_decimals: int


class TickerInfo(KrakenModel):
    """
    Ticker entry for one pair.

    Field names follow the Kraken payload:
        a: ask [price, whole lot volume, lot volume]
        b: bid [price, whole lot volume, lot volume]
        c: last trade closed [price, lot volume]
        v: volume [today, last 24 hours]
        p: volume weighted average price [today, last 24 hours]
        t: number of trades [today, last 24 hours]
        l: low [today, last 24 hours]
        h: high [today, last 24 hours]
        o: today's opening price
    """

    a: List[str]
    b: List[str]
    c: List[str]
    v: List[str]
    p: List[str]
    t: List[int]
    l: List[str]
    h: List[str]
    o: str


# ============================================
# Account Payloads
# ============================================

class TradeBalance(KrakenModel):
    """
    Trade balance summary.

    Attributes:
        eb: Equivalent balance (all currencies)
        tb: Trade balance (equity currencies)
        m: Margin amount of open positions
        n: Unrealized net profit/loss of open positions
        c: Cost basis of open positions
        v: Current floating valuation of open positions
        e: Equity (trade balance + unrealized net profit/loss)
        mf: Free margin
        ml: Margin level (optional, only with open positions)
    """

    eb: str
    tb: str
    m: str
    n: str
    c: str
    v: str
    e: str
    mf: str
    ml: Optional[str] = None


class TradeVolume(KrakenModel):
    currency: str
    volume: str
    fees: Optional[Dict[str, Dict[str, Any]]] = None
    fees_maker: Optional[Dict[str, Dict[str, Any]]] = None
