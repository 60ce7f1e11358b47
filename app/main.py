"""
FastAPI Application - Kraken REST Gateway

Exposes a few Kraken operations over a local HTTP server. Every route makes
one call through the shared KrakenClientManager and returns either the typed
result (200) or the classified error message (500).

Usage:
    uvicorn app.main:app --host 127.0.0.1 --port 8080

Docs:
    - Swagger: http://localhost:8080/docs
    - ReDoc: http://localhost:8080/redoc
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from core import __version__
from core.client_manager import KrakenClientManager
from core.config import KrakenConfig, settings, validate_configuration
from core.errors import KrakenError
from core.logging import logger
from core.schemas import ServerTime, SystemStatus, TickerInfo, TradeVolume
from services.account import Account
from services.market_data import MarketData


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared client on startup and close it on shutdown."""
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()
        manager = KrakenClientManager(KrakenConfig.from_settings(settings))
        await manager.initialize()
        app.state.manager = manager
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("=== Shutting Down ===")
    try:
        await app.state.manager.shutdown()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


def get_manager(request: Request) -> KrakenClientManager:
    """Dependency: the process-wide client manager."""
    return request.app.state.manager


def _failure(what: str, error: KrakenError) -> HTTPException:
    logger.error(f"{what} failed: {error}")
    return HTTPException(status_code=500, detail=str(error))


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="Kraken REST Gateway",
    description=(
        "Local gateway to the Kraken REST API.\n\n"
        "All calls share one rate-limited, retrying client.\n\n"
        "## Endpoints\n"
        "- `GET /api/server-time` - Kraken server time\n"
        "- `GET /api/system-status` - Exchange status\n"
        "- `GET /api/ticker?pair=XBTUSD` - Ticker\n"
        "- `GET /api/recent-trades?pair=ETHGBP` - Recent trades\n"
        "- `GET /api/recent-spreads?pair=ETHGBP` - Recent spreads\n"
        "- `GET /api/balance` - Account balance (requires credentials)\n"
        "- `GET /api/trade-volume?pair=ETHUSD` - Trade volume (requires credentials)\n"
        "- `GET /health` - Health check\n"
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

router = APIRouter(prefix="/api")


# ============================================
# System Endpoints
# ============================================

@app.get("/health", tags=["System"])
async def health_check(manager: KrakenClientManager = Depends(get_manager)):
    """Health check - fetches the Kraken server time."""
    healthy = await manager.health_check()
    return {"status": "healthy" if healthy else "degraded", "kraken": healthy}


@router.get("/hello", response_class=PlainTextResponse, tags=["System"])
async def hello():
    return "Hello world!"


# ============================================
# Market Data Endpoints
# ============================================

@router.get("/server-time", response_model=ServerTime, tags=["Market Data"])
async def get_server_time(manager: KrakenClientManager = Depends(get_manager)):
    try:
        return await MarketData(manager).get_server_time()
    except KrakenError as e:
        raise _failure("Server time", e)


@router.get("/system-status", response_model=SystemStatus, tags=["Market Data"])
async def get_system_status(manager: KrakenClientManager = Depends(get_manager)):
    try:
        return await MarketData(manager).get_system_status()
    except KrakenError as e:
        raise _failure("System status", e)


@router.get("/ticker", response_model=Dict[str, TickerInfo], tags=["Market Data"])
async def get_ticker(
    pair: str = Query(default="XBTUSD", description="Asset pair"),
    manager: KrakenClientManager = Depends(get_manager)
):
    try:
        return await MarketData(manager).get_ticker(pair)
    except KrakenError as e:
        raise _failure(f"Ticker {pair}", e)


@router.get("/recent-trades", tags=["Market Data"])
async def get_recent_trades(
    pair: str = Query(default="ETHGBP", description="Asset pair"),
    since: Optional[int] = Query(default=None, description="Return trades since this timestamp"),
    count: Optional[int] = Query(default=10, ge=1, description="Number of trades (max 1000)"),
    manager: KrakenClientManager = Depends(get_manager)
) -> Dict[str, Any]:
    try:
        return await MarketData(manager).get_recent_trades(pair, since=since, count=count)
    except KrakenError as e:
        raise _failure(f"Recent trades {pair}", e)


@router.get("/recent-spreads", tags=["Market Data"])
async def get_recent_spreads(
    pair: str = Query(default="ETHGBP", description="Asset pair"),
    since: Optional[int] = Query(default=None, description="Return spreads since this timestamp"),
    manager: KrakenClientManager = Depends(get_manager)
) -> Dict[str, Any]:
    try:
        return await MarketData(manager).get_recent_spreads(pair, since=since)
    except KrakenError as e:
        raise _failure(f"Recent spreads {pair}", e)


# ============================================
# Account Endpoints
# ============================================

@router.get("/balance", tags=["Account"])
async def get_balance(manager: KrakenClientManager = Depends(get_manager)) -> Dict[str, str]:
    try:
        return await Account(manager).get_balance()
    except KrakenError as e:
        raise _failure("Balance", e)


@router.get("/trade-volume", response_model=TradeVolume, tags=["Account"])
async def get_trade_volume(
    pair: Optional[str] = Query(default="ETHUSD", description="Asset pair for fee info"),
    manager: KrakenClientManager = Depends(get_manager)
):
    try:
        return await Account(manager).get_trade_volume(pair)
    except KrakenError as e:
        raise _failure("Trade volume", e)


app.include_router(router)
