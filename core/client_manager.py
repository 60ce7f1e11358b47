"""
Client Manager - Shared Kraken Client for Concurrent Callers

This module provides the single, long-lived KrakenAPIClient used by the whole
process, and the lock that serializes access to it.

Locking:
    One lock is held from limiter admission through the HTTP exchange and
    its retries. At most one request is in flight, and signed requests never
    race for the same millisecond nonce.

Architecture Pattern:
    - The manager is created once at startup (FastAPI lifespan)
    - Routes receive it through a dependency, not a module global
    - Services (MarketData, Account) call public_request/private_request

Example Usage:
    manager = KrakenClientManager()
    await manager.initialize()

    server_time = await manager.public_request(SERVER_TIME, result_type=ServerTime)

    async with manager.acquire() as client:
        # several calls under one lock hold
        ...

    await manager.shutdown()
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional

from core.config import KrakenConfig
from core.errors import KrakenError
from core.logging import logger


class KrakenClientManager:
    """
    Owner of the process-wide KrakenAPIClient.

    Attributes:
        client: The shared KrakenAPIClient
        initialized: True between initialize() and shutdown()

    Example:
        >>> manager = KrakenClientManager()
        >>> await manager.initialize()
        >>> status = await manager.public_request("/0/public/SystemStatus")
        >>> await manager.shutdown()
    """

    def __init__(self, config: Optional[KrakenConfig] = None, client=None):
        """
        Create the manager and its client.

        Args:
            config: Client configuration (defaults to the global settings)
            client: Pre-built client (tests); built from config when omitted

        Note:
            The client is created here but its HTTP session is only opened in
            initialize().
        """
        # exchanges.kraken imports from core, so import here
        from exchanges.kraken.api_client import KrakenAPIClient

        self.client = client or KrakenAPIClient(config)
        self._lock = asyncio.Lock()
        self.initialized = False

        logger.info(f"KrakenClientManager created (base_url={self.client.config.base_url})")

    # ============================================
    # Lifecycle Management
    # ============================================

    async def initialize(self) -> None:
        """Open the client's HTTP session."""
        logger.info("Initializing Kraken client...")
        await self.client.__aenter__()
        self.initialized = True
        logger.info("✓ Kraken client initialized")

    async def shutdown(self) -> None:
        """Close the client's HTTP session."""
        logger.info("Shutting down Kraken client...")
        try:
            await self.client.__aexit__(None, None, None)
            logger.info("✓ Kraken client shut down")
        finally:
            self.initialized = False

    # ============================================
    # Serialized Access
    # ============================================

    @property
    def locked(self) -> bool:
        """True while some caller holds the client."""
        return self._lock.locked()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Any]:
        """
        Hold the client exclusively for the duration of the block.

        Waiting callers queue on the lock; cancelling a waiting task simply
        abandons its call.
        """
        async with self._lock:
            yield self.client

    async def public_request(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        result_type: Any = Any
    ) -> Any:
        """Run one public call (with retries) under the lock."""
        async with self.acquire() as client:
            return await client.public_request(endpoint, params, result_type)

    async def private_request(
        self,
        endpoint: str,
        credentials,
        params: Optional[Mapping[str, Any]] = None,
        result_type: Any = Any
    ) -> Any:
        """Run one signed call (with retries) under the lock."""
        async with self.acquire() as client:
            return await client.private_request(endpoint, credentials, params, result_type)

    # ============================================
    # Health Check
    # ============================================

    async def health_check(self) -> bool:
        """
        Check connectivity by fetching the server time.

        Returns:
            bool: True if Kraken answered with a valid server time
        """
        from core.schemas import ServerTime
        from exchanges.kraken.endpoints import SERVER_TIME

        try:
            server_time = await self.public_request(SERVER_TIME, result_type=ServerTime)
            logger.debug(f"Health check OK (server time {server_time.unixtime})")
            return True
        except KrakenError as e:
            logger.warning(f"Health check failed: {e}")
            return False
