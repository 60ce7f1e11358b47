"""
Kraken REST API Client

This module provides the async HTTP transport used for every Kraken call.
It handles:
- Token bucket admission control before each attempt
- Request signing for private endpoints (via PrivateAuth)
- Retry with linear backoff for transient failures
- Normalizing the {"error": [...], "result": ...} envelope into either a
  typed result or a classified KrakenError

API Documentation:
    https://docs.kraken.com/api/

Rate Limits:
    - Default budget: 15 calls per minute (bucket of 15, refilled at 0.25/s)
    - Retry delay: retry_delay * retry_number (1x, 2x, 3x ...)

Usage:
    async with KrakenAPIClient() as client:
        server_time = await client.public_request(SERVER_TIME, result_type=ServerTime)
        balance = await client.private_request(BALANCE, credentials)
"""

import asyncio
import json
import time
from functools import lru_cache
from typing import Any, Mapping, Optional, Union

import aiohttp
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.config import KrakenConfig
from core.errors import (
    DeserializationError,
    InvalidResponseError,
    KrakenError,
    SerializationError,
    UnknownError,
    classify_remote_errors,
    classify_transport_error,
)
from core.logging import get_logger, log_api_request, log_api_response, log_retry
from core.rate_limit import TokenBucket
from core.schemas import KrakenResponse
from exchanges.kraken.auth import Credentials, PrivateAuth, PublicAuth
from exchanges.kraken.signing import NonceGenerator


Auth = Union[PublicAuth, PrivateAuth]


@lru_cache(maxsize=128)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def decode_result(result: Any, result_type: Any = Any) -> Any:
    """
    Validate an envelope payload against the caller's expected type.

    Raises:
        DeserializationError: If the payload does not match result_type
    """
    if result_type is Any:
        return result
    try:
        return _adapter(result_type).validate_python(result)
    except PydanticValidationError as e:
        raise DeserializationError(f"Unexpected result shape: {e}", cause=e) from e


class KrakenAPIClient:
    """
    Async HTTP client for the Kraken REST API

    One instance is meant to live for the whole process (see
    KrakenClientManager), owning the HTTP session, the rate limiter and the
    nonce generator.

    Attributes:
        config: Frozen KrakenConfig
        rate_limiter: TokenBucket gating every attempt
        nonces: NonceGenerator used for private calls
        session: aiohttp ClientSession for HTTP requests
        logger: Logger instance for debugging

    Example:
        >>> async with KrakenAPIClient() as client:
        ...     status = await client.public_request("/0/public/SystemStatus")
        ...     print(status["status"])

    Notes:
        - Public calls are GET with an unescaped query string
        - Private calls are signed POSTs, re-signed with a fresh nonce per attempt
        - Only RateLimitExceeded, Network and Timeout errors are retried
    """

    def __init__(
        self,
        config: Optional[KrakenConfig] = None,
        rate_limiter: Optional[TokenBucket] = None,
        nonces: Optional[NonceGenerator] = None
    ):
        """
        Initialize the Kraken API client.

        Args:
            config: Client configuration (defaults to the global settings)
            rate_limiter: Shared token bucket (built from config if omitted)
            nonces: Nonce source for private calls
        """
        self.config = config or KrakenConfig.from_settings()
        self.rate_limiter = rate_limiter or TokenBucket(
            capacity=self.config.rate_limit_capacity,
            rate=self.config.rate_limit_refill_rate
        )
        self.nonces = nonces or NonceGenerator()
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        """
        Enter async context - creates HTTP session.

        Returns:
            Self for use in async with statement
        """
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context - closes HTTP session."""
        await self.close()

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={"User-Agent": self.config.user_agent}
            )
            self.logger.debug("KrakenAPIClient session created")

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug("KrakenAPIClient session closed")
        self.session = None

    # ============================================
    # Public / Private Entry Points
    # ============================================

    async def public_request(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        result_type: Any = Any
    ) -> Any:
        """
        Call a public endpoint (GET, no credentials).

        Args:
            endpoint: API path, e.g. "/0/public/Ticker"
            params: Optional query parameters
            result_type: Type the envelope result is validated against

        Returns:
            The decoded result

        Raises:
            KrakenError: Classified failure (after retries, if retryable)
        """
        return await self.request(PublicAuth(), endpoint, params, result_type)

    async def private_request(
        self,
        endpoint: str,
        credentials: Credentials,
        params: Optional[Mapping[str, Any]] = None,
        result_type: Any = Any
    ) -> Any:
        """
        Call a private endpoint (signed POST).

        Args:
            endpoint: API path, e.g. "/0/private/Balance"
            credentials: API key pair used to sign the request
            params: Optional form parameters (nonce is added automatically)
            result_type: Type the envelope result is validated against

        Returns:
            The decoded result

        Raises:
            KrakenError: Classified failure (after retries, if retryable)
        """
        return await self.request(PrivateAuth(credentials, self.nonces), endpoint, params, result_type)

    # ============================================
    # Retry Loop
    # ============================================

    async def request(
        self,
        auth: Auth,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        result_type: Any = Any
    ) -> Any:
        """
        Send a request, retrying transient failures with linear backoff.

        Retry policy:
            - Only errors with ``retryable`` set are retried
            - At most config.max_retries retries after the first attempt
            - Delay before retry n is config.retry_delay * n
            - Anything else is raised unchanged
        """
        # Retry loop (first attempt + up to max_retries)
        retries = 0
        while True:
            try:
                return await self._send_once(auth, endpoint, params, result_type)
            except KrakenError as e:
                # Structural errors and exhausted retries go straight to the caller
                if not e.retryable or retries >= self.config.max_retries:
                    self.logger.error(f"Request to {endpoint} failed after {retries + 1} attempt(s): {e}")
                    raise
                # Transient error (rate limit, network, timeout) - linear backoff
                retries += 1
                delay = self.config.retry_delay * retries
                log_retry(endpoint, retries, self.config.max_retries, delay, e)
                await asyncio.sleep(delay)

    # ============================================
    # Single Attempt
    # ============================================

    async def _send_once(
        self,
        auth: Auth,
        endpoint: str,
        params: Optional[Mapping[str, Any]],
        result_type: Any
    ) -> Any:
        """
        One attempt: limiter admission, prepare (sign), send, decode.
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        # One token per attempt, retries included
        await self.rate_limiter.acquire()

        # Private calls get a fresh nonce and signature here
        prepared = auth.prepare(self.config.base_url, endpoint, params)
        log_api_request(prepared.method, endpoint, None if auth.private else params)
        self.logger.info(f"Making {prepared.method} request to {endpoint}")

        started = time.monotonic()
        try:
            async with self.session.request(
                prepared.method,
                prepared.url,
                headers=prepared.headers,
                data=prepared.data,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            ) as resp:
                log_api_response(endpoint, resp.status, time.monotonic() - started)

                # Non-2xx: the body is not an envelope, report the status line
                if not 200 <= resp.status < 300:
                    reason = f" {resp.reason}" if resp.reason else ""
                    raise InvalidResponseError(f"{resp.status}{reason}")

                # Raw bytes; decoding happens in _decode so it is classified too
                body = await resp.read()

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise classify_transport_error(e, f"{self.config.base_url}{endpoint}") from e

        return self._decode(endpoint, body, result_type)

    def _decode(self, endpoint: str, body: bytes, result_type: Any) -> Any:
        """
        Normalize a 2xx body into a typed result or a classified error.

        ``result_type=bytes`` asks for a binary download (export archives):
        a body that is not a JSON object is returned unchanged, while a JSON
        error envelope is still classified.
        """
        if result_type is bytes and not body.lstrip().startswith(b"{"):
            return body

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(f"Response from {endpoint} is not valid UTF-8: {e}", cause=e) from e

        try:
            payload = json.loads(text)
        except ValueError as e:
            raise SerializationError(f"Invalid JSON in response from {endpoint}: {e}", cause=e) from e

        try:
            envelope = KrakenResponse.model_validate(payload)
        except PydanticValidationError as e:
            raise DeserializationError(f"Unexpected response envelope from {endpoint}: {e}", cause=e) from e

        if envelope.error:
            self.logger.error(f"Kraken API error on {endpoint}: {envelope.error}")
            raise classify_remote_errors(envelope.error)

        if envelope.payload is None:
            raise UnknownError("No data received from API")

        return decode_result(envelope.payload, result_type)
