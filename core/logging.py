"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire application.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("Application started")
    log = get_logger(__name__)
    log.debug("Rate limit reached, waiting")

Log Levels (from most to least verbose):
    DEBUG    - Limiter waits, retry scheduling, request/response details
    INFO     - Requests sent, client lifecycle
    WARNING  - Retryable failures
    ERROR    - Remote API errors and failures returned to callers
    CRITICAL - Failures that stop the service

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.

Note:
    API secrets, signatures and nonce-bearing request bodies are never logged.
"""

import logging
import sys
from typing import Optional


LOGGER_NAME = "krakengw"


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] krakengw: Application started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level if hasattr(settings, 'log_level') else "INFO"
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger instance for the specified name

    Example:
        # In exchanges/kraken/api_client.py:
        logger = get_logger(__name__)  # "krakengw.exchanges.kraken.api_client"
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(method: str, endpoint: str, params: dict = None) -> None:
    """
    Log an outbound API request with consistent formatting.

    Only pass params for public calls; private bodies carry the nonce and
    are signed, so callers log the endpoint alone.

    Example:
        >>> log_api_request("GET", "/0/public/Ticker", {"pair": "XBTUSD"})
        [DEBUG] API Request: GET /0/public/Ticker | Params: {'pair': 'XBTUSD'}
    """
    if params:
        logger.debug(f"API Request: {method} {endpoint} | Params: {params}")
    else:
        logger.debug(f"API Request: {method} {endpoint}")


def log_api_response(endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Example:
        >>> log_api_response("/0/public/Time", 200, 0.342)
        [DEBUG] API Response: /0/public/Time | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {endpoint} | Status: {status}{time_str}")


def log_retry(endpoint: str, retry: int, max_retries: int, delay: float, error: Exception) -> None:
    """
    Log a scheduled retry of a failed request.

    Example:
        >>> log_retry("/0/public/Time", 1, 3, 1.0, err)
        [WARNING] Retry 1/3 for /0/public/Time in 1.00s after: Network error: ...
    """
    logger.warning(f"Retry {retry}/{max_retries} for {endpoint} in {delay:.2f}s after: {error}")


logger.debug("Logging system initialized")
