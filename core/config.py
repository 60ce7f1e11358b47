"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates all settings on startup
- Provides an immutable KrakenConfig snapshot for the API client
- Keeps API credentials optional at startup (public endpoints work without them)

Usage:
    from core.config import settings, KrakenConfig

    print(settings.kraken_api_url)
    config = KrakenConfig.from_settings(settings)
"""

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from core import __version__


DEFAULT_USER_AGENT = f"kraken_client/{__version__}"


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.
    Matching is case-insensitive, so KRAKEN_API_URL fills kraken_api_url.

    Attributes:
        kraken_api_url: Base URL for the Kraken REST API
        kraken_user_agent: User-Agent header sent with every request
        kraken_timeout: Per-request timeout in seconds
        kraken_max_retries: Retries after the first attempt for transient failures
        kraken_retry_delay_ms: Base retry delay, multiplied by the retry number
        kraken_rate_limit_delay_ms: Rate limit delay carried from the env surface
        kraken_rate_limit_capacity: Token bucket size
        kraken_rate_limit_refill_rate: Token bucket refill rate (tokens/second)
        kraken_api_key: API key (only needed for private endpoints)
        kraken_api_secret: Base64 API secret (only needed for private endpoints)
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        environment: Current environment (development, production)
        log_level: Logging level
    """

    # ============================================
    # Kraken API Configuration
    # ============================================

    kraken_api_url: str = Field(
        default="https://api.kraken.com",
        description="Kraken REST API base URL"
    )

    kraken_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header for outbound requests"
    )

    kraken_timeout: int = Field(
        default=30,
        description="HTTP request timeout in seconds (per attempt)"
    )

    kraken_max_retries: int = Field(
        default=3,
        description="Maximum number of retries for transient failures"
    )

    kraken_retry_delay_ms: int = Field(
        default=1000,
        description="Base retry delay in milliseconds (linear backoff)"
    )

    kraken_rate_limit_delay_ms: int = Field(
        default=5000,
        description="Rate limit delay in milliseconds"
    )

    # ============================================
    # Rate Limiting
    # ============================================

    kraken_rate_limit_capacity: int = Field(
        default=15,
        description="Token bucket capacity (burst size)"
    )

    kraken_rate_limit_refill_rate: float = Field(
        default=0.25,
        description="Token bucket refill rate in tokens per second (15/minute)"
    )

    # ============================================
    # Credentials (optional until the first private call)
    # ============================================

    kraken_api_key: str = Field(
        default="",
        description="Kraken API key (not needed for public endpoints)"
    )

    kraken_api_secret: SecretStr = Field(
        default=SecretStr(""),
        description="Kraken API secret, base64 encoded (not needed for public endpoints)"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="127.0.0.1",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8080,
        description="FastAPI server port"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def has_credentials(self) -> bool:
        """True when both the API key and secret are configured."""
        return bool(self.kraken_api_key) and bool(self.kraken_api_secret.get_secret_value())


class KrakenConfig(BaseModel):
    """
    Immutable client configuration.

    Built once at startup (usually from Settings) and owned by the
    KrakenAPIClient for the life of the process.

    Example:
        >>> config = KrakenConfig(max_retries=5)
        >>> config.retry_delay
        1.0
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.kraken.com"
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30
    max_retries: int = 3
    retry_delay_ms: int = 1000
    rate_limit_delay_ms: int = 5000
    rate_limit_capacity: int = 15
    rate_limit_refill_rate: float = 0.25

    @classmethod
    def from_settings(cls, source: Settings = None) -> "KrakenConfig":
        """
        Snapshot the Kraken-related settings into a frozen config.

        Args:
            source: Settings instance (defaults to the global settings)
        """
        source = source or settings
        return cls(
            base_url=source.kraken_api_url.rstrip("/"),
            user_agent=source.kraken_user_agent,
            timeout=source.kraken_timeout,
            max_retries=source.kraken_max_retries,
            retry_delay_ms=source.kraken_retry_delay_ms,
            rate_limit_delay_ms=source.kraken_rate_limit_delay_ms,
            rate_limit_capacity=source.kraken_rate_limit_capacity,
            rate_limit_refill_rate=source.kraken_rate_limit_refill_rate,
        )

    @property
    def retry_delay(self) -> float:
        """Base retry delay in seconds."""
        return self.retry_delay_ms / 1000.0


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(source: Settings = None) -> None:
    """
    Validate critical configuration settings on application startup.

    Missing credentials are NOT an error here: public endpoints must keep
    working without them, and private calls fail with AuthError on first use.

    Raises:
        ValueError: If a setting is out of range
    """
    # logging.py imports config.py, so import lazily
    from core.logging import logger

    source = source or settings

    if not source.kraken_api_url.startswith(("http://", "https://")):
        raise ValueError(f"Invalid KRAKEN_API_URL: '{source.kraken_api_url}'. Must start with http(s)://")

    if source.kraken_timeout <= 0:
        raise ValueError(f"Invalid KRAKEN_TIMEOUT: {source.kraken_timeout}. Must be positive")

    if source.kraken_max_retries < 0:
        raise ValueError(f"Invalid KRAKEN_MAX_RETRIES: {source.kraken_max_retries}. Must be >= 0")

    if source.kraken_retry_delay_ms < 0:
        raise ValueError(f"Invalid KRAKEN_RETRY_DELAY_MS: {source.kraken_retry_delay_ms}. Must be >= 0")

    if source.kraken_rate_limit_capacity < 1:
        raise ValueError(
            f"Invalid KRAKEN_RATE_LIMIT_CAPACITY: {source.kraken_rate_limit_capacity}. Must be >= 1"
        )

    if source.kraken_rate_limit_refill_rate <= 0:
        raise ValueError(
            f"Invalid KRAKEN_RATE_LIMIT_REFILL_RATE: {source.kraken_rate_limit_refill_rate}. Must be positive"
        )

    if not (1 <= source.app_port <= 65535):
        raise ValueError(f"Invalid port number: {source.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if source.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{source.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Kraken API: {source.kraken_api_url}")
    logger.info(
        f"Rate limit: {source.kraken_rate_limit_capacity} tokens @ "
        f"{source.kraken_rate_limit_refill_rate}/s"
    )
    logger.info(f"Retries: {source.kraken_max_retries} (base delay {source.kraken_retry_delay_ms}ms)")
    logger.info(f"Private endpoints: {'enabled' if source.has_credentials else 'credentials not set'}")
    logger.info(f"Server: {source.app_host}:{source.app_port}")
