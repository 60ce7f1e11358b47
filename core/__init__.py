"""
Core Package

Contains the exchange-agnostic plumbing the Kraken client is built on:
- config: Settings loaded from the environment and the frozen KrakenConfig
- logging: Centralized logger setup
- errors: Closed error taxonomy with retryability
- rate_limit: Token bucket admission control
- client_manager: Shared, lock-guarded client handed to the routing layer
- schemas: Pydantic models for the remote envelope and response payloads
"""

__version__ = "0.1.0"
