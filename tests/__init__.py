"""
Test Suite

Contains unit tests for the Kraken client and gateway.

Structure:
- tests/unit/: Tests for individual components (limiter, signing, transport,
  error classification, services, routes). HTTP is faked; no test needs
  network access or real credentials.

Uses pytest with pytest-asyncio for testing async functionality.
"""
