"""
Exchange Connectors Package

Each exchange has its own subfolder with:
- api_client.py: REST API transport
- auth.py / signing.py: request authentication

Currently implemented: Kraken (exchanges/kraken).
"""
