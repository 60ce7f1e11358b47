"""
FastAPI Application Package

Local HTTP routes forwarding to the shared Kraken client.
"""
