"""
HTTP API for network search.

Provides the results and suggestion endpoints plus cache and content-event
hooks for the local store.
"""

from .server import create_api_server, main, run_api_server

__all__ = ["create_api_server", "run_api_server", "main"]
