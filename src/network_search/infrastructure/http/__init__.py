"""
HTTP Infrastructure

Shared async HTTP client base for remote content providers.
"""

from .base_client import DEFAULT_USER_AGENT, BaseAPIClient

__all__ = ["BaseAPIClient", "DEFAULT_USER_AGENT"]
