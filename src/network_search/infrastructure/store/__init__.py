"""
Local Content Store

Contract for the local multi-tenant store plus an in-memory implementation.
"""

from .base import LocalContentStore
from .memory import InMemoryContentStore, tokenize

__all__ = ["LocalContentStore", "InMemoryContentStore", "tokenize"]
