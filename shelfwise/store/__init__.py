"""
Shelfwise store layer.

StoreClient is the interface every component is constructed with;
InMemoryStore is the bundled implementation used by the CLI and tests.
"""

from .client import StoreClient
from .memory import InMemoryStore

__all__ = ['StoreClient', 'InMemoryStore']
