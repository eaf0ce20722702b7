"""
Shelfwise - resolution and batch classification for hierarchical document stores.
"""

__version__ = "0.1.0"
