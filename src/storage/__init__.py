"""
Post-history storage.

DedupStore remembers which items were delivered so later cycles skip them;
records expire after the retention window (30 days by default).
"""

from src.storage.backends import DedupBackend, InMemoryDedupBackend, RedisDedupBackend
from src.storage.dedup_store import DEFAULT_RETENTION, DedupStore

__all__ = [
    "DEFAULT_RETENTION",
    "DedupBackend",
    "DedupStore",
    "InMemoryDedupBackend",
    "RedisDedupBackend",
]
