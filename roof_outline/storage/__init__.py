"""Persistence for sites, roof structures, summaries and drawings."""

from roof_outline.storage.base import StoreError, StructureStore
from roof_outline.storage.blob import BlobStructureStore
from roof_outline.storage.memory import InMemoryStructureStore

__all__ = [
    "BlobStructureStore",
    "InMemoryStructureStore",
    "StoreError",
    "StructureStore",
]
