"""Storage abstraction for Mockforge."""

from .interface import StorageBackend, join_key
from .local import LocalStorageBackend

__all__ = ["StorageBackend", "LocalStorageBackend", "join_key"]
