"""
Storage backend interface.

Generated projects are persisted as text files addressed by POSIX-style keys
(``demo_app/lib/main.dart``). Backends only implement the per-key operations;
whole-project writes are built on top of them.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path


def join_key(prefix: str, path: str) -> str:
    """Join a key prefix and a project-relative path."""
    prefix = prefix.strip("/")
    path = path.lstrip("/")
    return f"{prefix}/{path}" if prefix else path


class StorageBackend(ABC):
    """Abstract storage backend for generated project files."""

    @abstractmethod
    async def store_text(self, key: str, content: str) -> str:
        """Store one file and return the key it was stored under."""
        ...

    @abstractmethod
    async def load_text(self, key: str) -> str:
        """Load one file.

        Raises:
            FileNotFoundError: If the key does not exist.
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key; returns False if it did not exist."""
        ...

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> list[str]:
        """List all keys under a prefix, sorted."""
        ...

    @abstractmethod
    def get_local_path(self, key: str) -> Path | None:
        """Filesystem path of a stored key, or None for remote or missing keys."""
        ...

    async def store_files(self, files: Mapping[str, str], prefix: str = "") -> list[str]:
        """Store a project file map below a prefix.

        Args:
            files: Project-relative path to file content.
            prefix: Key prefix, typically the app directory name.

        Returns:
            Keys written, in the file map's order.
        """
        return [await self.store_text(join_key(prefix, path), content) for path, content in files.items()]

    @staticmethod
    def compute_hash(content: str) -> str:
        """SHA-256 hex digest of UTF-8 text."""
        return hashlib.sha256(content.encode("utf-8")).hexdigest()
