"""
Filesystem backend for generated projects.

Keys are project paths taken from generative replies, so they are cleaned and
confined below the base directory before touching the disk.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import aiofiles
import aiofiles.os

from ..core.logging import get_logger
from .interface import StorageBackend

logger = get_logger(__name__)


class LocalStorageBackend(StorageBackend):
    """Writes project files below ``base_path``."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path).resolve()

    def _resolve(self, key: str) -> Path:
        """Map a key to a path inside the base directory.

        Backslashes become separators; drive colons, leading slashes and `..`
        segments are removed while dots inside names are kept. A key that still
        resolves outside the base directory (through a symlink) is flattened
        into a single file name.
        """
        parts = PurePosixPath(key.replace("\\", "/").replace(":", "")).parts
        cleaned = "/".join(part for part in parts if part.strip("/") not in ("", ".", ".."))
        target = (self.base_path / cleaned).resolve()

        if not target.is_relative_to(self.base_path):
            logger.warning("Storage key escapes base path, flattening", key=key)
            target = self.base_path / cleaned.replace("/", "_")
        return target

    async def store_text(self, key: str, content: str) -> str:
        target = self._resolve(key)
        await aiofiles.os.makedirs(target.parent, exist_ok=True)

        async with aiofiles.open(target, "w", encoding="utf-8") as handle:
            await handle.write(content)

        logger.debug("Stored file", key=key, chars=len(content), sha256=self.compute_hash(content)[:12])
        return key

    async def load_text(self, key: str) -> str:
        target = self._resolve(key)
        if not target.is_file():
            raise FileNotFoundError(f"No stored file for key: {key}")

        async with aiofiles.open(target, encoding="utf-8") as handle:
            return await handle.read()

    async def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    async def delete(self, key: str) -> bool:
        target = self._resolve(key)
        if not target.is_file():
            return False
        await aiofiles.os.remove(target)
        logger.debug("Deleted file", key=key)
        return True

    async def list_keys(self, prefix: str = "") -> list[str]:
        """Stored keys under a directory prefix, sorted, in POSIX form."""
        root = self._resolve(prefix) if prefix else self.base_path
        if not root.is_dir():
            return []
        return sorted(path.relative_to(self.base_path).as_posix() for path in root.rglob("*") if path.is_file())

    def get_local_path(self, key: str) -> Path | None:
        target = self._resolve(key)
        return target if target.exists() else None
