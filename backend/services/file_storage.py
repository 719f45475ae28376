"""
Disk-backed storage for attachment files.

Files are written under a generated name (uuid4 hex plus a whitelisted
extension) so nothing attacker-controlled ever reaches the filesystem path.
"""

import os
import re
import uuid
from pathlib import Path
from typing import Optional

from loguru import logger

ALLOWED_EXTENSIONS = {
    ".pdf",
    ".doc",
    ".docx",
    ".txt",
    ".rtf",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".xls",
    ".xlsx",
    ".csv",
    ".zip",
    ".rar",
    ".7z",
}
FALLBACK_EXTENSION = ".bin"

STORAGE_KEY_PATTERN = re.compile(r"[0-9a-f]{32}\.[a-z0-9]{1,5}")


def safe_extension(filename: Optional[str]) -> str:
    """Lower-cased extension of filename if whitelisted, else '.bin'."""
    ext = os.path.splitext(filename or "")[1].lower()
    return ext if ext in ALLOWED_EXTENSIONS else FALLBACK_EXTENSION


class LocalFileStorage:
    """Stores files in a single flat directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, data: bytes, filename: Optional[str]) -> str:
        """
        Write bytes under a fresh generated name.

        Args:
            data: File content
            filename: Client-supplied name, used only for its extension

        Returns:
            Storage key of the written file

        Raises:
            OSError: If the file cannot be written.
        """
        self._ensure_root()
        storage_key = f"{uuid.uuid4().hex}{safe_extension(filename)}"
        with open(self.root / storage_key, "wb") as f:
            f.write(data)
        return storage_key

    def open(self, storage_key: str) -> Optional[Path]:
        """
        Resolve a storage key to an existing file path.

        Returns:
            Path to the file, or None if the key is malformed or the file is gone
        """
        if not STORAGE_KEY_PATTERN.fullmatch(storage_key or ""):
            return None
        path = self.root / storage_key
        return path if path.is_file() else None

    def delete(self, storage_key: str) -> None:
        """Remove a stored file; missing files are ignored."""
        path = self.open(storage_key)
        if path is None:
            return
        try:
            path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove stored file {storage_key}: {e}")
