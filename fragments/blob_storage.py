"""Manages fragment data files on disk: one file per (owner, fragment) pair."""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Optional


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


class BlobStorage:
    def __init__(self, base_dir: str) -> None:
        self._base = Path(base_dir).resolve()

    def get_blob_path(self, owner_id: str, fragment_id: str) -> Path:
        """
        Get file path for a fragment's data.

        Owner and fragment ids are opaque strings, so both are hashed
        before they become path components.

        Args:
            owner_id: Owner identifier
            fragment_id: Fragment identifier

        Returns:
            Path object for the data file
        """
        return self._base / _digest(owner_id) / f"{_digest(fragment_id)}.frag"

    def write_blob(self, owner_id: str, fragment_id: str, data: bytes) -> str:
        """
        Write fragment data to disk, replacing any previous version.

        Raises:
            OSError: If write operation fails
        """
        filepath = self.get_blob_path(owner_id, fragment_id)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, filepath)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return str(filepath)

    def read_blob(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        """
        Read fragment data from disk.

        Returns:
            Raw data, or None if no blob exists
        """
        filepath = self.get_blob_path(owner_id, fragment_id)
        try:
            return filepath.read_bytes()
        except FileNotFoundError:
            return None

    def delete_blob(self, owner_id: str, fragment_id: str) -> bool:
        """
        Delete fragment data from disk.

        Returns:
            True if file was deleted, False if it didn't exist
        """
        filepath = self.get_blob_path(owner_id, fragment_id)
        if filepath.exists():
            filepath.unlink()
            return True
        return False
