"""Base store classes with common file operations."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from sqli.shared.core.errors import StorageError

# Shared config directory - can be overridden via environment variable for testing
CONFIG_DIR = Path(os.environ.get("SQLI_CONFIG_DIR", Path.home() / ".sqli"))


class FileStore:
    """Base class for file-backed stores.

    Writes go through a temp file in the same directory and an atomic rename,
    with owner-only permissions on both the file and its directory.
    """

    suffix = ".txt"

    def __init__(self, file_path: Path):
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        """Get the store's file path."""
        return self._file_path

    def exists(self) -> bool:
        """Check if the store file exists."""
        return self._file_path.exists()

    def _ensure_dir(self) -> None:
        dir_path = self._file_path.parent
        dir_path.mkdir(parents=True, exist_ok=True)
        try:
            os.chmod(dir_path, 0o700)
        except OSError:
            pass  # Best effort on platforms that don't support chmod

    def _read_text(self) -> str | None:
        """Read the file, returning None if it does not exist."""
        if not self._file_path.exists():
            return None
        try:
            return self._file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {self._file_path}: {e}") from e

    def _write_text(self, content: str) -> None:
        """Write content atomically with secure permissions."""
        try:
            self._ensure_dir()
            fd, tmp_path = tempfile.mkstemp(
                dir=self._file_path.parent,
                prefix=".tmp_",
                suffix=self.suffix,
            )
        except OSError as e:
            raise StorageError(f"Failed to write {self._file_path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._file_path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to write {self._file_path}: {e}") from e


class JSONFileStore(FileStore):
    """Base class for JSON file-backed stores."""

    suffix = ".json"

    def _read_json(self) -> Any:
        """Read and parse JSON from file.

        Returns:
            Parsed JSON data, or None if file doesn't exist or is invalid.
        """
        text = self._read_text()
        if text is None:
            return None
        try:
            return json.loads(text)
        except (json.JSONDecodeError, TypeError):
            return None

    def _write_json(self, data: Any) -> None:
        """Write data as JSON to file atomically."""
        self._write_text(json.dumps(data, indent=2))
