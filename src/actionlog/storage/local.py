"""
Module: local.py
Description: Durable local key/value storage for the offline queue.

Stores string values under string keys. Every write replaces the whole
value at once, so readers never observe a partially written snapshot.

Key Components:
- StorageError: raised for any read/write failure
- FileStorage: one file per key in a directory, written via temp file + rename
- MemoryStorage: process-local storage for tests and ephemeral sessions

Dependencies: os, tempfile, pathlib, typing
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional

from actionlog.utils.logger import get_logger

logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r'^[a-zA-Z0-9_.-]+$')


class StorageError(Exception):
    """Local storage is unavailable, full, or unreadable."""


def _validate_key(key: str) -> str:
    if not key or not isinstance(key, str):
        raise ValueError("key must be a non-empty string")
    if not _KEY_PATTERN.match(key):
        raise ValueError(
            "key must contain only letters, numbers, dots, underscores, and hyphens"
        )
    return key


class MemoryStorage:
    """
    Dictionary-backed storage.

    Two queue instances sharing one MemoryStorage behave like two page
    loads sharing a browser's local storage.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(_validate_key(key))

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError("value must be a string")
        self._items[_validate_key(key)] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(_validate_key(key), None)


class FileStorage:
    """
    File-backed storage rooted at a directory.

    Attributes:
        directory: Directory holding one <key>.json file per key

    Example:
        >>> storage = FileStorage(".actionlog")
        >>> storage.set_item("cyb_log_queue", "[]")
        >>> storage.get_item("cyb_log_queue")
        '[]'
    """

    def __init__(self, directory: str):
        """
        Initialize file storage.

        Args:
            directory: Directory for stored values (created on first write)

        Raises:
            ValueError: If directory is empty
        """
        if not directory or not isinstance(directory, (str, os.PathLike)):
            raise ValueError("directory must be a non-empty path")

        self.directory = Path(directory)

        logger.debug("File storage initialized", directory=str(self.directory))

    def _path(self, key: str) -> Path:
        return self.directory / f"{_validate_key(key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under key.

        Returns:
            Stored string, or None when nothing has been stored

        Raises:
            StorageError: If the file exists but cannot be read
        """
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        """
        Replace the value stored under key.

        The value is written to a temporary file in the same directory and
        renamed over the target.

        Raises:
            StorageError: If the directory or file cannot be written
        """
        if not isinstance(value, str):
            raise StorageError("value must be a string")

        path = self._path(key)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.stem}.", suffix=".tmp", dir=str(self.directory)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}") from e
