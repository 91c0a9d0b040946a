"""
Document Store Module

Local key-value JSON document store backing the record and QR stores.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the local store cannot be used."""
    pass


class StoreReadError(StoreError):
    """Raised when the store file cannot be read or decoded."""
    pass


class StoreWriteError(StoreError):
    """Raised when a write to the store is rejected."""
    pass


class JsonDocumentStore:
    """
    Key-value store persisted as a single JSON object on disk.

    Every read goes back to the file so writes made by another process
    are observed. Writes made through this instance notify subscribers;
    out-of-band writes only show up through revision().
    """

    def __init__(self, filepath: str):
        self.path = Path(filepath)
        self._subscribers: List[Callable[[str], None]] = []
        self._local_writes = 0

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreReadError(f"Store file is not valid JSON: {self.path}. Error: {e}")
        except OSError as e:
            raise StoreReadError(f"Cannot read store file: {self.path}. Error: {e}")

        if not isinstance(data, dict):
            raise StoreReadError(f"Store file must hold a JSON object: {self.path}")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Read one key; default if absent."""
        return self._read_all().get(key, default)

    def keys(self) -> List[str]:
        return list(self._read_all().keys())

    def set(self, key: str, value: Any) -> None:
        """
        Write one key and persist the whole document.

        Raises:
            StoreWriteError: If the value cannot be serialized or written
        """
        try:
            data = self._read_all()
        except StoreReadError as e:
            raise StoreWriteError(f"Refusing to overwrite unreadable store: {e}")

        data[key] = value

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreWriteError(f"Cannot write key '{key}' to {self.path}: {e}")

        self._local_writes += 1
        logger.debug(f"Store key '{key}' written to {self.path}")
        self._notify(key)

    def revision(self) -> Tuple[int, int]:
        """
        Token that changes whenever the document changes on disk.

        Returns:
            Tuple of (file mtime in ns, file size); (0, 0) if missing
        """
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return (0, 0)
        return (stat.st_mtime_ns, stat.st_size)

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """
        Register a change callback for writes made through this store.

        Args:
            callback: Called with the written key

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, key: str) -> None:
        for callback in list(self._subscribers):
            callback(key)
