"""State persistence backends.

Key/value backends holding the JSON documents the inventory stores persist:
- InMemoryStateBackend: For development/testing
- FileStateBackend: For single-server deployments (one JSON file per key)

Stores load the whole document on every read and save the whole document
after every mutation. A backend only guarantees that an individual load or
save is not interleaved with another call on the same backend instance; a
store's load -> mutate -> save cycle is not atomic across processes.
"""

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.observability.logging import get_logger

logger = get_logger(__name__)


class StateBackend(ABC):
    """Abstract base class for state persistence."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the decoded document stored under key, or None if absent."""
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Replace the document stored under key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove the document stored under key. Returns True if it existed."""
        pass


class InMemoryStateBackend(StateBackend):
    """In-memory state storage for development/testing.

    Documents are kept JSON-encoded, so callers never share references
    with stored state and non-serializable values fail on save like they
    would with a real backend.

    WARNING: State is lost on restart. Use only for development.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Optional[Any]:
        with self._lock:
            raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        raw = json.dumps(value)
        with self._lock:
            self._data[key] = raw

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def raw(self, key: str) -> Optional[str]:
        """Return the encoded document exactly as stored."""
        with self._lock:
            return self._data.get(key)

    def put_raw(self, key: str, raw: str) -> None:
        """Store an already-encoded (possibly malformed) document."""
        with self._lock:
            self._data[key] = raw


class FileStateBackend(StateBackend):
    """File-based state storage.

    Directory structure:
        {base_path}/
            inv_by_storage.json
            custom_storages.json
    """

    def __init__(self, base_path: Union[str, Path] = ".state"):
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _path(self, key: str) -> Path:
        safe_key = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)
        return self._base_path / f"{safe_key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)

        with self._lock:
            if not path.exists():
                return None
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning(
                    f"Unreadable state file {path.name}, treating as empty",
                    extra_fields={"key": key, "error": str(e)},
                )
                return None

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")

        with self._lock:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            tmp_path.replace(path)

    def delete(self, key: str) -> bool:
        path = self._path(key)

        with self._lock:
            if path.exists():
                path.unlink()
                return True
            return False
