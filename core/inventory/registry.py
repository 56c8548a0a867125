"""Local storage registry.

User-defined storage locations, kept apart from the read-only storages the
ERP reports. Persisted under the "custom_storages" key as:

    { "seq": <int>, "list": [ { "id": "L1", "name": "Main Depot" }, ... ] }

Ids are minted from seq ("L" + (seq + 1)); seq only ever grows, so an id is
never handed out twice even after its storage is removed.
"""

from typing import Any, Dict, List, Optional

from core.inventory.errors import NotFoundError, ValidationError
from core.inventory.models import LocalStorage, normalize_id
from core.observability.logging import get_logger
from core.storage.backends import StateBackend

logger = get_logger(__name__)

REGISTRY_KEY = "custom_storages"
LOCAL_ID_PREFIX = "L"


def _empty_state() -> Dict[str, Any]:
    return {"seq": 0, "list": []}


def _local_number(storage_id: str) -> int:
    """n for an "L<n>" id, 0 for anything else."""
    suffix = storage_id[len(LOCAL_ID_PREFIX):]
    if storage_id.startswith(LOCAL_ID_PREFIX) and suffix.isdigit():
        return int(suffix)
    return 0


def _clean_name(name: Any, message: str) -> str:
    trimmed = str(name if name is not None else "").strip()
    if not trimmed:
        raise ValidationError(message)
    return trimmed


class StorageRegistry:
    """CRUD over local storage locations."""

    def __init__(self, backend: StateBackend, key: str = REGISTRY_KEY):
        self._backend = backend
        self._key = key

    def _load(self) -> Dict[str, Any]:
        raw = self._backend.load(self._key)
        if raw is None:
            return _empty_state()
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed storage registry state")
            return _empty_state()

        try:
            seq = max(int(raw.get("seq") or 0), 0)
        except (TypeError, ValueError, OverflowError):
            seq = 0
        records = raw.get("list")
        if not isinstance(records, list):
            records = []

        cleaned = [
            {"id": str(r["id"]), "name": str(r.get("name", ""))}
            for r in records
            if isinstance(r, dict) and r.get("id") is not None
        ]
        # never mint below an id already in the list
        seq = max([seq] + [_local_number(r["id"]) for r in cleaned])
        return {"seq": seq, "list": cleaned}

    def _save(self, state: Dict[str, Any]) -> None:
        self._backend.save(self._key, state)

    def list(self) -> List[LocalStorage]:
        """Local storages in creation order."""
        return [LocalStorage(**r) for r in self._load()["list"]]

    def get(self, storage_id: Any) -> Optional[LocalStorage]:
        key = normalize_id(storage_id)
        for r in self._load()["list"]:
            if r["id"] == key:
                return LocalStorage(**r)
        return None

    def create(self, name: Any) -> LocalStorage:
        """Add a storage under a freshly minted id.

        Raises:
            ValidationError: name is empty after trimming
        """
        trimmed = _clean_name(name, "Storage name is required")
        state = self._load()
        state["seq"] += 1
        record = {"id": f"{LOCAL_ID_PREFIX}{state['seq']}", "name": trimmed}
        state["list"].append(record)
        self._save(state)

        logger.info("Created local storage", extra_fields=record)
        return LocalStorage(**record)

    def rename(self, storage_id: Any, new_name: Any) -> LocalStorage:
        """Rename in place, keeping id and position.

        Raises:
            ValidationError: new_name is empty after trimming
            NotFoundError: no local storage has this id
        """
        trimmed = _clean_name(new_name, "New storage name is required")
        key = normalize_id(storage_id)
        state = self._load()
        for r in state["list"]:
            if r["id"] == key:
                r["name"] = trimmed
                self._save(state)
                logger.info("Renamed local storage", extra_fields=r)
                return LocalStorage(**r)
        raise NotFoundError("Local storage not found", storage_id=key)

    def remove(self, storage_id: Any) -> None:
        """Delete a local storage. Its ledger allocations are left alone.

        Raises:
            NotFoundError: no local storage has this id
        """
        key = normalize_id(storage_id)
        state = self._load()
        remaining = [r for r in state["list"] if r["id"] != key]
        if len(remaining) == len(state["list"]):
            raise NotFoundError("Local storage not found", storage_id=key)
        state["list"] = remaining
        self._save(state)
        logger.info("Removed local storage", extra_fields={"id": key})
