"""Allocation ledger: per-item, per-storage quantities.

Persisted under the "inv_by_storage" key as:

    { "<item_id>": { "<storage_id>": <quantity > 0> } }

Zero quantities are never stored: setting a quantity to 0 removes the key,
and an item left with no storages is removed entirely. Every operation loads
the full mapping from the backend, mutates it and saves it back.

The ledger is permissive: it never raises for bad numeric input. Negative,
non-finite or non-numeric quantities are clamped to 0.
"""

from typing import Any, Dict, Iterable, List, Mapping

from core.inventory.models import (
    Quantity,
    StorageEntry,
    clamp_quantity,
    normalize_id,
    to_number,
)
from core.observability.logging import get_logger
from core.storage.backends import StateBackend

logger = get_logger(__name__)

LEDGER_KEY = "inv_by_storage"

PerStorage = Dict[str, Quantity]
InventoryByStorage = Dict[str, PerStorage]


class AllocationLedger:
    """Item quantities allocated to storage locations.

    Usage:
        ledger = AllocationLedger(FileStateBackend(".state"))
        ledger.set("1001", 1, 10)
        ledger.transfer("1001", 1, "L2", 4)
        ledger.total_for_item(1001)  # 10
    """

    def __init__(self, backend: StateBackend, key: str = LEDGER_KEY):
        self._backend = backend
        self._key = key

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load(self) -> InventoryByStorage:
        raw = self._backend.load(self._key)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning(
                "Ignoring malformed ledger state",
                extra_fields={"type": type(raw).__name__},
            )
            return {}

        state: InventoryByStorage = {}
        for item_key, per in raw.items():
            if not isinstance(per, dict):
                continue
            cleaned = {}
            for storage_key, qty in per.items():
                value = clamp_quantity(qty)
                if value > 0:
                    cleaned[str(storage_key)] = value
            if cleaned:
                state[str(item_key)] = cleaned
        return state

    def _save(self, state: InventoryByStorage) -> None:
        self._backend.save(self._key, state)

    @staticmethod
    def _apply(state: InventoryByStorage, item_key: str, storage_key: str, qty: Any) -> None:
        value = clamp_quantity(qty)
        if value == 0:
            per = state.get(item_key)
            if per is None:
                return
            per.pop(storage_key, None)
            if not per:
                del state[item_key]
        else:
            state.setdefault(item_key, {})[storage_key] = value

    # -------------------------------------------------------------------------
    # Whole ledger
    # -------------------------------------------------------------------------

    def get_all(self) -> InventoryByStorage:
        """Snapshot of the whole mapping."""
        return self._load()

    def clear_all(self) -> None:
        """Wipe every allocation."""
        self._backend.delete(self._key)
        logger.info("Cleared allocation ledger")

    # -------------------------------------------------------------------------
    # Per item
    # -------------------------------------------------------------------------

    def get_all_for_item(self, item_id: Any) -> PerStorage:
        """Storage -> quantity for one item ({} if it has no allocations)."""
        return dict(self._load().get(normalize_id(item_id), {}))

    def get(self, item_id: Any, storage_id: Any) -> Quantity:
        return self.get_all_for_item(item_id).get(normalize_id(storage_id), 0)

    def set(self, item_id: Any, storage_id: Any, quantity: Any) -> None:
        """Write a quantity; anything that clamps to 0 removes the entry."""
        state = self._load()
        self._apply(state, normalize_id(item_id), normalize_id(storage_id), quantity)
        self._save(state)

    def add(self, item_id: Any, storage_id: Any, delta: Any) -> None:
        """Adjust by delta; the result never goes below 0."""
        current = self.get(item_id, storage_id)
        self.set(item_id, storage_id, max(0, current + to_number(delta)))

    def total_for_item(self, item_id: Any) -> Quantity:
        return sum(self.get_all_for_item(item_id).values())

    # -------------------------------------------------------------------------
    # Per storage
    # -------------------------------------------------------------------------

    def entries_for_storage(self, storage_id: Any) -> List[StorageEntry]:
        """Items with a positive quantity at this storage, in mapping order."""
        storage_key = normalize_id(storage_id)
        entries = []
        for item_key, per in self._load().items():
            qty = per.get(storage_key, 0)
            if qty > 0:
                entries.append(StorageEntry(item_id=item_key, quantity=qty))
        return entries

    def total_for_storage(self, storage_id: Any) -> Quantity:
        return sum(entry.quantity for entry in self.entries_for_storage(storage_id))

    def clear_storage(self, storage_id: Any) -> None:
        """Drop this storage from every item. Saves only if something changed."""
        storage_key = normalize_id(storage_id)
        state = self._load()
        changed = False
        for item_key in list(state):
            per = state[item_key]
            if storage_key in per:
                del per[storage_key]
                changed = True
                if not per:
                    del state[item_key]
        if changed:
            self._save(state)
            logger.info("Cleared storage allocations", extra_fields={"storage_id": storage_key})

    # -------------------------------------------------------------------------
    # Transfer & import
    # -------------------------------------------------------------------------

    def transfer(self, item_id: Any, from_storage_id: Any, to_storage_id: Any, amount: Any) -> Quantity:
        """Move up to amount units of an item between storages.

        Saturating: at most the source quantity moves. Returns the quantity
        actually moved (0 when nothing was requested or available).
        """
        requested = clamp_quantity(amount)
        if requested <= 0:
            return 0

        item_key = normalize_id(item_id)
        from_key = normalize_id(from_storage_id)
        to_key = normalize_id(to_storage_id)

        state = self._load()
        per = state.get(item_key, {})
        from_qty = per.get(from_key, 0)
        moved = min(from_qty, requested)
        if moved <= 0:
            return 0
        if from_key == to_key:
            return moved

        to_qty = per.get(to_key, 0)
        self._apply(state, item_key, from_key, from_qty - moved)
        self._apply(state, item_key, to_key, to_qty + moved)
        self._save(state)

        logger.info(
            "Transferred stock",
            extra_fields={
                "item_id": item_key,
                "from_storage_id": from_key,
                "to_storage_id": to_key,
                "quantity": moved,
            },
        )
        return moved

    def import_for_storage(self, storage_id: Any, data: Any) -> int:
        """Overwrite quantities at one storage from an external payload.

        Accepts either a sequence of rows shaped {item_id|id, quantity|qty}
        or a flat {item_id: quantity} mapping. Rows that are not mappings or
        carry no id are skipped. Returns the number of rows applied.
        """
        if not data:
            return 0

        storage_key = normalize_id(storage_id)
        rows: Iterable

        if isinstance(data, Mapping):
            rows = data.items()
        elif isinstance(data, (list, tuple)):
            rows = (_row_pair(row) for row in data)
        else:
            logger.warning(
                "Unsupported import payload",
                extra_fields={"storage_id": storage_key, "type": type(data).__name__},
            )
            return 0

        state = self._load()
        applied = 0
        skipped = 0
        for pair in rows:
            if pair is None:
                skipped += 1
                continue
            raw_id, qty = pair
            item_key = normalize_id(raw_id)
            if not item_key:
                skipped += 1
                continue
            self._apply(state, item_key, storage_key, qty)
            applied += 1
        self._save(state)

        logger.info(
            "Imported storage quantities",
            extra_fields={"storage_id": storage_key, "applied": applied, "skipped": skipped},
        )
        return applied


def _row_pair(row: Any):
    """(item id, quantity) for one import row, or None if it is not a mapping."""
    if not isinstance(row, Mapping):
        return None
    raw_id = row.get("item_id")
    if raw_id is None:
        raw_id = row.get("id")
    qty = row.get("quantity")
    if qty is None:
        qty = row.get("qty")
    return raw_id, qty
